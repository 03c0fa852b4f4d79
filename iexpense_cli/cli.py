"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from iexpense.config import Settings, configure_logging, validate_log_level
from iexpense.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from iexpense.formatting import format_amount
from iexpense.models import Category, ExpenseRecord
from iexpense.services import ExpenseStore, SaveResult
from iexpense.storage import FileStorage
from iexpense.validators import record_from_payload, sanitize_amount_input, validate_currency


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(sanitize_amount_input(value) or "0")
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError("Amount must be a finite number")
    if amount < 0:
        raise argparse.ArgumentTypeError("Amount cannot be negative")
    return value


def _parse_category(value: str) -> Category:
    try:
        return Category.parse(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_currency(value: str) -> str:
    try:
        return validate_currency(value.strip().upper())
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_log_level(value: str) -> str:
    try:
        return validate_log_level(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _load_store(data_dir: Path, key: str) -> ExpenseStore:
    return ExpenseStore(FileStorage(data_dir), key)


def _format_record(index: int, record: ExpenseRecord, currency: str) -> str:
    return (
        f"{index:>3}  {record.name}  [{record.category.label}]  "
        f"{format_amount(record.amount, currency)}\n"
        f"     id: {record.id}"
    )


def _check_saved(result: SaveResult) -> None:
    if not result:
        raise result.error or PersistenceError("Unable to save expenses")


def handle_add(args: argparse.Namespace, store: ExpenseStore) -> None:
    record = record_from_payload(
        {"name": args.name, "category": args.category, "amount": args.amount}
    )
    _check_saved(store.add(record))
    print("Expense added:\n" + _format_record(len(store) - 1, record, args.currency))


def handle_list(args: argparse.Namespace, store: ExpenseStore) -> None:
    indexed = list(enumerate(store.records))
    if args.category is not None:
        indexed = [(index, record) for index, record in indexed if record.category == args.category]
    if not indexed:
        print("No expenses found.")
        return
    total = store.total(args.category)
    print(f"Found {len(indexed)} expenses (total {format_amount(total, args.currency)}):")
    for index, record in indexed:
        print(_format_record(index, record, args.currency))


def handle_remove(args: argparse.Namespace, store: ExpenseStore) -> None:
    before = len(store)
    _check_saved(store.remove(set(args.indices)))
    print(f"Removed {before - len(store)} expense(s).")


def handle_delete(args: argparse.Namespace, store: ExpenseStore) -> None:
    _check_saved(store.delete(args.id))
    print(f"Expense {args.id} deleted.")


def handle_summary(args: argparse.Namespace, store: ExpenseStore) -> None:
    for category in Category:
        count = len(store.category_view(category))
        total = format_amount(store.total(category), args.currency)
        print(f"{category.label:<10} {count:>4} expense(s)  {total}")
    print(f"{'Total':<10} {len(store):>4} expense(s)  {format_amount(store.total(), args.currency)}")


HANDLERS = {
    "add": handle_add,
    "list": handle_list,
    "remove": handle_remove,
    "delete": handle_delete,
    "summary": handle_summary,
}


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or Settings.from_env()
    parser = argparse.ArgumentParser(description="iExpense CLI")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        type=Path,
        help=f"Directory to store expense data (default: {settings.data_dir})",
    )
    parser.add_argument(
        "--key",
        default=settings.storage_key,
        help=f"Storage key of the expense list (default: {settings.storage_key})",
    )
    parser.add_argument(
        "--currency",
        default=settings.currency,
        type=_parse_currency,
        help=f"Display currency code (default: {settings.currency})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        type=_parse_log_level,
        help=f"Logging level (default: {settings.log_level})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a new expense")
    add_parser.add_argument("name")
    add_parser.add_argument(
        "--category",
        "--type",
        dest="category",
        type=_parse_category,
        default=Category.BUSINESS,
        help="business or personal (default: business)",
    )
    add_parser.add_argument("--amount", type=_parse_amount, default="0.00")

    list_parser = subparsers.add_parser("list", help="List expenses")
    list_parser.add_argument("--category", "--type", dest="category", type=_parse_category)

    remove_parser = subparsers.add_parser("remove", help="Remove expenses by list position")
    remove_parser.add_argument("indices", nargs="+", type=int)

    delete_parser = subparsers.add_parser("delete", help="Delete an expense by id")
    delete_parser.add_argument("id")

    subparsers.add_parser("summary", help="Show totals per category")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = Settings.from_env()
    except ValidationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level)
        store = _load_store(args.data_dir, args.key)
        HANDLERS[args.command](args, store)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
