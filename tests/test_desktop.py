from decimal import Decimal

import pytest

from iexpense.formatting import AmountTier
from iexpense.models import Category, ExpenseRecord

pytest.importorskip("tkinter")

from desktop.app import tkapp  # noqa: E402


def test_personal_column_comes_first():
    assert tkapp.COLUMN_ORDER == (Category.PERSONAL, Category.BUSINESS)


@pytest.mark.parametrize(
    "amount, tag",
    [(Decimal("1200"), "large"), (Decimal("45.10"), "medium"), (Decimal("4.50"), "small")],
)
def test_row_for(amount, tag):
    record = ExpenseRecord.create("Rent", Category.BUSINESS, amount)
    iid, values, row_tag = tkapp.row_for(record, "USD")
    assert iid == record.id
    assert values[0] == "Rent"
    assert values[1].startswith("USD ")
    assert row_tag == tag


def test_every_tier_has_a_color():
    assert set(tkapp.TIER_COLORS) == set(AmountTier)


def test_currency_option_is_validated():
    assert tkapp._parse_currency(" eur ") == "EUR"
    with pytest.raises(SystemExit) as excinfo:
        tkapp.main(["--currency", "dollars"])
    assert excinfo.value.code == 2
