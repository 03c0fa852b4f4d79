"""Tkinter desktop application for iExpense."""

from __future__ import annotations

import argparse
import logging
import tkinter as tk
from pathlib import Path
from tkinter import messagebox, ttk
from typing import Iterable, List, Optional, Tuple

from iexpense.config import Settings, configure_logging
from iexpense.exceptions import ValidationError
from iexpense.formatting import AmountTier, amount_tier, format_amount
from iexpense.models import Category, ExpenseRecord
from iexpense.services import ExpenseStore, StoreChange
from iexpense.storage import FileStorage
from iexpense.validators import record_from_payload, validate_currency

logger = logging.getLogger(__name__)

PRIMARY_BG = "#0f172a"
SECONDARY_BG = "#1e293b"
ACCENT_BG = "#1d4ed8"
ACCENT_ACTIVE_BG = "#2563eb"
TEXT_PRIMARY = "#e2e8f0"
TEXT_MUTED = "#94a3b8"
DIVIDER = "#64748b"

TIER_COLORS = {
    AmountTier.LARGE: "#f87171",
    AmountTier.MEDIUM: "#60a5fa",
    AmountTier.SMALL: TEXT_PRIMARY,
}

COLUMN_ORDER = (Category.PERSONAL, Category.BUSINESS)


def row_for(record: ExpenseRecord, currency: str) -> Tuple[str, Tuple[str, str], str]:
    """Return the tree item id, displayed values and color tag for a record."""
    return record.id, (record.name, format_amount(record.amount, currency)), amount_tier(record.amount).value


class ExpenseColumn(ttk.Frame):
    """One category's list of expenses."""

    def __init__(self, master: tk.Misc, store: ExpenseStore, category: Category, currency: str) -> None:
        super().__init__(master, padding=12, style="Panel.TFrame")
        self.store = store
        self.category = category
        self.currency = currency

        self.columnconfigure(0, weight=1)
        self.rowconfigure(2, weight=1)

        ttk.Label(self, text=category.label, style="Column.TLabel").grid(row=0, column=0, sticky="w")
        self.total_var = tk.StringVar(value=format_amount(store.total(category), currency))
        ttk.Label(self, textvariable=self.total_var, style="FormLabel.TLabel").grid(
            row=1, column=0, sticky="w", pady=(0, 8)
        )

        self.tree = ttk.Treeview(
            self,
            columns=("name", "amount"),
            show="headings",
            height=12,
            style="App.Treeview",
        )
        self.tree.heading("name", text="Name", anchor="w")
        self.tree.heading("amount", text="Amount", anchor="w")
        self.tree.column("name", width=180, anchor="w")
        self.tree.column("amount", width=120, anchor="w")
        for tier, color in TIER_COLORS.items():
            self.tree.tag_configure(tier.value, foreground=color)

        vsb = ttk.Scrollbar(self, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscroll=vsb.set)
        self.tree.grid(row=2, column=0, sticky="nsew")
        vsb.grid(row=2, column=1, sticky="ns")

        ttk.Button(
            self,
            text="Delete Selected",
            command=self.delete_selected,
            style="Secondary.TButton",
        ).grid(row=3, column=0, columnspan=2, sticky="e", pady=8)

    def populate(self) -> None:
        self.tree.delete(*self.tree.get_children())
        for iid, values, tag in (row_for(record, self.currency) for record in self.store.category_view(self.category)):
            self.tree.insert("", "end", iid=iid, values=values, tags=(tag,))
        self.total_var.set(format_amount(self.store.total(self.category), self.currency))

    def delete_selected(self) -> None:
        selection = self.tree.selection()
        if not selection:
            messagebox.showinfo("No selection", "Please select an expense to delete.", parent=self)
            return
        selected = set(selection)
        positions = {index for index, record in enumerate(self.store.records) if record.id in selected}
        # The store notifies the window, which re-renders every column.
        self.store.remove(positions)


class AddExpenseDialog(tk.Toplevel):
    """Collects name, type and amount for a new expense."""

    def __init__(self, master: tk.Misc, store: ExpenseStore, currency: str) -> None:
        super().__init__(master, bg=SECONDARY_BG)
        self.store = store
        self.title("Add new expense")
        self.resizable(False, False)
        self.transient(master)

        self.name_var = tk.StringVar()
        self.type_var = tk.StringVar(value=Category.BUSINESS.label)
        self.amount_var = tk.StringVar(value="0.00")

        form = ttk.Frame(self, padding=16, style="Panel.TFrame")
        form.grid(row=0, column=0, sticky="nsew")
        form.columnconfigure(0, weight=1)

        ttk.Label(form, text="Name", style="FormLabel.TLabel").grid(row=0, column=0, sticky="w", pady=4)
        name_entry = ttk.Entry(form, textvariable=self.name_var, style="App.TEntry")
        name_entry.grid(row=1, column=0, sticky="ew", pady=(0, 8))

        ttk.Label(form, text="Type", style="FormLabel.TLabel").grid(row=2, column=0, sticky="w", pady=4)
        ttk.Combobox(
            form,
            textvariable=self.type_var,
            values=[category.label for category in Category],
            state="readonly",
            style="App.TCombobox",
        ).grid(row=3, column=0, sticky="ew", pady=(0, 8))

        ttk.Label(form, text=f"Amount ({currency})", style="FormLabel.TLabel").grid(
            row=4, column=0, sticky="w", pady=4
        )
        amount_entry = ttk.Entry(form, textvariable=self.amount_var, style="App.TEntry")
        amount_entry.grid(row=5, column=0, sticky="ew", pady=(0, 8))
        amount_entry.bind("<FocusOut>", self._handle_amount_focus_out)

        button_row = ttk.Frame(form, style="Panel.TFrame")
        button_row.grid(row=6, column=0, sticky="e", pady=4)
        ttk.Button(button_row, text="Cancel", command=self.destroy, style="Secondary.TButton").grid(
            row=0, column=0, padx=4
        )
        ttk.Button(button_row, text="Save", command=self.submit, style="Primary.TButton").grid(
            row=0, column=1, padx=4
        )

        name_entry.focus_set()
        self.bind("<Return>", lambda _event: self.submit())
        self.bind("<Escape>", lambda _event: self.destroy())

    def submit(self) -> None:
        payload = {
            "name": self.name_var.get(),
            "category": self.type_var.get(),
            "amount": self.amount_var.get(),
        }
        try:
            record = record_from_payload(payload)
        except ValidationError as exc:
            messagebox.showerror("Invalid Expense", str(exc), parent=self)
            return
        self.store.add(record)
        self.destroy()

    def _handle_amount_focus_out(self, _event: object) -> None:
        formatted = format_amount(self.amount_var.get(), "").strip()
        if formatted:
            self.amount_var.set(formatted)


class ExpenseTrackerApp(tk.Tk):
    """Main application window."""

    def __init__(self, data_dir: Path, key: str, currency: str = "USD") -> None:
        super().__init__()
        self.title("iExpense")
        self.geometry("760x560")
        self.minsize(640, 420)
        self.configure(bg=PRIMARY_BG)

        self._configure_styles()

        self.currency = currency
        self.store = ExpenseStore(FileStorage(data_dir), key)
        self.columns: List[ExpenseColumn] = []

        self._build_layout()
        self._unsubscribe = self.store.subscribe(self._handle_change)
        self.protocol("WM_DELETE_WINDOW", self._close)
        self.refresh_all()

    def _configure_styles(self) -> None:
        style = ttk.Style(self)
        try:
            style.theme_use("clam")
        except tk.TclError:
            pass

        style.configure("TFrame", background=PRIMARY_BG)
        style.configure("TLabel", background=PRIMARY_BG, foreground=TEXT_PRIMARY)

        style.configure("Panel.TFrame", background=SECONDARY_BG, relief="flat")
        style.configure("Header.TFrame", background=PRIMARY_BG)
        style.configure("Divider.TFrame", background=DIVIDER)

        style.configure("FormLabel.TLabel", background=SECONDARY_BG, foreground=TEXT_MUTED, font=("Segoe UI", 9))
        style.configure("Header.TLabel", background=PRIMARY_BG, foreground=TEXT_PRIMARY, font=("Segoe UI", 20, "bold"))
        style.configure("Column.TLabel", background=SECONDARY_BG, foreground=TEXT_PRIMARY, font=("Segoe UI", 18, "bold"))

        style.configure(
            "App.TEntry",
            fieldbackground=SECONDARY_BG,
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            insertcolor=TEXT_PRIMARY,
            bordercolor=ACCENT_BG,
        )
        style.configure(
            "App.TCombobox",
            fieldbackground=SECONDARY_BG,
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            arrowcolor=TEXT_PRIMARY,
        )
        style.map("App.TCombobox", fieldbackground=[("readonly", SECONDARY_BG)])

        style.configure(
            "Primary.TButton",
            background=ACCENT_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=ACCENT_BG,
            padding=(18, 6),
        )
        style.map("Primary.TButton", background=[("active", ACCENT_ACTIVE_BG)])
        style.configure(
            "Secondary.TButton",
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=SECONDARY_BG,
            padding=(14, 6),
        )
        style.map("Secondary.TButton", background=[("active", ACCENT_BG)])

        style.configure(
            "App.Treeview",
            background=SECONDARY_BG,
            fieldbackground=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=SECONDARY_BG,
            rowheight=28,
        )
        style.configure("App.Treeview.Heading", background=SECONDARY_BG, foreground=TEXT_MUTED, relief="flat")
        style.map("App.Treeview", background=[("selected", ACCENT_BG)])

    def _build_layout(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        header = ttk.Frame(self, padding=20, style="Header.TFrame")
        header.grid(row=0, column=0, sticky="ew")
        header.columnconfigure(0, weight=1)
        ttk.Label(header, text="iExpense", style="Header.TLabel").grid(row=0, column=0, sticky="w")
        ttk.Button(
            header,
            text="+ Add Expense",
            command=self.open_add_dialog,
            style="Primary.TButton",
        ).grid(row=0, column=1, sticky="e")

        body = ttk.Frame(self, padding=(20, 0, 20, 20))
        body.grid(row=1, column=0, sticky="nsew")
        body.rowconfigure(0, weight=1)

        for position, category in enumerate(COLUMN_ORDER):
            if position:
                ttk.Frame(body, width=1, style="Divider.TFrame").grid(row=0, column=2 * position - 1, sticky="ns")
            column = ExpenseColumn(body, self.store, category, self.currency)
            column.grid(row=0, column=2 * position, sticky="nsew")
            body.columnconfigure(2 * position, weight=1)
            self.columns.append(column)

    def open_add_dialog(self) -> None:
        dialog = AddExpenseDialog(self, self.store, self.currency)
        dialog.grab_set()

    def refresh_all(self) -> None:
        for column in self.columns:
            column.populate()

    def _handle_change(self, change: StoreChange) -> None:
        self.refresh_all()
        if not change.result:
            logger.warning("Expense change was not saved: %s", change.result.error)
            messagebox.showwarning(
                "Not Saved",
                f"Your change is shown but could not be saved:\n{change.result.error}",
                parent=self,
            )

    def _close(self) -> None:
        self._unsubscribe()
        self.destroy()


def _parse_currency(value: str) -> str:
    try:
        return validate_currency(value.strip().upper())
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc



def main(argv: Optional[Iterable[str]] = None) -> None:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Tkinter desktop app for iExpense")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        type=Path,
        help=f"Directory containing expense data (default: {settings.data_dir})",
    )
    parser.add_argument("--key", default=settings.storage_key, help="Storage key of the expense list")
    parser.add_argument("--currency", default=settings.currency, type=_parse_currency)
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(settings.log_level)
    app = ExpenseTrackerApp(args.data_dir, args.key, args.currency)
    app.mainloop()


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
