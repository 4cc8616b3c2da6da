"""
Dialog windows for ExpenseShare GUI
"""
from __future__ import annotations
from typing import Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import SPLIT_CUSTOM, SPLIT_EQUAL, Expense, ValidationError
from ledger import LedgerStore
from utils import equal_share_text, today_str, safe_float
from computations import SPLIT_TOLERANCE, equal_split


class ExpenseDialog(tk.Toplevel):
    """Dialog for adding an expense"""

    def __init__(self, master, store: LedgerStore, categories: List[str]):
        super().__init__(master)
        self.title("Add New Expense")
        self.resizable(False, False)
        self.store = store
        self.users = store.users
        self.result: Optional[Expense] = None

        self._bind_enter_to_ok()

        names = [u.name for u in self.users]

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_description = tk.StringVar()
        self.v_amount = tk.StringVar(value="")
        self.v_payer = tk.StringVar(value="")
        self.v_category = tk.StringVar(value="")
        self.v_date = tk.StringVar(value=today_str())
        self.v_mode = tk.StringVar(value=SPLIT_EQUAL)

        r = 0
        ttk.Label(frm, text="Description").grid(row=r, column=0, sticky="w")
        ttk.Entry(frm, textvariable=self.v_description, width=32).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Amount (₹)").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_amount, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Paid by").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_payer, values=names,
                     width=22, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Category").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_category, values=categories,
                     width=22, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Date (YYYY-MM-DD)").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_date, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Split").grid(row=r, column=0, sticky="w", pady=(8, 2))
        modes = ttk.Frame(frm)
        modes.grid(row=r, column=1, sticky="w", pady=(8, 2))
        ttk.Radiobutton(modes, text="Split equally", value=SPLIT_EQUAL,
                        variable=self.v_mode, command=self._mode_changed).pack(side="left")
        ttk.Radiobutton(modes, text="Custom amounts", value=SPLIT_CUSTOM,
                        variable=self.v_mode, command=self._mode_changed).pack(side="left", padx=6)
        r += 1

        # Participants
        parts = ttk.LabelFrame(frm, text="Participants", padding=6)
        parts.grid(row=r, column=0, columnspan=2, sticky="ew", pady=(6, 0))
        self.selected: Dict[str, tk.BooleanVar] = {}
        self.custom: Dict[str, tk.StringVar] = {}
        self.custom_entries: Dict[str, ttk.Entry] = {}
        for i, u in enumerate(self.users):
            sel = tk.BooleanVar(value=False)
            amt = tk.StringVar(value="")
            self.selected[u.id] = sel
            self.custom[u.id] = amt
            ttk.Checkbutton(parts, text=u.name, variable=sel,
                            command=self._update_split_label).grid(row=i, column=0, sticky="w")
            ent = ttk.Entry(parts, textvariable=amt, width=10)
            ent.grid(row=i, column=1, sticky="w", padx=6)
            self.custom_entries[u.id] = ent
            amt.trace_add("write", lambda *_: self._update_split_label())
        r += 1

        self.split_var = tk.StringVar(value="")
        ttk.Label(frm, textvariable=self.split_var).grid(
            row=r, column=0, columnspan=2, sticky="w", pady=(8, 0)
        )
        self.v_amount.trace_add("write", lambda *_: self._update_split_label())
        r += 1

        btns = ttk.Frame(frm)
        btns.grid(row=r, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="Add Expense", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self._mode_changed()
        self.grab_set()
        self.transient(master)

    def _bind_enter_to_ok(self):
        """Bind Enter/Return to OK"""

        def on_enter(event=None):
            self._ok()
            return "break"

        self.bind("<Return>", on_enter)
        self.bind("<KP_Enter>", on_enter)

    def _selected_ids(self) -> List[str]:
        return [u.id for u in self.users if self.selected[u.id].get()]

    def _mode_changed(self):
        state = "normal" if self.v_mode.get() == SPLIT_CUSTOM else "disabled"
        for ent in self.custom_entries.values():
            ent.configure(state=state)
        self._update_split_label()

    def _update_split_label(self):
        """Show per-person equal share, or custom total against the amount"""
        amt = safe_float(self.v_amount.get(), 0.0)
        ids = self._selected_ids()
        if not ids:
            self.split_var.set("Select at least one participant.")
            return
        if self.v_mode.get() == SPLIT_EQUAL:
            self.split_var.set(equal_share_text(equal_split(amt, ids)))
            return
        total = sum(safe_float(self.custom[uid].get(), 0.0) for uid in ids)
        ok = abs(total - amt) <= SPLIT_TOLERANCE
        mark = "" if ok else "  (must match the amount)"
        self.split_var.set(f"Total: ₹{total:.2f} / ₹{amt:.2f}{mark}")

    def _ok(self):
        """Validate through the store and close"""
        payer = next((u.id for u in self.users if u.name == self.v_payer.get()), None)
        if payer is None:
            messagebox.showerror("Missing payer", "Please select who paid.", parent=self)
            return
        if not self.v_category.get():
            messagebox.showerror("Missing category", "Please select a category.", parent=self)
            return

        ids = self._selected_ids()
        if self.v_mode.get() == SPLIT_EQUAL:
            selection = ids
        else:
            selection = {uid: safe_float(self.custom[uid].get(), 0.0) for uid in ids}

        try:
            self.result = self.store.add_split_expense(
                self.v_description.get(),
                self.v_amount.get().strip(),
                payer,
                self.v_mode.get(),
                selection,
                category=self.v_category.get(),
                date=self.v_date.get(),
            )
        except ValidationError as ex:
            messagebox.showerror("Invalid expense", str(ex), parent=self)
            return

        self.destroy()

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()
