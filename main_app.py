"""
Main application window for ExpenseShare GUI
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional, Tuple

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from models import ValidationError
from ledger import LedgerStore
from config import get_categories, get_default_store
from utils import format_money, parse_date
from computations import compute_overview
from excel_export import export_excel
from gui_dialogs import ExpenseDialog
from csv_handler import export_expenses_to_csv, import_expenses_from_csv

log = logging.getLogger(__name__)


class ExpenseShareApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, store: Optional[LedgerStore] = None):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("ExpenseShare")
        self.master.geometry("1000x640")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.store: LedgerStore = store or get_default_store()
        self.categories = get_categories()

        self._build_menu()
        self._build_ui()
        self.store.subscribe(lambda _store: self.refresh_all())
        self.refresh_all()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_command(label="Import CSV…", command=self.import_csv_dialog)
        filem.add_separator()
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)
        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build main UI with tabs"""
        top = ttk.Frame(self)
        top.grid(row=0, column=0, sticky="ew")
        ttk.Button(top, text="Add Expense", command=self.add_expense).pack(side="right")

        nb = ttk.Notebook(self)
        nb.grid(row=1, column=0, sticky="nsew", pady=(6, 0))
        self.rowconfigure(1, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_overview = ttk.Frame(nb, padding=8)
        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_balances = ttk.Frame(nb, padding=8)
        self.tab_users = ttk.Frame(nb, padding=8)

        nb.add(self.tab_overview, text="Overview")
        nb.add(self.tab_expenses, text="Expenses")
        nb.add(self.tab_balances, text="Balances")
        nb.add(self.tab_users, text="Users")

        self._build_overview_tab()
        self._build_expenses_tab()
        self._build_balances_tab()
        self._build_users_tab()

    def _tree(self, parent, cols, widths, height=16):
        tree = ttk.Treeview(parent, columns=cols, show="headings", height=height)
        for c, w in zip(cols, widths):
            tree.heading(c, text=c)
            tree.column(c, width=w, anchor="w")
        return tree

    def _build_overview_tab(self):
        """Build overview tab: totals plus recent expenses"""
        self.tab_overview.columnconfigure(0, weight=1)
        stats = ttk.Frame(self.tab_overview)
        stats.grid(row=0, column=0, sticky="ew")

        ttk.Label(stats, text="You are").pack(side="left")
        self.me_var = tk.StringVar()
        self.me_combo = ttk.Combobox(stats, textvariable=self.me_var, width=18, state="readonly")
        self.me_combo.pack(side="left", padx=4)
        self.me_combo.bind("<<ComboboxSelected>>", lambda *_: self.refresh_overview())

        self.overview_var = tk.StringVar(value="")
        ttk.Label(self.tab_overview, textvariable=self.overview_var).grid(row=1, column=0, sticky="w", pady=8)

        ttk.Label(self.tab_overview, text="Recent expenses:").grid(row=2, column=0, sticky="w")
        self.recent_tree = self._tree(self.tab_overview, ("date", "description", "category", "paid_by", "amount"),
                                      [95, 260, 140, 140, 90], height=6)
        self.recent_tree.grid(row=3, column=0, sticky="nsew", pady=6)

        ttk.Label(self.tab_overview, text="Spending by category:").grid(row=4, column=0, sticky="w")
        self.cat_tree = self._tree(self.tab_overview, ("category", "total"), [200, 120], height=8)
        self.cat_tree.grid(row=5, column=0, sticky="nsew", pady=6)
        self.tab_overview.rowconfigure(5, weight=1)

    def _build_expenses_tab(self):
        """Build expenses tab, newest first"""
        self.tab_expenses.columnconfigure(0, weight=1)
        cols = ("date", "description", "category", "paid_by", "split", "amount", "participants")
        self.exp_tree = self._tree(self.tab_expenses, cols, [95, 220, 130, 120, 70, 90, 360], height=20)
        self.exp_tree.grid(row=0, column=0, sticky="nsew")
        self.tab_expenses.rowconfigure(0, weight=1)

        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=0, column=1, sticky="ns")

    def _build_balances_tab(self):
        """Build balances tab"""
        self.tab_balances.columnconfigure(0, weight=1)

        filt = ttk.Frame(self.tab_balances)
        filt.grid(row=0, column=0, sticky="ew")
        ttk.Label(filt, text="Start (YYYY-MM-DD)").pack(side="left")
        self.rep_start = tk.StringVar(value="")
        ttk.Entry(filt, textvariable=self.rep_start, width=12).pack(side="left", padx=4)
        ttk.Label(filt, text="End (YYYY-MM-DD)").pack(side="left")
        self.rep_end = tk.StringVar(value="")
        ttk.Entry(filt, textvariable=self.rep_end, width=12).pack(side="left", padx=4)
        ttk.Button(filt, text="Export Excel…", command=self.export_excel_dialog).pack(side="left", padx=8)

        cols = ("member", "owed_to_them", "they_owe", "net", "status")
        self.bal_tree = self._tree(self.tab_balances, cols, [160, 120, 120, 120, 160], height=8)
        self.bal_tree.grid(row=1, column=0, sticky="nsew", pady=6)

        ttk.Label(self.tab_balances, text="Who owes whom:").grid(row=2, column=0, sticky="w", pady=(10, 0))
        self.pair_tree = self._tree(self.tab_balances, ("from", "to", "amount"), [160, 160, 120], height=10)
        self.pair_tree.grid(row=3, column=0, sticky="nsew")
        self.tab_balances.rowconfigure(3, weight=1)

    def _build_users_tab(self):
        """Build member management tab"""
        self.tab_users.columnconfigure(0, weight=1)
        self.user_tree = self._tree(self.tab_users, ("name", "email", "expenses"), [200, 260, 90], height=14)
        self.user_tree.grid(row=0, column=0, sticky="nsew", pady=6)
        self.tab_users.rowconfigure(0, weight=1)

        controls = ttk.Frame(self.tab_users)
        controls.grid(row=1, column=0, sticky="ew")
        ttk.Label(controls, text="Name").pack(side="left")
        self.new_name_var = tk.StringVar()
        ttk.Entry(controls, textvariable=self.new_name_var, width=18).pack(side="left", padx=4)
        ttk.Label(controls, text="Email").pack(side="left")
        self.new_email_var = tk.StringVar()
        ttk.Entry(controls, textvariable=self.new_email_var, width=24).pack(side="left", padx=4)
        ttk.Button(controls, text="Add Member", command=self.add_user).pack(side="left", padx=4)
        ttk.Button(controls, text="Remove Selected", command=self.remove_selected_user).pack(side="left", padx=4)

        ttk.Label(self.tab_users,
                  text="Note: removing a member also removes every expense they paid for or took part in.").grid(
            row=2, column=0, sticky="w", pady=(8, 0))

    # ---------- Actions ----------
    def add_expense(self):
        """Open the add expense dialog; the dialog commits through the store"""
        dlg = ExpenseDialog(self.master, self.store, self.categories)
        self.master.wait_window(dlg)
        if dlg.result:
            log.info("expense added from dialog: %s", dlg.result.description)

    def add_user(self):
        """Add new member"""
        try:
            self.store.add_user(self.new_name_var.get(), self.new_email_var.get())
        except ValidationError as ex:
            messagebox.showerror("Add member", str(ex))
            return
        self.new_name_var.set("")
        self.new_email_var.set("")

    def remove_selected_user(self):
        """Remove selected member after confirmation"""
        sel = self.user_tree.selection()
        if not sel:
            return
        user_id = sel[0]
        if len(self.store.users) <= 1:
            messagebox.showerror("Remove member", "You need at least one user in the group.")
            return
        name = self.store.get_user(user_id).name
        n = self.store.expense_count_for(user_id)
        if not messagebox.askyesno("Remove member",
                                   f"Remove '{name}'? This will also remove {n} associated expense(s)."):
            return
        try:
            self.store.remove_user(user_id)
        except ValidationError as ex:
            messagebox.showerror("Remove member", str(ex))

    # ---------- File ops ----------
    def export_excel_dialog(self):
        """Export to Excel file"""
        dates = self._get_report_dates()
        if dates is None:
            return
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_excel(self.store, fp, *dates)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def export_csv_dialog(self):
        """Export current expenses to CSV file"""
        if not self.store.expenses:
            messagebox.showinfo("Export CSV", "No expenses to export.")
            return
        fp = filedialog.asksaveasfilename(
            title="Export Expenses to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            n = export_expenses_to_csv(self.store.expenses, fp, self.store.users)
            messagebox.showinfo("Export CSV", f"Exported {n} expenses to:\n{fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def import_csv_dialog(self):
        """Import expenses from CSV file; each row is validated by the store"""
        fp = filedialog.askopenfilename(
            title="Import Expenses from CSV",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            rows = import_expenses_from_csv(fp, self.store.users)
        except (OSError, KeyError, ValueError) as ex:
            messagebox.showerror("Import failed", str(ex))
            return
        if not rows:
            messagebox.showinfo("Import CSV", "No expenses found in CSV file.")
            return

        added = 0
        errors = []
        for i, row in enumerate(rows, start=2):
            try:
                self.store.add_expense(**row)
                added += 1
            except ValidationError as ex:
                errors.append(f"line {i}: {ex}")
        msg = f"Imported {added} of {len(rows)} expenses."
        if errors:
            msg += "\n\nSkipped:\n" + "\n".join(errors[:10])
        messagebox.showinfo("Import CSV", msg)

    # ---------- Refresh ----------
    def refresh_all(self):
        """Refresh all UI elements"""
        self.refresh_users()
        self.refresh_overview()
        self.refresh_expenses()
        self.refresh_balances()

    def _name(self, user_id: str) -> str:
        u = self.store.get_user(user_id)
        return u.name if u else "Unknown User"

    @staticmethod
    def _clear(tree):
        for iid in tree.get_children():
            tree.delete(iid)

    def refresh_overview(self):
        users = self.store.users
        names = [u.name for u in users]
        self.me_combo.configure(values=names)
        if self.me_var.get() not in names:
            self.me_var.set(names[0] if names else "")
        me = next((u.id for u in users if u.name == self.me_var.get()), None)

        ov = compute_overview(users, self.store.expenses, me)
        net = ov["net_balance"]
        mine = "You are owed" if net >= 0 else "You owe"
        self.overview_var.set(
            f"Total expenses: {format_money(ov['total'])} ({ov['count']} transactions)    "
            f"{mine}: {format_money(abs(net))}    Group members: {ov['members']}"
        )

        self._clear(self.recent_tree)
        for e in self.store.recent_expenses(5):
            self.recent_tree.insert("", "end", values=(
                e.date, e.description, e.category, self._name(e.paid_by), f"{e.amount:.2f}"))

        self._clear(self.cat_tree)
        for cat, total in sorted(ov["by_category"].items(), key=lambda kv: -kv[1]):
            self.cat_tree.insert("", "end", values=(cat, f"{total:.2f}"))

    def refresh_expenses(self):
        """Refresh expenses tree view"""
        self._clear(self.exp_tree)
        for e in self.store.recent_expenses():
            parts = ", ".join(f"{self._name(p.user_id)}:{p.amount:.2f}" for p in e.participants)
            self.exp_tree.insert("", "end", iid=e.id, values=(
                e.date, e.description, e.category, self._name(e.paid_by),
                e.split_mode, f"{e.amount:.2f}", parts))

    def refresh_users(self):
        """Refresh member list"""
        self._clear(self.user_tree)
        for u in self.store.users:
            self.user_tree.insert("", "end", iid=u.id, values=(
                u.name, u.email, self.store.expense_count_for(u.id)))

    def _get_report_dates(self) -> Optional[Tuple[Optional[date], Optional[date]]]:
        """Parse report date range from inputs; None if either is invalid"""
        out = []
        for label, var in (("Start", self.rep_start), ("End", self.rep_end)):
            s = var.get().strip()
            if not s:
                out.append(None)
                continue
            try:
                out.append(parse_date(s))
            except ValueError:
                messagebox.showerror("Invalid date", f"{label} date must be YYYY-MM-DD.")
                return None
        return out[0], out[1]

    def refresh_balances(self):
        """Refresh balances tab from the store's current balances"""
        self._clear(self.bal_tree)
        self._clear(self.pair_tree)
        for b in self.store.balances:
            if abs(b.net_balance) < 0.01:
                status = "Settled up"
            elif b.net_balance > 0:
                status = "Gets back"
            else:
                status = "Owes"
            self.bal_tree.insert("", "end", values=(
                self._name(b.user_id),
                f"{sum(b.owed_by.values()):.2f}",
                f"{sum(b.owes.values()):.2f}",
                f"{b.net_balance:.2f}",
                status,
            ))
            for creditor, amt in b.owes.items():
                self.pair_tree.insert("", "end", values=(
                    self._name(b.user_id), self._name(creditor), f"{amt:.2f}"))
