"""
Excel export functionality for ExpenseShare
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from ledger import LedgerStore
from computations import compute_balances, filter_expenses_by_date

log = logging.getLogger(__name__)


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_columns(ws, cols, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in cols:
            ws.cell(r, c).number_format = "0.00"


def export_excel(
    store: LedgerStore,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export ledger to Excel file with sheets:
    - Expenses: one row per expense, one share column per member
    - Balances: net position per member
    - Pairwise: who owes whom, accumulated per direction
    Only expenses dated within [start, end] are included.
    """
    wb = Workbook()
    wb.remove(wb.active)

    users = store.users
    names = {u.id: u.name for u in users}
    exps = filter_expenses_by_date(store.expenses, start, end)

    # Expenses sheet
    ws = wb.create_sheet("Expenses")
    headers = ["date", "description", "category", "paid by", "split", "amount"] + [u.name for u in users]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in exps:
        shares = {p.user_id: p.amount for p in e.participants}
        row = [e.date, e.description, e.category, names.get(e.paid_by, e.paid_by), e.split_mode, e.amount]
        row += [shares.get(u.id, "") for u in users]
        ws.append(row)

    if exps:
        ws.append(["TOTAL"] + [""] * (len(headers) - 1))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        for col in range(6, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"
    _money_columns(ws, range(6, len(headers) + 1))
    _autosize_columns(ws)

    balances = compute_balances(users, exps)

    # Balances sheet
    ws = wb.create_sheet("Balances")
    ws.append(["Member", "Email", "Owed to them", "They owe", "Net"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    emails = {u.id: u.email for u in users}
    for b in balances:
        ws.append([
            names[b.user_id],
            emails[b.user_id],
            sum(b.owed_by.values()),
            sum(b.owes.values()),
            b.net_balance,
        ])
    _money_columns(ws, range(3, 6))
    _autosize_columns(ws)

    # Pairwise sheet
    ws = wb.create_sheet("Pairwise")
    ws.append(["Debtor", "Creditor", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for b in balances:
        for creditor, amt in b.owes.items():
            ws.append([names[b.user_id], names.get(creditor, creditor), amt])
    _money_columns(ws, [3])
    _autosize_columns(ws)

    wb.save(filepath)
    log.info("exported %d expense(s) to workbook %s", len(exps), filepath)
