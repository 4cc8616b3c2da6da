"""
CSV export and import functionality for ExpenseShare

Members are written by name, as ids are regenerated every session.
"""
from __future__ import annotations
import csv
import logging
from collections import Counter
from typing import Dict, Iterable, List

from models import Expense, User

log = logging.getLogger(__name__)

COLUMNS = ['id', 'date', 'created_at', 'description', 'category', 'amount',
           'paid_by', 'split_mode', 'participants']


def export_expenses_to_csv(expenses: Iterable[Expense], filepath: str, users: Iterable[User]) -> int:
    """
    Export expenses to CSV file, one row per expense.
    paid_by holds the payer's name; participants holds "name:amount;name:amount".
    Returns the number of rows written.
    """
    names = {u.id: u.name for u in users}
    n = 0
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)

        for e in expenses:
            parts = ';'.join(f"{names.get(p.user_id, p.user_id)}:{p.amount}" for p in e.participants)
            writer.writerow([
                e.id,
                e.date,
                e.created_at,
                e.description,
                e.category,
                e.amount,
                names.get(e.paid_by, e.paid_by),
                e.split_mode,
                parts,
            ])
            n += 1
    log.info("exported %d expense(s) to %s", n, filepath)
    return n


def _ids_by_name(users: Iterable[User]) -> Dict[str, str]:
    """name -> id for names held by exactly one member"""
    users = list(users)
    counts = Counter(u.name for u in users)
    return {u.name: u.id for u in users if counts[u.name] == 1}


def import_expenses_from_csv(filepath: str, users: Iterable[User]) -> List[dict]:
    """
    Read expenses from CSV file.
    Returns keyword arguments for LedgerStore.add_expense, one dict per row,
    with member names mapped to the ids of users. Unknown or ambiguous names
    are passed through unchanged, so the store rejects that row.
    """
    ids = _ids_by_name(users)
    rows = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            participants: Dict[str, float] = {}
            if row['participants']:
                for pair in row['participants'].split(';'):
                    if ':' in pair:
                        k, v = pair.rsplit(':', 1)
                        k = k.strip()
                        participants[ids.get(k, k)] = float(v.strip())

            payer = row['paid_by'].strip()
            rows.append(dict(
                description=row['description'],
                amount=float(row['amount']),
                paid_by=ids.get(payer, payer),
                split_mode=row['split_mode'],
                participants=participants,
                category=row.get('category', ''),
                date=row['date'],
            ))

    log.info("read %d expense row(s) from %s", len(rows), filepath)
    return rows
