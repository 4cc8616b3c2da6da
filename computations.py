"""
Business logic and computations for ExpenseShare: split calculator and balance engine
"""
from __future__ import annotations
from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from models import Balance, Expense, ParticipantShare, SplitResult, User
from utils import parse_date

SPLIT_TOLERANCE = 0.01
CENT = Decimal("0.01")


def split_matches(total: float, shares: Iterable[ParticipantShare],
                  tolerance: float = SPLIT_TOLERANCE) -> bool:
    """True if the shares add up to total within tolerance"""
    return abs(sum(s.amount for s in shares) - float(total)) <= tolerance


def equal_split(amount: float, user_ids: Sequence[str]) -> List[ParticipantShare]:
    """
    Split amount evenly across user_ids.
    The first k-1 shares are truncated to cents; the last participant takes the
    remainder, so no share is negative and the shares sum to amount.
    No participants -> empty list.
    """
    k = len(user_ids)
    if k == 0:
        return []
    total = Decimal(str(amount))
    each = (total / k).quantize(CENT, rounding=ROUND_DOWN)
    last = (total - each * (k - 1)).quantize(CENT, rounding=ROUND_HALF_UP)
    shares = [ParticipantShare(uid, float(each)) for uid in user_ids[:-1]]
    shares.append(ParticipantShare(user_ids[-1], float(last)))
    return shares


def custom_split(amount: float, amounts: Mapping[str, float]) -> SplitResult:
    """
    Turn explicit per-user amounts into shares.
    Mismatch against the total is flagged, never corrected.
    """
    shares = [ParticipantShare(uid, float(v)) for uid, v in amounts.items()]
    total = sum(s.amount for s in shares)
    return SplitResult(
        shares=shares,
        total=total,
        mismatch=not split_matches(amount, shares),
    )


def compute_balances(users: Iterable[User], expenses: Iterable[Expense]) -> List[Balance]:
    """
    Derive per-user balances from scratch.
    For every share not held by the payer, the payer is owed that amount by the
    participant. Entries accumulate per direction; a pair is never netted.
    Shares and payers outside users are ignored.
    Returns one Balance per user, in user order.
    """
    balances = [Balance(user_id=u.id) for u in users]
    by_id: Dict[str, Balance] = {b.user_id: b for b in balances}

    for e in expenses:
        payer = by_id.get(e.paid_by)
        if payer is None:
            continue
        for share in e.participants:
            if share.user_id == e.paid_by:
                continue
            debtor = by_id.get(share.user_id)
            if debtor is None:
                continue
            payer.owed_by[share.user_id] = payer.owed_by.get(share.user_id, 0.0) + share.amount
            debtor.owes[e.paid_by] = debtor.owes.get(e.paid_by, 0.0) + share.amount

    for b in balances:
        b.net_balance = sum(b.owed_by.values()) - sum(b.owes.values())

    return balances


def filter_expenses_by_date(
    expenses: Iterable[Expense],
    start: Optional[date],
    end: Optional[date]
) -> List[Expense]:
    """Filter expenses by date range (inclusive)"""
    out = []
    for e in expenses:
        ed = parse_date(e.date)
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def compute_overview(
    users: Sequence[User],
    expenses: Sequence[Expense],
    user_id: Optional[str] = None
) -> dict:
    """
    Dashboard figures: total spent, expense count, member count,
    totals per category and (if user_id is given) that user's net balance.
    """
    by_category: Dict[str, float] = {}
    for e in expenses:
        by_category[e.category] = by_category.get(e.category, 0.0) + e.amount

    net = 0.0
    if user_id is not None:
        for b in compute_balances(users, expenses):
            if b.user_id == user_id:
                net = b.net_balance
                break

    return {
        "total": sum(e.amount for e in expenses),
        "count": len(expenses),
        "members": len(users),
        "by_category": by_category,
        "net_balance": net,
    }
