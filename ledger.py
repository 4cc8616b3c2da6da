"""
Ledger store for ExpenseShare.

The store owns the users and expenses of one group. Every mutating call
validates its input completely before touching state, so a failed call leaves
the ledger exactly as it was. After each committed mutation balances are
recomputed from scratch and subscribers are notified synchronously; a
subscriber that raises is logged and skipped.
"""
from __future__ import annotations
import logging
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Union

from models import (
    SPLIT_CUSTOM,
    SPLIT_EQUAL,
    SPLIT_MODES,
    Balance,
    Expense,
    ParticipantShare,
    User,
    ValidationError,
)
from computations import compute_balances, custom_split, equal_split, split_matches
from utils import new_id, now_str, parse_date, today_str

log = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"

Participants = Union[Mapping[str, float], Iterable[ParticipantShare], Iterable[tuple]]
Listener = Callable[["LedgerStore"], None]


def _to_shares(participants: Participants) -> List[ParticipantShare]:
    """Accept a {user_id: amount} mapping, ParticipantShare items or (user_id, amount) pairs"""
    if participants is None:
        return []
    if isinstance(participants, Mapping):
        items = list(participants.items())
    else:
        items = [(p.user_id, p.amount) if isinstance(p, ParticipantShare) else p
                 for p in participants]
    shares = []
    for item in items:
        try:
            uid, amount = item
            shares.append(ParticipantShare(str(uid), float(amount)))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid participant share: {item!r}")
    return shares


def _text(value) -> str:
    """Stripped string form of an input field; None becomes empty"""
    return "" if value is None else str(value).strip()


def _to_date_str(value) -> str:
    """YYYY-MM-DD from a date, datetime or string; blank -> today"""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    s = _text(value) or today_str()
    try:
        parse_date(s)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD.")
    return s


def _to_amount(amount) -> float:
    if isinstance(amount, bool) or not isinstance(amount, (Real, Decimal, str)):
        raise ValidationError(f"Amount must be a number, got {amount!r}")
    try:
        return float(amount)
    except ValueError:
        raise ValidationError(f"Amount must be a number, got {amount!r}")


class LedgerStore:
    """Users and expenses of one group, plus balances derived from them"""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: List[User] = list(users or [])
        self._expenses: List[Expense] = []
        self._listeners: List[Listener] = []
        self._balances: List[Balance] = compute_balances(self._users, self._expenses)

    # ---------- Read side ----------
    @property
    def users(self) -> List[User]:
        return list(self._users)

    @property
    def expenses(self) -> List[Expense]:
        """Expenses in insertion order"""
        return list(self._expenses)

    @property
    def balances(self) -> List[Balance]:
        return list(self._balances)

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)

    def balance_for(self, user_id: str) -> Optional[Balance]:
        return next((b for b in self._balances if b.user_id == user_id), None)

    def recent_expenses(self, limit: Optional[int] = None) -> List[Expense]:
        """Newest first, for display"""
        out = list(reversed(self._expenses))
        return out if limit is None else out[:limit]

    # ---------- Observers ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener(store), called after every committed mutation. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _committed(self) -> None:
        self._balances = compute_balances(self._users, self._expenses)
        # state is committed at this point; listener errors are logged, not raised
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                log.exception("ledger listener %r failed", listener)

    # ---------- Users ----------
    def add_user(self, name: str, email: str) -> User:
        name = _text(name)
        email = _text(email)
        if not name or not email:
            log.debug("rejected user: name=%r email=%r", name, email)
            raise ValidationError("Name and email are required.")

        user = User(id=new_id(), name=name, email=email)
        self._users.append(user)
        log.info("added user %s (%s)", user.id, user.name)
        self._committed()
        return user

    def remove_user(self, user_id: str) -> List[Expense]:
        """Remove a user and every expense referencing them. Returns the removed expenses."""
        if self.get_user(user_id) is None:
            raise ValidationError(f"Unknown user: {user_id}")
        if len(self._users) <= 1:
            log.debug("refused to remove last user %s", user_id)
            raise ValidationError("You need at least one user in the group.")

        removed = [e for e in self._expenses if e.references(user_id)]
        self._users = [u for u in self._users if u.id != user_id]
        self._expenses = [e for e in self._expenses if not e.references(user_id)]
        log.info("removed user %s and %d expense(s)", user_id, len(removed))
        self._committed()
        return removed

    # ---------- Expenses ----------
    def add_expense(
        self,
        description: str,
        amount: float,
        paid_by: str,
        split_mode: str,
        participants: Participants,
        category: str = DEFAULT_CATEGORY,
        date: Optional[str] = None,
    ) -> Expense:
        """Validate and record an expense. Raises ValidationError without side effects."""
        description = _text(description)
        if not description:
            raise ValidationError("Description is required.")

        amount = _to_amount(amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero.")

        if self.get_user(paid_by) is None:
            raise ValidationError(f"Unknown payer: {paid_by}")

        if split_mode not in SPLIT_MODES:
            raise ValidationError(f"Unknown split mode: {split_mode!r}")

        shares = _to_shares(participants)
        if not shares:
            raise ValidationError("Select at least one participant.")

        known = {u.id for u in self._users}
        seen = set()
        for s in shares:
            if s.user_id not in known:
                raise ValidationError(f"Unknown participant: {s.user_id}")
            if s.user_id in seen:
                raise ValidationError(f"Duplicate participant: {s.user_id}")
            if s.amount < 0:
                raise ValidationError(f"Share of {s.user_id} must not be negative.")
            seen.add(s.user_id)

        if not split_matches(amount, shares):
            total = sum(s.amount for s in shares)
            log.debug("rejected expense %r: shares sum %.2f, amount %.2f", description, total, amount)
            raise ValidationError(
                f"Split amounts total {total:.2f} but the expense is {amount:.2f}."
            )

        date = _to_date_str(date)

        expense = Expense(
            id=new_id(),
            description=description,
            amount=amount,
            paid_by=paid_by,
            split_mode=split_mode,
            participants=tuple(shares),
            category=_text(category) or DEFAULT_CATEGORY,
            date=date,
            created_at=now_str(),
        )
        self._expenses.append(expense)
        log.info("added expense %s %r %.2f paid by %s", expense.id, description, amount, paid_by)
        self._committed()
        return expense

    def add_split_expense(
        self,
        description: str,
        amount: float,
        paid_by: str,
        split_mode: str,
        selection: Union[Sequence[str], Mapping[str, float]],
        category: str = DEFAULT_CATEGORY,
        date: Optional[str] = None,
    ) -> Expense:
        """
        Run the split calculator, then add_expense.
        selection is a list of user ids for an equal split, or a
        {user_id: amount} mapping for a custom split.
        """
        total = _to_amount(amount)
        if split_mode == SPLIT_EQUAL:
            try:
                user_ids = [str(uid) for uid in selection]
            except TypeError:
                raise ValidationError(f"Equal split needs a list of participant ids, got {selection!r}")
            shares = equal_split(total, user_ids)
        elif split_mode == SPLIT_CUSTOM:
            if not isinstance(selection, Mapping):
                raise ValidationError("Custom split needs an amount per participant.")
            result = custom_split(total, {s.user_id: s.amount for s in _to_shares(selection)})
            if result.mismatch:
                raise ValidationError(
                    f"Split amounts total {result.total:.2f} but the expense is {total:.2f}."
                )
            shares = result.shares
        else:
            raise ValidationError(f"Unknown split mode: {split_mode!r}")
        return self.add_expense(description, total, paid_by, split_mode, shares, category, date)

    def expense_count_for(self, user_id: str) -> int:
        """Number of expenses a removal of user_id would cascade to"""
        return sum(1 for e in self._expenses if e.references(user_id))

