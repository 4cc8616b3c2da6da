"""
Data models for ExpenseShare
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

SPLIT_EQUAL = "equal"
SPLIT_CUSTOM = "custom"
SPLIT_MODES = (SPLIT_EQUAL, SPLIT_CUSTOM)


class ValidationError(ValueError):
    """Raised when ledger input is rejected. Nothing is mutated."""


@dataclass
class User:
    """Group member"""
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class ParticipantShare:
    """Amount one participant owes for a single expense"""
    user_id: str
    amount: float


@dataclass(frozen=True)
class Expense:
    """Recorded expense. Never edited after creation."""
    id: str
    description: str
    amount: float
    paid_by: str  # user id
    split_mode: str  # SPLIT_EQUAL or SPLIT_CUSTOM
    participants: Tuple[ParticipantShare, ...]
    category: str
    date: str  # YYYY-MM-DD
    created_at: str  # ISO timestamp

    def participant_ids(self) -> List[str]:
        return [p.user_id for p in self.participants]

    def references(self, user_id: str) -> bool:
        """True if the user paid for or takes part in this expense"""
        return self.paid_by == user_id or user_id in self.participant_ids()


@dataclass
class Balance:
    """Derived balance of one user; recomputed, never stored"""
    user_id: str
    owes: Dict[str, float] = field(default_factory=dict)  # creditor id -> amount
    owed_by: Dict[str, float] = field(default_factory=dict)  # debtor id -> amount
    net_balance: float = 0.0  # positive -> is owed money


@dataclass
class SplitResult:
    """Outcome of a custom split"""
    shares: List[ParticipantShare]
    total: float
    mismatch: bool
