import pytest

from computations import (
    compute_balances,
    compute_overview,
    custom_split,
    equal_split,
    filter_expenses_by_date,
)
from models import SPLIT_EQUAL, Expense, ParticipantShare, User
from utils import parse_date

A = User("a", "A", "a@example.com")
B = User("b", "B", "b@example.com")
C = User("c", "C", "c@example.com")


def make_expense(eid, amount, paid_by, shares, category="Other", date="2024-01-01"):
    return Expense(
        id=eid,
        description=eid,
        amount=amount,
        paid_by=paid_by,
        split_mode=SPLIT_EQUAL,
        participants=tuple(ParticipantShare(u, v) for u, v in shares.items()),
        category=category,
        date=date,
        created_at="2024-01-01T00:00:00",
    )


def by_user(balances):
    return {b.user_id: b for b in balances}


def test_equal_split_even():
    shares = equal_split(90, ["a", "b", "c"])
    assert [s.amount for s in shares] == [30.0, 30.0, 30.0]
    assert [s.user_id for s in shares] == ["a", "b", "c"]


def test_equal_split_remainder_goes_to_last():
    shares = equal_split(100, ["a", "b", "c"])
    assert [s.amount for s in shares] == [33.33, 33.33, 33.34]
    assert sum(s.amount for s in shares) == pytest.approx(100)


@pytest.mark.parametrize("amount,k", [(10, 3), (0.05, 2), (1234.57, 7), (99.99, 4), (1, 1)])
def test_equal_split_sums_to_total(amount, k):
    shares = equal_split(amount, [str(i) for i in range(k)])
    assert len(shares) == k
    assert abs(sum(s.amount for s in shares) - amount) < 0.01


def test_equal_split_no_participants():
    assert equal_split(50, []) == []


def test_custom_split_flags_mismatch():
    result = custom_split(100, {"a": 40, "b": 70})
    assert result.mismatch
    assert result.total == pytest.approx(110)
    assert [s.amount for s in result.shares] == [40.0, 70.0]


def test_custom_split_within_tolerance():
    result = custom_split(100, {"a": 40, "b": 59.995})
    assert not result.mismatch


def test_dinner_scenario():
    e = make_expense("dinner", 90, "a", {"a": 30, "b": 30, "c": 30})
    bal = by_user(compute_balances([A, B, C], [e]))

    assert bal["a"].owed_by == {"b": 30, "c": 30}
    assert bal["a"].owes == {}
    assert bal["a"].net_balance == 60
    assert bal["b"].owes == {"a": 30}
    assert bal["b"].net_balance == -30
    assert bal["c"].owes == {"a": 30}
    assert bal["c"].net_balance == -30


def test_balances_follow_user_order():
    assert [b.user_id for b in compute_balances([C, A, B], [])] == ["c", "a", "b"]


def test_no_expenses_gives_zero_balances():
    for b in compute_balances([A, B], []):
        assert b.owes == {} and b.owed_by == {}
        assert b.net_balance == 0


def test_pairwise_amounts_accumulate_without_netting():
    e1 = make_expense("e1", 20, "a", {"a": 10, "b": 10})
    e2 = make_expense("e2", 30, "a", {"b": 30})
    e3 = make_expense("e3", 8, "b", {"a": 4, "b": 4})
    bal = by_user(compute_balances([A, B], [e1, e2, e3]))

    assert bal["a"].owed_by == {"b": 40}
    assert bal["a"].owes == {"b": 4}
    assert bal["b"].owes == {"a": 40}
    assert bal["b"].owed_by == {"a": 4}
    assert bal["a"].net_balance == pytest.approx(36)


def test_payer_only_share_is_noop():
    e = make_expense("solo", 50, "a", {"a": 50})
    bal = by_user(compute_balances([A, B], [e]))
    assert bal["a"].owed_by == {} and bal["a"].net_balance == 0


def test_unknown_users_are_ignored():
    e1 = make_expense("e1", 20, "a", {"a": 10, "ghost": 10})
    e2 = make_expense("e2", 20, "ghost", {"a": 20})
    bal = by_user(compute_balances([A], [e1, e2]))
    assert bal["a"].owes == {} and bal["a"].owed_by == {}
    assert "ghost" not in bal


def test_net_balances_are_conserved():
    exps = [
        make_expense("e1", 100, "a", {"a": 33.33, "b": 33.33, "c": 33.34}),
        make_expense("e2", 45.5, "b", {"a": 20, "c": 25.5}),
        make_expense("e3", 12, "c", {"c": 2, "a": 10}),
    ]
    total = sum(b.net_balance for b in compute_balances([A, B, C], exps))
    assert total == pytest.approx(0, abs=1e-9)


def test_compute_balances_is_idempotent():
    exps = [make_expense("e1", 90, "a", {"a": 30, "b": 30, "c": 30})]
    assert compute_balances([A, B, C], exps) == compute_balances([A, B, C], exps)


def test_filter_expenses_by_date():
    exps = [
        make_expense("jan", 10, "a", {"b": 10}, date="2024-01-15"),
        make_expense("feb", 10, "a", {"b": 10}, date="2024-02-15"),
        make_expense("mar", 10, "a", {"b": 10}, date="2024-03-15"),
    ]
    out = filter_expenses_by_date(exps, parse_date("2024-02-01"), parse_date("2024-03-15"))
    assert [e.id for e in out] == ["feb", "mar"]
    assert len(filter_expenses_by_date(exps, None, None)) == 3


def test_overview():
    exps = [
        make_expense("e1", 90, "a", {"a": 30, "b": 30, "c": 30}, category="Food & Dining"),
        make_expense("e2", 10, "b", {"a": 10}, category="Travel"),
        make_expense("e3", 5, "b", {"b": 5}, category="Food & Dining"),
    ]
    ov = compute_overview([A, B, C], exps, "a")
    assert ov["total"] == 105
    assert ov["count"] == 3
    assert ov["members"] == 3
    assert ov["by_category"] == {"Food & Dining": 95, "Travel": 10}
    assert ov["net_balance"] == 50


def test_overview_without_user():
    assert compute_overview([A], [], None)["net_balance"] == 0


@pytest.mark.parametrize("amount,k", [(1, 40), (0.07, 10), (0.29, 7), (100, 3), (0.3, 3), (5, 6)])
def test_equal_split_shares_never_negative(amount, k):
    shares = equal_split(amount, [str(i) for i in range(k)])
    assert all(s.amount >= 0 for s in shares)
    assert all(s.amount <= shares[-1].amount for s in shares)
    assert sum(s.amount for s in shares) == pytest.approx(amount, abs=1e-9)


def test_equal_split_truncates_and_gives_remainder_to_last():
    shares = equal_split(1, [str(i) for i in range(40)])
    assert shares[0].amount == 0.02
    assert shares[-1].amount == 0.22
