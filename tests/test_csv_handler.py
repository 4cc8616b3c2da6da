import csv

import pytest

from config import get_default_store
from csv_handler import COLUMNS, export_expenses_to_csv, import_expenses_from_csv
from models import SPLIT_CUSTOM, SPLIT_EQUAL, ValidationError


def test_export_writes_members_by_name(abc, tmp_path):
    store, a, b, c = abc
    store.add_split_expense("Dinner", 90, a.id, SPLIT_EQUAL, [a.id, b.id, c.id],
                            category="Food & Dining", date="2024-03-01")
    store.add_split_expense("Taxi", 25, b.id, SPLIT_CUSTOM, {a.id: 10, c.id: 15}, date="2024-03-02")
    fp = tmp_path / "expenses.csv"

    assert export_expenses_to_csv(store.expenses, str(fp), store.users) == 2

    with open(fp, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == COLUMNS
    assert rows[0]["description"] == "Dinner"
    assert rows[0]["paid_by"] == "A"
    assert rows[0]["participants"] == "A:30.0;B:30.0;C:30.0"
    assert rows[1]["paid_by"] == "B"
    assert rows[1]["split_mode"] == SPLIT_CUSTOM


def test_import_maps_names_to_store_ids(abc, tmp_path):
    store, a, b, c = abc
    store.add_split_expense("Dinner", 90, a.id, SPLIT_EQUAL, [a.id, b.id, c.id], date="2024-03-01")
    fp = tmp_path / "expenses.csv"
    export_expenses_to_csv(store.expenses, str(fp), store.users)

    rows = import_expenses_from_csv(str(fp), store.users)
    assert rows == [dict(
        description="Dinner",
        amount=90.0,
        paid_by=a.id,
        split_mode=SPLIT_EQUAL,
        participants={a.id: 30.0, b.id: 30.0, c.id: 30.0},
        category="Other",
        date="2024-03-01",
    )]

    store.add_expense(**rows[0])
    assert len(store.expenses) == 2
    assert store.balance_for(a.id).net_balance == pytest.approx(120)


def test_csv_reimports_into_a_later_session(tmp_path):
    first = get_default_store(str(tmp_path))
    alex, sarah, mike = first.users
    first.add_split_expense("Groceries", 60, alex.id, SPLIT_EQUAL, [alex.id, sarah.id, mike.id])
    first.add_split_expense("Cab", 20, sarah.id, SPLIT_CUSTOM, {alex.id: 5, mike.id: 15})
    fp = tmp_path / "expenses.csv"
    export_expenses_to_csv(first.expenses, str(fp), first.users)

    second = get_default_store(str(tmp_path))
    assert {u.id for u in second.users}.isdisjoint(u.id for u in first.users)
    for row in import_expenses_from_csv(str(fp), second.users):
        second.add_expense(**row)

    def nets(store):
        return {store.get_user(b.user_id).name: b.net_balance for b in store.balances}

    assert len(second.expenses) == 2
    assert nets(second) == pytest.approx(nets(first))


def test_unknown_or_ambiguous_names_are_rejected_by_store(store, tmp_path):
    a = store.add_user("Sam", "sam1@example.com")
    store.add_user("Sam", "sam2@example.com")
    store.add_user("Kim", "kim@example.com")
    fp = tmp_path / "expenses.csv"
    fp.write_text(",".join(COLUMNS) + "\n"
                  "1,2024-01-01,,Pizza,Other,10,Sam,equal,Kim:10\n"
                  "2,2024-01-01,,Pizza,Other,10,Kim,equal,Nobody:10\n", encoding="utf-8")

    rows = import_expenses_from_csv(str(fp), store.users)
    assert rows[0]["paid_by"] == "Sam"
    for row in rows:
        with pytest.raises(ValidationError):
            store.add_expense(**row)
    assert store.expenses == []
    assert a in store.users


def test_import_bad_amount_raises(tmp_path):
    fp = tmp_path / "bad.csv"
    fp.write_text(",".join(COLUMNS) + "\n1,2024-01-01,,X,Other,lots,A,equal,A:1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        import_expenses_from_csv(str(fp), [])
