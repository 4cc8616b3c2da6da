import pytest

from ledger import LedgerStore


@pytest.fixture
def store():
    return LedgerStore()


@pytest.fixture
def abc(store):
    """Store with members A, B and C"""
    a = store.add_user("A", "a@example.com")
    b = store.add_user("B", "b@example.com")
    c = store.add_user("C", "c@example.com")
    return store, a, b, c
