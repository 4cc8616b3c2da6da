"""
Configuration loading for ExpenseShare: seed members and expense categories
"""
from __future__ import annotations
import json
import logging
import os
from typing import List, Optional, Tuple

from models import User
from ledger import LedgerStore
from utils import app_dir, new_id

log = logging.getLogger(__name__)

DEFAULT_USERS: List[Tuple[str, str]] = [
    ("Alex Chen", "alex@example.com"),
    ("Sarah Kim", "sarah@example.com"),
    ("Mike Johnson", "mike@example.com"),
]

DEFAULT_CATEGORIES: List[str] = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Travel",
    "Healthcare",
    "Other",
]


def load_users(path: str) -> List[Tuple[str, str]]:
    """Load seed members (name, email) from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    out = []
    for u in data.get("users", []):
        name = str(u.get("name", "")).strip()
        email = str(u.get("email", "")).strip()
        if name and email:
            out.append((name, email))
        else:
            log.warning("skipping incomplete user entry in %s: %r", path, u)
    return out


def load_categories(path: str) -> List[str]:
    """Load expense categories from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [str(c) for c in data.get("categories", []) if str(c).strip()]
    except FileNotFoundError:
        return []


def get_categories(base: Optional[str] = None) -> List[str]:
    base = base or app_dir()
    return load_categories(os.path.join(base, "categories.json")) or list(DEFAULT_CATEGORIES)


def get_default_store(base: Optional[str] = None) -> LedgerStore:
    """Create a store seeded with the configured (or default) members"""
    base = base or app_dir()
    seeds = load_users(os.path.join(base, "users.json"))
    if not seeds:
        seeds = DEFAULT_USERS  # fallback

    users = [User(id=new_id(), name=name, email=email) for name, email in seeds]
    log.info("seeded ledger with %d member(s) from %s", len(users), base)
    return LedgerStore(users)
