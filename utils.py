"""
Utility functions for ExpenseShare application
"""
from __future__ import annotations
import os
import uuid
from datetime import date, datetime


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def now_str() -> str:
    """Current local time as ISO timestamp (seconds precision)"""
    return datetime.now().isoformat(timespec="seconds")


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def new_id() -> str:
    return str(uuid.uuid4())


def safe_float(x: str, default: float = 0.0) -> float:
    """Convert string to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def format_money(amount: float) -> str:
    return f"₹{amount:.2f}"


def app_dir() -> str:
    """
    Get application data directory: ~/.expenseshare, or $EXPENSESHARE_HOME if set.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("EXPENSESHARE_HOME") or os.path.expanduser("~/.expenseshare")
    os.makedirs(path, exist_ok=True)
    return path


def equal_share_text(shares) -> str:
    """Label for an equal split; names the larger last share when it carries a remainder"""
    if not shares:
        return "Select at least one participant."
    first, last = shares[0].amount, shares[-1].amount
    text = f"Each person pays: {format_money(first)}"
    if abs(last - first) >= 0.005:
        text += f" (last person: {format_money(last)})"
    return text
