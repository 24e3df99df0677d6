# aetherchat/services/session/session_ledger.py
"""
Session ledger arithmetic for customer products (prepaid session packages).

remaining_sessions is derived: max(0, total_sessions - used_sessions). Every
mutation below recomputes it; the write path calls these before committing.
At-most-once consumption per appointment is the caller's contract, enforced
through the appointment's is_session_used check-and-set.
"""
from datetime import datetime, timedelta
from typing import Optional

from aetherchat.core.exceptions import NoSessionsRemaining, SessionLedgerError
from aetherchat.utils.datetime_utils import as_utc, utcnow


def recompute_remaining_sessions(customer_product):
    total = customer_product.total_sessions or 0
    used = customer_product.used_sessions or 0
    customer_product.remaining_sessions = max(0, total - used)
    return customer_product


def set_total_sessions(customer_product, total_sessions: int):
    if total_sessions is None or total_sessions < 0:
        raise SessionLedgerError(f"Total sessions cannot be negative: {total_sessions}")
    customer_product.total_sessions = total_sessions
    return recompute_remaining_sessions(customer_product)


def set_used_sessions(customer_product, used_sessions: int):
    if used_sessions is None or used_sessions < 0:
        raise SessionLedgerError(f"Used sessions cannot be negative: {used_sessions}")
    customer_product.used_sessions = used_sessions
    return recompute_remaining_sessions(customer_product)


def consume_session(customer_product, used_at: Optional[datetime] = None):
    """
    Use one session of the package.

    Raises NoSessionsRemaining, leaving the counters untouched, when the
    package is exhausted.
    """
    recompute_remaining_sessions(customer_product)
    if customer_product.remaining_sessions <= 0:
        raise NoSessionsRemaining(getattr(customer_product, "id", None))

    customer_product.used_sessions = (customer_product.used_sessions or 0) + 1
    customer_product.last_used_date = used_at or utcnow()
    return recompute_remaining_sessions(customer_product)


def compute_expiry_date(assigned_date: datetime, expiry_days: Optional[int]) -> Optional[datetime]:
    if not expiry_days:
        return None
    return assigned_date + timedelta(days=expiry_days)


def is_expired(customer_product, as_of: Optional[datetime] = None) -> bool:
    expiry_date = customer_product.expiry_date
    if expiry_date is None:
        return False
    return as_utc(as_of or utcnow()) > as_utc(expiry_date)
