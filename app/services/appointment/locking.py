# app/services/appointment/locking.py
"""Mutual exclusion for the booking commit step.

Bookings are serialized per (business, day). Inside one process a keyed
threading lock does it; on PostgreSQL a transaction-scoped advisory lock on the
same key extends it across workers and is released by commit or rollback.
"""
from contextlib import contextmanager
from datetime import date
import hashlib
import logging
import threading
from typing import Dict, Hashable, Tuple
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import Timeout

logger = logging.getLogger(__name__)


class KeyedLock:
    """One lock per key, created on demand and dropped when unused"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, Tuple[threading.Lock, int]] = {}

    def _checkout(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, users + 1)
            return lock

    def _checkin(self, key: Hashable):
        with self._guard:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @contextmanager
    def hold(self, key: Hashable, timeout: float):
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=timeout):
                raise Timeout("Could not reserve the time slot in time, please retry")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)

    def __len__(self):
        with self._guard:
            return len(self._locks)


booking_locks = KeyedLock()


def advisory_key(business_id: UUID, day: date) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock"""
    digest = hashlib.sha256(f"{business_id}:{day.isoformat()}".encode()).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


def acquire_database_lock(db: Session, business_id: UUID, day: date, timeout: float):
    """Take the cross-process booking lock when the database provides one"""
    if db.get_bind().dialect.name != "postgresql":
        return

    try:
        db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'"))
        db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": advisory_key(business_id, day)},
        )
    except OperationalError as e:
        db.rollback()
        logger.warning(f"Booking lock timed out for business {business_id} on {day}: {e}")
        raise Timeout("Could not reserve the time slot in time, please retry") from e


@contextmanager
def booking_window_lock(db: Session, business_id: UUID, day: date, timeout: float):
    """Hold the booking lock for one business day for the duration of the block"""
    with booking_locks.hold((business_id, day), timeout):
        acquire_database_lock(db, business_id, day, timeout)
        yield
