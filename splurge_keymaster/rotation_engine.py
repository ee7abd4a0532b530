"""Stateless rotation operations over an in-memory key store.

Every function mutates the given store in place and performs no I/O. Callers
persist the store after any mutating call. Missing names are reported as a
False or None return value, never as an exception.
"""

import logging
from datetime import datetime, timezone

from splurge_keymaster.models import KeyRecord, KeyStore

logger = logging.getLogger(__name__)


def _utc_now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _clear_current(store: KeyStore) -> None:
    for record in store:
        record.current = False


def find_active(store: KeyStore) -> KeyRecord | None:
    """Get the active record marked current without changing the store.

    Args:
        store: Key store to inspect

    Returns:
        The current active record, or None if no active record is current
    """
    for record in store:
        if record.active and record.current:
            return record
    return None


def get_active(store: KeyStore) -> KeyRecord | None:
    """Get the current key, adopting the first active record if needed.

    If no active record is marked current, the first active record in store
    order becomes current. Any other record left marked current, such as an
    inactive record picked with ``select_current``, loses the flag.

    Args:
        store: Key store to inspect

    Returns:
        The current record, or None if the store has no active record
    """
    current = find_active(store)
    if current is None:
        current = next((record for record in store if record.active), None)
        if current is not None:
            logger.debug("Adopted first active key as current", extra={
                "key_name": current.name,
                "event": "current_adopted"
            })

    for record in store:
        record.current = record is current
    return current


def ensure_current(store: KeyStore) -> KeyRecord | None:
    """Normalize a freshly loaded store and return its current key.

    Exhausted records lose their active and current flags, only the first
    current active record keeps the current flag, and a current record is
    adopted when none is set.

    Args:
        store: Key store to normalize

    Returns:
        The current record, or None if the store has no active record
    """
    for record in store:
        if record.exhausted:
            record.active = False
            record.current = False
        elif not record.active:
            record.current = False

    return get_active(store)


def advance(store: KeyStore, from_name: str) -> KeyRecord | None:
    """Select the next active record after ``from_name`` in circular order.

    All current flags are cleared first. Every position after ``from_name``
    is tried exactly once, wrapping around the end of the store and ending
    on ``from_name`` itself. If ``from_name`` is not in the store, the first
    active record is selected instead.

    Args:
        store: Key store to rotate
        from_name: Name of the record to rotate away from

    Returns:
        The new current record, or None if no record is active
    """
    if not len(store):
        return None

    _clear_current(store)

    start = store.index_of(from_name)
    if start == -1:
        for record in store:
            if record.active:
                record.current = True
                return record
        return None

    size = len(store)
    for offset in range(1, size + 1):
        candidate = store[(start + offset) % size]
        if candidate.active:
            candidate.current = True
            logger.info("Advanced to next key", extra={
                "from_key": from_name,
                "key_name": candidate.name,
                "event": "key_advanced"
            })
            return candidate

    logger.warning("No active keys left to advance to", extra={
        "from_key": from_name,
        "event": "pool_empty"
    })
    return None


def mark_exhausted(
    store: KeyStore,
    name: str,
    *,
    now: datetime | None = None
) -> bool:
    """Mark a record as exhausted.

    The record loses its active and current flags. No replacement is
    selected; call ``advance`` for that.

    Args:
        store: Key store to update
        name: Name of the record to exhaust
        now: Timestamp to record (defaults to the current UTC time)

    Returns:
        True if the record was found, False otherwise
    """
    record = store.find(name)
    if record is None:
        return False

    record.active = False
    record.current = False
    record.exhausted = True
    record.last_marked_exhausted = _utc_now(now)

    logger.info("Key marked exhausted", extra={
        "key_name": name,
        "event": "key_exhausted"
    })
    return True


def activate(store: KeyStore, name: str) -> bool:
    """Make a record eligible for rotation again.

    The current flag is left untouched.

    Returns:
        True if the record was found, False otherwise
    """
    record = store.find(name)
    if record is None:
        return False

    record.active = True
    record.exhausted = False

    logger.info("Key activated", extra={
        "key_name": name,
        "event": "key_activated"
    })
    return True


def reset_all(store: KeyStore) -> None:
    """Return every record to the initial rotation state.

    All records become active and not exhausted, and the first record
    becomes current.
    """
    for record in store:
        record.active = True
        record.exhausted = False
        record.current = False

    if len(store):
        store[0].current = True

    logger.info("Key pool reset", extra={
        "total_keys": len(store),
        "event": "pool_reset"
    })


def select_current(
    store: KeyStore,
    name: str,
    *,
    now: datetime | None = None
) -> bool:
    """Make the named record current regardless of its active flag.

    Args:
        store: Key store to update
        name: Name of the record to select
        now: Timestamp to record as last use (defaults to the current UTC time)

    Returns:
        True if the record was found, False otherwise
    """
    record = store.find(name)
    if record is None:
        return False

    _clear_current(store)
    record.current = True
    record.last_used = _utc_now(now)

    logger.info("Key selected as current", extra={
        "key_name": name,
        "event": "key_selected"
    })
    return True


def touch(
    store: KeyStore,
    name: str,
    *,
    now: datetime | None = None
) -> bool:
    """Stamp the last use time of a record."""
    record = store.find(name)
    if record is None:
        return False

    record.last_used = _utc_now(now)
    return True
