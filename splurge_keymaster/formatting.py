"""Plain-text rendering of key store results for operators."""

from datetime import datetime

from splurge_keymaster.constants import Constants
from splurge_keymaster.crypto_utils import CryptoUtils
from splurge_keymaster.models import KeyRecord, KeyStatistics, KeyStore

EMPTY_LIST_TEXT = "Key list is empty"


def _format_time(value: datetime | None, time_format: str, default: str | None) -> str | None:
    return value.astimezone().strftime(time_format) if value is not None else default


def _status_line(record: KeyRecord) -> str:
    parts = ["Active" if record.active else "Inactive"]
    if record.current:
        parts.append("current")
    if record.exhausted:
        parts.append("exhausted")
    return ", ".join(parts)


def format_key_list(store: KeyStore) -> str:
    """Render the store as a numbered list in rotation order.

    Values are shown as fingerprints only.
    """
    if not len(store):
        return EMPTY_LIST_TEXT

    lines = []
    for position, record in enumerate(store, start=1):
        marker = "+" if record.active else "-"
        flags = ""
        if record.current:
            flags += "[current] "
        if record.exhausted:
            flags += "[exhausted] "
        used = _format_time(record.last_used, Constants.LIST_TIME_FORMAT(), None)
        used_text = f"used {used}" if used else "never used"
        fingerprint = CryptoUtils.fingerprint(record.value)
        lines.append(f"{position}. {marker} {flags}{record.name} ({fingerprint}) - {used_text}")

    stats = store.statistics()
    return (
        "Key list\n\n"
        + "\n".join(lines)
        + f"\n\nStatistics: {stats.active} active | {stats.inactive} inactive"
    )


def format_key_info(record: KeyRecord, *, reveal_password: bool = False) -> str:
    """Render every field of a single key."""
    lines = [
        "Key details",
        "",
        f"Name: {record.name}",
        f"Status: {_status_line(record)}",
        f"Value: {record.value}",
    ]
    if record.email:
        lines.append(f"Email: {record.email}")
    if record.password:
        password = record.password if reveal_password else CryptoUtils.mask(record.password)
        lines.append(f"Password: {password}")
    lines.append(
        f"Last used: {_format_time(record.last_used, Constants.DETAIL_TIME_FORMAT(), 'never')}"
    )
    lines.append(
        "Marked exhausted: "
        f"{_format_time(record.last_marked_exhausted, Constants.DETAIL_TIME_FORMAT(), 'never')}"
    )
    return "\n".join(lines)


def format_active_key(
    record: KeyRecord,
    store: KeyStore,
    *,
    title: str = "Current key"
) -> str:
    """Render the key an operator should use now, with pool counts."""
    stats = store.statistics()
    return (
        f"{title}\n\n"
        f"Name: {record.name}\n"
        f"Key: {record.value}\n\n"
        f"Statistics: {stats.active}/{stats.total} active keys"
    )


def format_statistics(stats: KeyStatistics) -> str:
    """Render summary counts for the key store."""
    if not stats.total:
        return EMPTY_LIST_TEXT

    return (
        "Key statistics\n\n"
        f"Total keys: {stats.total}\n"
        f"Active: {stats.active}\n"
        f"Exhausted: {stats.exhausted}\n"
        f"Unused: {stats.unused}\n"
        f"Last used: {stats.last_used_name or 'no data'}"
    )
