"""Data models for the Splurge Keymaster system."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from splurge_keymaster.exceptions import DuplicateKeyNameError


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string to a datetime object."""
    if value is None or isinstance(value, datetime):
        return value
    if value == "":
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Naive timestamps are stored as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_flag(value: Any, default: bool) -> bool:
    """Parse a stored boolean flag, accepting "true" and "false" strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"invalid flag value: {value!r}")


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class KeyRecord:
    """A single rotated credential plus its lifecycle flags."""

    name: str
    value: str
    active: bool = True
    current: bool = False
    exhausted: bool = False
    last_used: datetime | None = None
    last_marked_exhausted: datetime | None = None
    email: str | None = None
    password: str | None = None

    def __post_init__(self) -> None:
        """Validate and process fields after initialization."""
        if not self.name:
            raise ValueError("name cannot be empty")
        if self.value is None or self.value == "":
            raise ValueError("value cannot be empty")

        # Parse datetime strings if provided
        self.last_used = _parse_datetime(self.last_used)
        self.last_marked_exhausted = _parse_datetime(self.last_marked_exhausted)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the keys.json field names."""
        result = {
            "name": self.name,
            "value": self.value,
            "active": self.active,
            "current": self.current,
            "exhausted": self.exhausted,
            "lastUsed": _format_datetime(self.last_used),
            "lastMarkedExhausted": _format_datetime(self.last_marked_exhausted),
        }
        if self.email:
            result["email"] = self.email
        if self.password:
            result["password"] = self.password
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KeyRecord":
        """Create KeyRecord from dictionary.

        Missing flags and optional fields are treated as not set.

        Raises:
            KeyError: If name or value is missing
            ValueError: If a flag is neither a boolean nor "true"/"false"
        """
        return cls(
            name=data["name"],
            value=data["value"],
            active=_parse_flag(data.get("active"), True),
            current=_parse_flag(data.get("current"), False),
            exhausted=_parse_flag(data.get("exhausted"), False),
            last_used=data.get("lastUsed"),
            last_marked_exhausted=data.get("lastMarkedExhausted"),
            email=data.get("email") or None,
            password=data.get("password") or None,
        )


@dataclass
class KeyStatistics:
    """Summary counts for a key store."""

    total: int = 0
    active: int = 0
    exhausted: int = 0
    unused: int = 0
    last_used_name: str | None = None

    @property
    def inactive(self) -> int:
        return self.total - self.active

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "active": self.active,
            "inactive": self.inactive,
            "exhausted": self.exhausted,
            "unused": self.unused,
            "last_used": self.last_used_name,
        }


@dataclass
class KeyStore:
    """Ordered collection of key records.

    The sequence order is the rotation order. It only changes when a record
    is appended or removed.
    """

    records: list[KeyRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[KeyRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> KeyRecord:
        return self.records[index]

    def names(self) -> list[str]:
        """Get record names in rotation order."""
        return [record.name for record in self.records]

    def has_name(self, name: str) -> bool:
        """Check if a record name exists."""
        return self.find(name) is not None

    def find(self, name: str) -> KeyRecord | None:
        """Get a record by name, or None if absent."""
        for record in self.records:
            if record.name == name:
                return record
        return None

    def index_of(self, name: str) -> int:
        """Get the position of a record by name, or -1 if absent."""
        for index, record in enumerate(self.records):
            if record.name == name:
                return index
        return -1

    def active_records(self) -> list[KeyRecord]:
        return [record for record in self.records if record.active]

    def current_records(self) -> list[KeyRecord]:
        return [record for record in self.records if record.current]

    def add(self, record: KeyRecord) -> KeyRecord:
        """Append a record to the end of the rotation order.

        The first record added to an empty store becomes current.

        Args:
            record: Record to append

        Returns:
            The appended record

        Raises:
            DuplicateKeyNameError: If a record with the same name exists
        """
        if self.has_name(record.name):
            raise DuplicateKeyNameError(f"Key name '{record.name}' already exists")

        record.current = not self.records
        self.records.append(record)
        return record

    def remove(self, name: str) -> bool:
        """Remove a record by name.

        Returns:
            True if a record was removed, False if the name was not found
        """
        index = self.index_of(name)
        if index == -1:
            return False
        del self.records[index]
        return True

    def statistics(self) -> KeyStatistics:
        """Compute summary counts for the store."""
        used = [record for record in self.records if record.last_used is not None]
        last_used = max(used, key=lambda record: record.last_used) if used else None
        return KeyStatistics(
            total=len(self.records),
            active=len(self.active_records()),
            exhausted=sum(1 for record in self.records if record.exhausted),
            unused=len(self.records) - len(used),
            last_used_name=last_used.name if last_used else None,
        )

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to a list of record dictionaries in rotation order."""
        return [record.to_dict() for record in self.records]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> "KeyStore":
        """Create KeyStore from a list of record dictionaries."""
        if not isinstance(data, list):
            raise ValueError("key store data must be a list of records")
        return cls(records=[KeyRecord.from_dict(item) for item in data])
