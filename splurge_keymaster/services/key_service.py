"""Key service orchestrating load, rotate and save cycles."""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterator

from splurge_keymaster import rotation_engine
from splurge_keymaster.exceptions import DuplicateKeyNameError, ValidationError
from splurge_keymaster.models import KeyRecord, KeyStatistics, KeyStore
from splurge_keymaster.services.store_service import StoreService
from splurge_keymaster.validation_utils import validate_key_name, validate_key_value

logger = logging.getLogger(__name__)

# Serializes every load -> mutate -> save cycle in the process
_STORE_LOCK = threading.RLock()

NOT_FOUND = "not_found"
EMPTY_POOL = "empty_pool"
DUPLICATE_NAME = "duplicate_name"
PERSISTENCE_FAILURE = "persistence_failure"
VALIDATION_ERROR = "validation_error"


@dataclass
class ServiceResult:
    """Outcome of a key service operation."""

    success: bool
    command: str
    key: KeyRecord | None = None
    store: KeyStore | None = None
    statistics: KeyStatistics | None = None
    error_code: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary without secret values."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
        }
        if self.message:
            result["message"] = self.message
        if self.error_code:
            result["error_code"] = self.error_code
        return result


class KeyService:
    """Service exposing the operator-facing key pool operations."""

    def __init__(
        self,
        store_service: StoreService,
        *,
        clock: Callable[[], datetime] | None = None
    ):
        """Initialize the key service.

        Args:
            store_service: Store service used for every load and save
            clock: Callable returning the current time (optional)
        """
        self._store_service = store_service
        self._clock = clock

    def _now(self) -> datetime | None:
        return self._clock() if self._clock is not None else None

    @contextmanager
    def _locked_store(self) -> Iterator[KeyStore]:
        """Hold the store lock and yield a freshly loaded, normalized store."""
        with _STORE_LOCK:
            store = self._store_service.load()
            rotation_engine.ensure_current(store)
            yield store

    def _commit(
        self,
        store: KeyStore,
        command: str,
        *,
        key: KeyRecord | None = None,
        message: str = ""
    ) -> ServiceResult:
        """Save the store and build the result for a mutating command."""
        if not self._store_service.save(store):
            return ServiceResult(
                success=False,
                command=command,
                error_code=PERSISTENCE_FAILURE,
                message="Changes could not be saved",
            )
        return ServiceResult(success=True, command=command, key=key, store=store, message=message)

    @staticmethod
    def _failure(command: str, error_code: str, message: str) -> ServiceResult:
        return ServiceResult(success=False, command=command, error_code=error_code, message=message)

    def current_key(self) -> ServiceResult:
        """Get the current key and record its use."""
        with self._locked_store() as store:
            active = rotation_engine.get_active(store)
            if active is None:
                return self._failure("current", EMPTY_POOL, "No active keys")

            rotation_engine.touch(store, active.name, now=self._now())
            return self._commit(store, "current", key=active)

    def next_key(self) -> ServiceResult:
        """Rotate from the current key to the next active key."""
        with self._locked_store() as store:
            active = rotation_engine.get_active(store)
            if active is None:
                return self._failure("next", EMPTY_POOL, "No active keys")

            next_key = rotation_engine.advance(store, active.name)
            if next_key is None:
                return self._failure("next", EMPTY_POOL, "No more active keys")

            rotation_engine.touch(store, next_key.name, now=self._now())
            return self._commit(
                store,
                "next",
                key=next_key,
                message=f"Switched to key {next_key.name}",
            )

    def exhaust_key(self, name: str) -> ServiceResult:
        """Mark a key exhausted and rotate to its replacement.

        The result succeeds with no key when the exhausted key was the last
        active one.
        """
        with self._locked_store() as store:
            if not rotation_engine.mark_exhausted(store, name, now=self._now()):
                return self._failure("exhaust", NOT_FOUND, f"Key '{name}' not found")

            replacement = rotation_engine.advance(store, name)
            if replacement is None:
                return self._commit(
                    store,
                    "exhaust",
                    message=f"Key '{name}' marked exhausted; no more active keys",
                )

            rotation_engine.touch(store, replacement.name, now=self._now())
            return self._commit(
                store,
                "exhaust",
                key=replacement,
                message=f"Key '{name}' marked exhausted",
            )

    def activate_key(self, name: str) -> ServiceResult:
        """Return an exhausted or inactive key to the rotation."""
        with self._locked_store() as store:
            if not rotation_engine.activate(store, name):
                return self._failure("activate", NOT_FOUND, f"Key '{name}' not found")

            return self._commit(
                store,
                "activate",
                key=store.find(name),
                message=f"Key '{name}' activated",
            )

    def select_key(self, name: str) -> ServiceResult:
        """Make the named key current."""
        with self._locked_store() as store:
            if not rotation_engine.select_current(store, name, now=self._now()):
                return self._failure("select", NOT_FOUND, f"Key '{name}' not found")

            return self._commit(
                store,
                "select",
                key=store.find(name),
                message=f"Key '{name}' set as current",
            )

    def reset_all(self) -> ServiceResult:
        """Reactivate every key and make the first one current."""
        with self._locked_store() as store:
            rotation_engine.reset_all(store)
            first = store[0] if len(store) else None
            return self._commit(
                store,
                "reset",
                key=first,
                message="All keys reset and activated",
            )

    def add_key(
        self,
        name: str,
        value: str,
        *,
        email: str | None = None,
        password: str | None = None
    ) -> ServiceResult:
        """Append a new key to the rotation order.

        Args:
            name: Unique key name
            value: Secret value
            email: Optional account email
            password: Optional account password

        Returns:
            ServiceResult with the created record
        """
        try:
            validate_key_name(name)
            validate_key_value(value)
        except ValidationError as e:
            return self._failure("add", VALIDATION_ERROR, str(e))

        with self._locked_store() as store:
            try:
                record = store.add(KeyRecord(
                    name=name,
                    value=value,
                    email=email or None,
                    password=password or None,
                ))
            except DuplicateKeyNameError as e:
                return self._failure("add", DUPLICATE_NAME, str(e))

            logger.info("Key added", extra={
                "key_name": name,
                "total_keys": len(store),
                "event": "key_added"
            })
            return self._commit(store, "add", key=record, message=f"Key '{name}' added")

    def delete_key(self, name: str) -> ServiceResult:
        """Remove a key from the rotation order."""
        with self._locked_store() as store:
            if not store.remove(name):
                return self._failure("delete", NOT_FOUND, f"Key '{name}' not found")

            # A deleted current key is replaced by the first active key
            current = rotation_engine.ensure_current(store)

            logger.info("Key deleted", extra={
                "key_name": name,
                "total_keys": len(store),
                "event": "key_deleted"
            })
            return self._commit(store, "delete", key=current, message=f"Key '{name}' deleted")

    def list_keys(self) -> ServiceResult:
        """Get the key store in rotation order."""
        with self._locked_store() as store:
            return ServiceResult(success=True, command="list", store=store)

    def key_info(self, name: str) -> ServiceResult:
        """Get a single key by name."""
        with self._locked_store() as store:
            record = store.find(name)
            if record is None:
                return self._failure("info", NOT_FOUND, f"Key '{name}' not found")
            return ServiceResult(success=True, command="info", key=record, store=store)

    def statistics(self) -> ServiceResult:
        """Get summary counts for the key store."""
        with self._locked_store() as store:
            return ServiceResult(
                success=True,
                command="stats",
                store=store,
                statistics=store.statistics(),
            )
