"""Disk access for the key store file."""

import json
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from splurge_keymaster.constants import Constants
from splurge_keymaster.exceptions import FileOperationError

_TEMP_SUFFIX = ".temp"
_ARCHIVE_SUFFIX = ".archive"
_CORRUPT_MARKER = ".corrupt-"


class FileManager:
    """Reads and atomically replaces the JSON key store file."""

    def __init__(
        self,
        data_dir: str,
        *,
        store_file_name: str | None = None
    ):
        """Initialize the file manager.

        Args:
            data_dir: Directory holding the key store file (created if missing)
            store_file_name: Name of the key store file (default: keys.json)

        Raises:
            FileOperationError: If the data directory cannot be created
        """
        self._data_dir = Path(data_dir)
        self._store_file = self._data_dir / (store_file_name or Constants.DEFAULT_STORE_FILE())
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Cannot create data directory {self._data_dir}: {e}") from e

    def _replace_json(self, target: Path, payload: Any) -> None:
        """Replace ``target`` with ``payload`` serialized as JSON.

        The payload is written to a sibling temp file first. The old file is
        parked as an archive until the temp file has been moved into place,
        and restored if that move fails.

        Raises:
            FileOperationError: If the file cannot be replaced
        """
        staged = target.with_suffix(_TEMP_SUFFIX)
        parked = target.with_suffix(_ARCHIVE_SUFFIX)

        try:
            with staged.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)

            if target.exists():
                shutil.move(str(target), str(parked))
            shutil.move(str(staged), str(target))
            self._restrict_to_owner(target)

            if parked.exists():
                parked.unlink()
        except Exception as e:
            if staged.exists():
                staged.unlink()
            if parked.exists() and not target.exists():
                shutil.move(str(parked), str(target))
            raise FileOperationError(f"Cannot write key store {target}: {e}") from e

    @staticmethod
    def _restrict_to_owner(target: Path) -> None:
        try:
            os.chmod(target, 0o600)
        except OSError:
            # Not supported on every platform
            pass

    def save_key_records(self, records: list[dict[str, Any]]) -> None:
        """Write key records to the store file.

        Args:
            records: Record dictionaries in rotation order

        Raises:
            FileOperationError: If the store file cannot be written
        """
        self._replace_json(self._store_file, records)

    def read_key_records(self) -> Optional[list[dict[str, Any]]]:
        """Read key records from the store file.

        Returns:
            Record dictionaries in file order, or None if there is no store file

        Raises:
            FileOperationError: If the file is unreadable or not a JSON array
        """
        if not self._store_file.exists():
            return None

        try:
            with self._store_file.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            raise FileOperationError(f"Cannot read key store {self._store_file}: {e}") from e

        if not isinstance(data, list):
            raise FileOperationError(
                f"Cannot read key store {self._store_file}: expected a list, got {type(data).__name__}"
            )
        return data

    def backup_files(self, backup_dir: str) -> Path | None:
        """Copy the store file into ``backup_dir``.

        Returns:
            Path of the copy, or None if there is no store file yet

        Raises:
            FileOperationError: If the copy fails
        """
        destination = Path(backup_dir)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            if not self._store_file.exists():
                return None
            copy = destination / self._store_file.name
            shutil.copy2(self._store_file, copy)
        except OSError as e:
            raise FileOperationError(f"Cannot back up key store to {destination}: {e}") from e
        return copy

    def quarantine_store_file(self) -> Path | None:
        """Move an unreadable store file aside so a later save cannot overwrite it.

        The file is renamed to ``<store file>.corrupt-<UTC timestamp>`` in the
        data directory.

        Returns:
            Path of the quarantined file, or None if there is no store file

        Raises:
            FileOperationError: If the file cannot be moved
        """
        if not self._store_file.exists():
            return None

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        quarantined = self._store_file.with_name(f"{self._store_file.name}{_CORRUPT_MARKER}{stamp}")
        try:
            shutil.move(str(self._store_file), str(quarantined))
        except OSError as e:
            raise FileOperationError(f"Cannot move unreadable key store {self._store_file} aside: {e}") from e
        return quarantined

    def cleanup_temp_files(self) -> None:
        """Remove staged writes left behind by an interrupted save."""
        for leftover in self._data_dir.glob(f"*{_TEMP_SUFFIX}"):
            try:
                leftover.unlink()
            except OSError:
                # Another process may have removed it already
                continue

    @property
    def data_directory(self) -> Path:
        return self._data_dir

    @property
    def store_file_path(self) -> Path:
        return self._store_file
