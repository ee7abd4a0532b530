"""Store service implementing the key store load/save contract."""

import logging
from pathlib import Path

from splurge_keymaster.exceptions import FileOperationError, ValidationError
from splurge_keymaster.file_manager import FileManager
from splurge_keymaster.models import KeyStore

logger = logging.getLogger(__name__)


class StoreService:
    """Loads and saves the key store without ever failing the caller on load."""

    def __init__(self, file_manager: FileManager):
        """Initialize the store service.

        Args:
            file_manager: File manager instance
        """
        self._file_manager = file_manager
        self._file_manager.cleanup_temp_files()

    def load(self) -> KeyStore:
        """Load the key store.

        A missing or corrupt store file yields an empty store; the condition
        is logged rather than raised. A corrupt file is moved aside first so
        the next save starts a fresh file instead of replacing it.

        Returns:
            KeyStore in file order
        """
        store_path = self._file_manager.store_file_path
        try:
            data = self._file_manager.read_key_records()
        except FileOperationError as e:
            logger.error(f"Failed to read key store: {e}", extra={
                "path": str(store_path),
                "event": "store_load_failed"
            })
            self._quarantine()
            return KeyStore()

        if data is None:
            logger.info(f"Key store {store_path} not found, starting empty")
            return KeyStore()

        try:
            return KeyStore.from_list(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse key store: {e}", extra={
                "path": str(store_path),
                "event": "store_load_failed"
            })
            self._quarantine()
            return KeyStore()

    def _quarantine(self) -> None:
        try:
            quarantined = self._file_manager.quarantine_store_file()
        except FileOperationError as e:
            logger.error(f"Failed to move unreadable key store aside: {e}", extra={
                "path": str(self._file_manager.store_file_path),
                "event": "store_quarantine_failed"
            })
            return

        if quarantined is not None:
            logger.warning(f"Unreadable key store moved to {quarantined}", extra={
                "path": str(quarantined),
                "event": "store_quarantined"
            })

    def save(self, store: KeyStore) -> bool:
        """Save the key store.

        Args:
            store: KeyStore to persist

        Returns:
            True on success, False if the store could not be written
        """
        try:
            self._file_manager.save_key_records(store.to_list())
        except FileOperationError as e:
            logger.error(f"Failed to save key store: {e}", extra={
                "path": str(self._file_manager.store_file_path),
                "event": "store_save_failed"
            })
            return False

        logger.debug("Key store saved", extra={
            "total_keys": len(store),
            "event": "store_saved"
        })
        return True

    def backup(self, backup_dir: str) -> Path | None:
        """Copy the key store file to a directory.

        Args:
            backup_dir: Directory to backup to

        Returns:
            Path of the copy, or None if no store file exists yet

        Raises:
            ValidationError: If backup_dir is invalid
            FileOperationError: If backup fails
        """
        if backup_dir is None:
            raise ValidationError("Backup directory cannot be None")

        if not backup_dir.strip():
            raise ValidationError("Backup directory cannot be empty")

        target = self._file_manager.backup_files(backup_dir)
        logger.info(f"Key store backup written to: {backup_dir}")
        return target

    @property
    def file_manager(self) -> FileManager:
        """Get the file manager instance."""
        return self._file_manager
