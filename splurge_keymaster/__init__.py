"""Splurge Keymaster - rotation of a small pool of API keys.

This package keeps an ordered pool of credential records in a JSON file,
tracks which key is current, and rotates to the next active key as keys
become exhausted.
"""

from importlib.metadata import PackageNotFoundError, version

from splurge_keymaster import rotation_engine
from splurge_keymaster.authorization import AccessControl
from splurge_keymaster.exceptions import (
    AuthorizationError,
    DuplicateKeyNameError,
    FileOperationError,
    KeymasterError,
    ValidationError,
)
from splurge_keymaster.file_manager import FileManager
from splurge_keymaster.models import KeyRecord, KeyStatistics, KeyStore
from splurge_keymaster.services import KeyService, ServiceResult, StoreService

try:
    __version__ = version("splurge-keymaster")
except PackageNotFoundError:
    # Running from a source checkout
    __version__ = "unknown"

__all__ = [
    "AccessControl",
    "AuthorizationError",
    "DuplicateKeyNameError",
    "FileManager",
    "FileOperationError",
    "KeyRecord",
    "KeyService",
    "KeyStatistics",
    "KeyStore",
    "KeymasterError",
    "ServiceResult",
    "StoreService",
    "ValidationError",
    "rotation_engine",
]
