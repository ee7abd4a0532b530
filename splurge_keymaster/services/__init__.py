"""Services package for Splurge Keymaster."""

from splurge_keymaster.services.key_service import KeyService, ServiceResult
from splurge_keymaster.services.store_service import StoreService

__all__ = [
    "KeyService",
    "ServiceResult",
    "StoreService",
]
