"""Custom exceptions for the Splurge Keymaster system."""


class KeymasterError(Exception):
    """Base exception for all Keymaster errors."""


class ValidationError(KeymasterError):
    """Raised when data validation fails."""


class DuplicateKeyNameError(ValidationError):
    """Raised when a key name already exists in the store."""


class FileOperationError(KeymasterError):
    """Raised when file operations fail."""


class AuthorizationError(KeymasterError):
    """Raised when an operator is not on the allow-list."""
