"""Validation utilities for the keymaster package."""

import re

from splurge_keymaster.constants import Constants
from splurge_keymaster.exceptions import ValidationError

_KEY_NAME_RE = re.compile(Constants.KEY_NAME_PATTERN())


def validate_key_name(name: str) -> None:
    """Validate key name requirements.

    Key names are used as command arguments and menu labels, so they are
    limited to letters, digits, underscores and hyphens.

    Args:
        name: Key name to validate

    Raises:
        ValidationError: If name doesn't meet requirements
    """
    if name is None:
        raise ValidationError("Key name cannot be None")

    if name == "":
        raise ValidationError("Key name cannot be empty")

    if name.strip() == "":
        raise ValidationError("Key name cannot contain only whitespace")

    if len(name) > Constants.MAX_KEY_NAME_LENGTH():
        raise ValidationError(
            f"Key name is too long (maximum {Constants.MAX_KEY_NAME_LENGTH()} characters)"
        )

    if not _KEY_NAME_RE.fullmatch(name):
        raise ValidationError(
            "Key name may only contain letters, digits, underscores and hyphens"
        )


def validate_key_value(value: str) -> None:
    """Validate a key's secret value.

    Args:
        value: Secret value to validate

    Raises:
        ValidationError: If value is missing or malformed
    """
    if value is None:
        raise ValidationError("Key value cannot be None")

    if value.strip() == "":
        raise ValidationError("Key value cannot be empty")

    if len(value) > Constants.MAX_KEY_VALUE_LENGTH():
        raise ValidationError(
            f"Key value is too long (maximum {Constants.MAX_KEY_VALUE_LENGTH()} characters)"
        )

    if "\x00" in value:
        raise ValidationError("Key value cannot contain null bytes")
