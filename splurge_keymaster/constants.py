"""Library-wide constants.

These constants centralize tunable values used across modules to keep
behavior consistent and avoid duplication.
"""


class Constants:

    # Key naming policy
    _MAX_KEY_NAME_LENGTH: int = 64
    _MAX_KEY_VALUE_LENGTH: int = 4096
    _KEY_NAME_PATTERN: str = r"^[\w-]+$"

    # Storage
    _DEFAULT_STORE_FILE: str = "keys.json"
    _DEFAULT_APP_DIR: str = "splurge-keymaster"

    # Presentation
    _FINGERPRINT_LENGTH: int = 12
    _LIST_TIME_FORMAT: str = "%d.%m %H:%M"
    _DETAIL_TIME_FORMAT: str = "%d.%m.%Y, %H:%M"
    _SKIP_INPUT: str = "-"

    @classmethod
    def MAX_KEY_NAME_LENGTH(cls) -> int:
        return cls._MAX_KEY_NAME_LENGTH

    @classmethod
    def MAX_KEY_VALUE_LENGTH(cls) -> int:
        return cls._MAX_KEY_VALUE_LENGTH

    # Letters, digits, underscore and hyphen only
    @classmethod
    def KEY_NAME_PATTERN(cls) -> str:
        return cls._KEY_NAME_PATTERN

    @classmethod
    def DEFAULT_STORE_FILE(cls) -> str:
        return cls._DEFAULT_STORE_FILE

    @classmethod
    def DEFAULT_APP_DIR(cls) -> str:
        return cls._DEFAULT_APP_DIR

    # Hex digits shown for a value fingerprint
    @classmethod
    def FINGERPRINT_LENGTH(cls) -> int:
        return cls._FINGERPRINT_LENGTH

    @classmethod
    def LIST_TIME_FORMAT(cls) -> str:
        return cls._LIST_TIME_FORMAT

    @classmethod
    def DETAIL_TIME_FORMAT(cls) -> str:
        return cls._DETAIL_TIME_FORMAT

    # Wizard answer meaning "leave this optional field unset"
    @classmethod
    def SKIP_INPUT(cls) -> str:
        return cls._SKIP_INPUT
