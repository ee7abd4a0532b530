"""Configuration management for the Splurge Keymaster system."""

import logging
import os
from dataclasses import dataclass, field

from splurge_keymaster.constants import Constants

_TRUE_VALUES = {"1", "true", "yes", "on"}


def default_data_dir() -> str:
    """Compute a platform-appropriate default data directory."""
    # Environment override for tests/CI or advanced users
    env_dir = os.getenv("KEYMASTER_DATA_DIR")
    if env_dir:
        return env_dir

    # Windows: use %APPDATA%\splurge-keymaster
    appdata = os.getenv("APPDATA")
    if appdata:
        return os.path.join(appdata, Constants.DEFAULT_APP_DIR())

    # POSIX: ~/.config/splurge-keymaster
    home = os.path.expanduser("~")
    if home:
        return os.path.join(home, ".config", Constants.DEFAULT_APP_DIR())

    # Fallback to current directory
    return os.path.join(os.getcwd(), ".keymaster")


@dataclass
class KeymasterConfig:
    """Configuration for Keymaster instances."""

    # Storage settings
    data_dir: str = field(default_factory=default_data_dir)
    store_file_name: str = field(default_factory=Constants.DEFAULT_STORE_FILE)

    # Access control settings
    admin_ids: frozenset[str] = frozenset()
    allow_all: bool = False

    # Logging settings
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.data_dir or not self.data_dir.strip():
            raise ValueError("data_dir cannot be empty")
        if not self.store_file_name or not self.store_file_name.strip():
            raise ValueError("store_file_name cannot be empty")
        if os.path.basename(self.store_file_name) != self.store_file_name:
            raise ValueError("store_file_name must be a bare file name")

        self.admin_ids = frozenset(str(admin_id).strip() for admin_id in self.admin_ids if str(admin_id).strip())

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_environment(cls) -> "KeymasterConfig":
        """Build a configuration from KEYMASTER_* environment variables.

        Returns:
            KeymasterConfig instance
        """
        admin_ids = os.getenv("KEYMASTER_ADMIN_IDS", "")
        return cls(
            data_dir=default_data_dir(),
            store_file_name=os.getenv("KEYMASTER_STORE_FILE") or Constants.DEFAULT_STORE_FILE(),
            admin_ids=frozenset(part for part in admin_ids.split(",") if part.strip()),
            allow_all=os.getenv("KEYMASTER_ALLOW_ALL", "").strip().lower() in _TRUE_VALUES,
            log_level=os.getenv("KEYMASTER_LOG_LEVEL") or "WARNING",
        )

