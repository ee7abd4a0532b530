"""Unit tests for the config module."""

import os
import unittest
from unittest.mock import patch

from splurge_keymaster.config import KeymasterConfig, default_data_dir


class TestDefaultDataDir(unittest.TestCase):
    """Test cases for default_data_dir."""

    def test_environment_override(self):
        with patch.dict(os.environ, {"KEYMASTER_DATA_DIR": "/tmp/keymaster-data"}):
            self.assertEqual(default_data_dir(), "/tmp/keymaster-data")

    def test_appdata_used_when_set(self):
        with patch.dict(os.environ, {"APPDATA": "/tmp/appdata"}, clear=True):
            self.assertEqual(default_data_dir(), os.path.join("/tmp/appdata", "splurge-keymaster"))

    def test_posix_config_directory(self):
        with patch.dict(os.environ, {"HOME": "/tmp/home"}, clear=True):
            self.assertEqual(
                default_data_dir(),
                os.path.join("/tmp/home", ".config", "splurge-keymaster"),
            )


class TestKeymasterConfig(unittest.TestCase):
    """Test cases for KeymasterConfig."""

    def test_defaults(self):
        config = KeymasterConfig(data_dir="/tmp/data")

        self.assertEqual(config.store_file_name, "keys.json")
        self.assertEqual(config.admin_ids, frozenset())
        self.assertFalse(config.allow_all)
        self.assertEqual(config.log_level, "WARNING")

    def test_empty_data_dir_raises(self):
        with self.assertRaises(ValueError):
            KeymasterConfig(data_dir="  ")

    def test_store_file_must_be_bare_name(self):
        with self.assertRaises(ValueError):
            KeymasterConfig(data_dir="/tmp/data", store_file_name="nested/keys.json")

    def test_admin_ids_are_normalized(self):
        config = KeymasterConfig(data_dir="/tmp/data", admin_ids=frozenset({" 42", 7, ""}))
        self.assertEqual(config.admin_ids, frozenset({"42", "7"}))

    def test_log_level_is_uppercased(self):
        config = KeymasterConfig(data_dir="/tmp/data", log_level="debug")
        self.assertEqual(config.log_level, "DEBUG")

    def test_unknown_log_level_raises(self):
        with self.assertRaises(ValueError):
            KeymasterConfig(data_dir="/tmp/data", log_level="chatty")

    def test_from_environment(self):
        env = {
            "KEYMASTER_DATA_DIR": "/tmp/env-data",
            "KEYMASTER_STORE_FILE": "pool.json",
            "KEYMASTER_ADMIN_IDS": "100, 200,,",
            "KEYMASTER_ALLOW_ALL": "yes",
            "KEYMASTER_LOG_LEVEL": "info",
        }
        with patch.dict(os.environ, env, clear=True):
            config = KeymasterConfig.from_environment()

        self.assertEqual(config.data_dir, "/tmp/env-data")
        self.assertEqual(config.store_file_name, "pool.json")
        self.assertEqual(config.admin_ids, frozenset({"100", "200"}))
        self.assertTrue(config.allow_all)
        self.assertEqual(config.log_level, "INFO")

    def test_from_environment_defaults(self):
        with patch.dict(os.environ, {"KEYMASTER_DATA_DIR": "/tmp/env-data"}, clear=True):
            config = KeymasterConfig.from_environment()

        self.assertEqual(config.store_file_name, "keys.json")
        self.assertEqual(config.admin_ids, frozenset())
        self.assertFalse(config.allow_all)


if __name__ == "__main__":
    unittest.main()
