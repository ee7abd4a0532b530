"""Unit tests for the store service."""

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from splurge_keymaster.exceptions import FileOperationError, ValidationError
from splurge_keymaster.file_manager import FileManager
from splurge_keymaster.models import KeyStore
from splurge_keymaster.services import StoreService
from tests.test_utility import TestDataHelper


class TestStoreService(unittest.TestCase):
    """Test cases for StoreService."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.file_manager = FileManager(self.temp_dir)
        self.service = StoreService(self.file_manager)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_missing_file_returns_empty_store(self):
        store = self.service.load()
        self.assertIsInstance(store, KeyStore)
        self.assertEqual(len(store), 0)

    def test_load_corrupt_file_returns_empty_store(self):
        self.file_manager.store_file_path.write_text("not json at all", encoding="utf-8")

        with self.assertLogs("splurge_keymaster.services.store_service", level="ERROR"):
            store = self.service.load()

        self.assertEqual(len(store), 0)

    def test_load_wrong_shape_returns_empty_store(self):
        self.file_manager.store_file_path.write_text('{"keys": []}', encoding="utf-8")
        self.assertEqual(len(self.service.load()), 0)

    def test_load_invalid_record_returns_empty_store(self):
        self.file_manager.save_key_records([{"name": "a"}])
        self.assertEqual(len(self.service.load()), 0)

    def test_load_string_flags(self):
        self.file_manager.save_key_records([
            TestDataHelper.create_record_dict("a", active="false", current="false"),
            TestDataHelper.create_record_dict("b", current="true"),
        ])

        store = self.service.load()

        self.assertFalse(store.find("a").active)
        self.assertEqual([r.name for r in store.current_records()], ["b"])

    def test_load_unrecognized_flag_is_corrupt(self):
        self.file_manager.save_key_records([TestDataHelper.create_record_dict("a", active="nope")])

        with self.assertLogs("splurge_keymaster.services.store_service", level="ERROR"):
            store = self.service.load()

        self.assertEqual(len(store), 0)
        self.assertEqual(len(self._quarantined_files()), 1)

    def _quarantined_files(self) -> list[Path]:
        return sorted(Path(self.temp_dir).glob("keys.json.corrupt-*"))

    def test_load_corrupt_file_moves_it_aside(self):
        original = '[{"name": "k1", "value": "v1"}, {"name": "k2",'
        self.file_manager.store_file_path.write_text(original, encoding="utf-8")

        with self.assertLogs("splurge_keymaster.services.store_service", level="WARNING") as logs:
            self.service.load()

        quarantined = self._quarantined_files()
        self.assertEqual(len(quarantined), 1)
        self.assertEqual(quarantined[0].read_text(encoding="utf-8"), original)
        self.assertFalse(self.file_manager.store_file_path.exists())
        self.assertTrue(any("moved to" in line for line in logs.output))

    def test_load_invalid_record_moves_file_aside(self):
        self.file_manager.save_key_records([{"name": "a"}])

        self.service.load()

        self.assertEqual(len(self._quarantined_files()), 1)
        self.assertFalse(self.file_manager.store_file_path.exists())

    def test_save_after_corrupt_load_keeps_original_bytes(self):
        original = b'[{"name": "k1", "value": "v1", "active": true},\n{"name": "k2"'
        self.file_manager.store_file_path.write_bytes(original)

        store = self.service.load()
        store.add(TestDataHelper.create_record("k3"))
        self.assertTrue(self.service.save(store))

        self.assertEqual(self._quarantined_files()[0].read_bytes(), original)
        self.assertEqual(self.service.load().names(), ["k3"])

    def test_quarantine_failure_is_logged_and_load_still_returns_empty(self):
        self.file_manager.store_file_path.write_text("not json", encoding="utf-8")

        with patch.object(
            self.file_manager,
            "quarantine_store_file",
            side_effect=FileOperationError("read-only"),
        ):
            with self.assertLogs("splurge_keymaster.services.store_service", level="ERROR") as logs:
                store = self.service.load()

        self.assertEqual(len(store), 0)
        self.assertTrue(any("move unreadable key store aside" in line for line in logs.output))

    def test_missing_file_is_not_quarantined(self):
        self.service.load()
        self.assertEqual(self._quarantined_files(), [])

    def test_save_then_load_preserves_order_and_flags(self):
        store = TestDataHelper.create_store(("c", True, False), ("a", False, False), ("b", True, True))

        self.assertTrue(self.service.save(store))
        loaded = self.service.load()

        self.assertEqual(loaded.names(), ["c", "a", "b"])
        self.assertEqual(loaded.to_list(), store.to_list())

    def test_load_does_not_normalize(self):
        store = TestDataHelper.create_store(("a", True, True), ("b", True, True))
        self.service.save(store)

        self.assertEqual(len(self.service.load().current_records()), 2)

    def test_save_failure_returns_false(self):
        store = TestDataHelper.create_store(("a", True, True))

        with patch.object(
            self.file_manager,
            "save_key_records",
            side_effect=FileOperationError("disk full"),
        ):
            with self.assertLogs("splurge_keymaster.services.store_service", level="ERROR"):
                self.assertFalse(self.service.save(store))

    def test_init_cleans_up_temp_files(self):
        leftover = Path(self.temp_dir) / "keys.temp"
        leftover.write_text("[]", encoding="utf-8")

        StoreService(FileManager(self.temp_dir))

        self.assertFalse(leftover.exists())

    def test_backup(self):
        self.service.save(TestDataHelper.create_store(("a", True, True)))
        backup_dir = os.path.join(self.temp_dir, "backups")

        target = self.service.backup(backup_dir)

        self.assertTrue(target.exists())

    def test_backup_rejects_blank_directory(self):
        with self.assertRaises(ValidationError):
            self.service.backup("   ")
        with self.assertRaises(ValidationError):
            self.service.backup(None)

    def test_file_manager_property(self):
        self.assertIs(self.service.file_manager, self.file_manager)


if __name__ == "__main__":
    unittest.main()
