"""Unit tests for crypto_utils module."""

import hashlib
import unittest

from splurge_keymaster.constants import Constants
from splurge_keymaster.crypto_utils import CryptoUtils


class TestCryptoUtils(unittest.TestCase):
    """Test cases for CryptoUtils."""

    def test_fingerprint_is_sha256_prefix(self):
        expected = hashlib.sha256("sk-secret".encode("utf-8")).hexdigest()[:Constants.FINGERPRINT_LENGTH()]
        self.assertEqual(CryptoUtils.fingerprint("sk-secret"), expected)

    def test_fingerprint_is_deterministic(self):
        self.assertEqual(CryptoUtils.fingerprint("sk-1"), CryptoUtils.fingerprint("sk-1"))
        self.assertNotEqual(CryptoUtils.fingerprint("sk-1"), CryptoUtils.fingerprint("sk-2"))

    def test_fingerprint_does_not_contain_value(self):
        fingerprint = CryptoUtils.fingerprint("sk-visible")
        self.assertNotIn("visible", fingerprint)
        self.assertEqual(len(fingerprint), Constants.FINGERPRINT_LENGTH())

    def test_mask_keeps_last_characters(self):
        self.assertEqual(CryptoUtils.mask("hunter2pass"), "*******pass")

    def test_mask_short_values(self):
        self.assertEqual(CryptoUtils.mask("abcd"), "****")
        self.assertEqual(CryptoUtils.mask("ab"), "**")

    def test_mask_empty(self):
        self.assertEqual(CryptoUtils.mask(""), "")
        self.assertEqual(CryptoUtils.mask(None), "")


if __name__ == "__main__":
    unittest.main()
