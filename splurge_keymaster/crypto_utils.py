"""Cryptographic helpers for displaying key values safely."""

from cryptography.hazmat.primitives import hashes

from splurge_keymaster.constants import Constants


class CryptoUtils:
    """Fingerprint and masking helpers for secret values."""

    _MASK_CHAR = "*"
    _MASK_VISIBLE = 4

    @classmethod
    def fingerprint(cls, value: str) -> str:
        """Compute a short SHA-256 fingerprint of a secret value.

        The fingerprint identifies a key in listings without revealing it.

        Args:
            value: Secret value

        Returns:
            Leading hex digits of the SHA-256 digest
        """
        digest = hashes.Hash(hashes.SHA256())
        digest.update(value.encode("utf-8"))
        return digest.finalize().hex()[:Constants.FINGERPRINT_LENGTH()]

    @classmethod
    def mask(cls, value: str | None) -> str:
        """Mask a secret, keeping only its last few characters visible."""
        if not value:
            return ""
        if len(value) <= cls._MASK_VISIBLE:
            return cls._MASK_CHAR * len(value)
        return cls._MASK_CHAR * (len(value) - cls._MASK_VISIBLE) + value[-cls._MASK_VISIBLE:]
