"""
Custom exceptions for the encryption framework.
"""


class EncryptionError(Exception):
    """Base exception for encryption-related errors."""
    pass


class DecryptionError(EncryptionError):
    """Raised when decryption fails."""
    pass
