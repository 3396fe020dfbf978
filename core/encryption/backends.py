"""
Encryption backend implementations.
"""

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings

from .exceptions import EncryptionError, DecryptionError

logger = logging.getLogger(__name__)


class FernetEncryptionBackend:
    """
    Fernet encryption backend.

    The key comes from ``settings.ENCRYPTION_KEY`` (a url-safe base64 Fernet
    key). When that setting is empty a key is derived from ``SECRET_KEY`` so
    development environments work without extra configuration.
    """

    def __init__(self, key: str = ''):
        self._fernet = Fernet(key or self._configured_key())

    @staticmethod
    def _configured_key() -> bytes:
        key = getattr(settings, 'ENCRYPTION_KEY', '')
        if key:
            return key.encode('utf-8') if isinstance(key, str) else key

        digest = hashlib.sha256(settings.SECRET_KEY.encode('utf-8')).digest()
        return base64.urlsafe_b64encode(digest)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string and return the Fernet token as text."""
        try:
            return self._fernet.encrypt(plaintext.encode('utf-8')).decode('utf-8')
        except (TypeError, ValueError) as e:
            logger.error(f"Encryption failed: {str(e)}")
            raise EncryptionError(f"Failed to encrypt data: {str(e)}")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a Fernet token produced by ``encrypt``."""
        try:
            return self._fernet.decrypt(ciphertext.encode('utf-8')).decode('utf-8')
        except (InvalidToken, TypeError, ValueError) as e:
            logger.error(f"Decryption failed: {type(e).__name__}")
            raise DecryptionError("Failed to decrypt data")


# Singleton instance management
_backend_instance = None


def get_encryption_backend() -> FernetEncryptionBackend:
    """
    Get the configured encryption backend instance.
    """
    global _backend_instance

    if _backend_instance is None:
        _backend_instance = FernetEncryptionBackend()

    return _backend_instance


def reset_encryption_backend():
    """
    Reset the backend instance (useful for testing).
    """
    global _backend_instance
    _backend_instance = None
