"""
Field-level encryption for Django models.

Values are encrypted with Fernet (AES-128-CBC + HMAC-SHA256) before they
reach the database and decrypted transparently when loaded.
"""

from .fields import EncryptedTextField, EncryptedJSONField
from .backends import get_encryption_backend, reset_encryption_backend, FernetEncryptionBackend
from .exceptions import EncryptionError, DecryptionError

__all__ = [
    'EncryptedTextField',
    'EncryptedJSONField',
    'get_encryption_backend',
    'reset_encryption_backend',
    'FernetEncryptionBackend',
    'EncryptionError',
    'DecryptionError',
]
