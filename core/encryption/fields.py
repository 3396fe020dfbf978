"""
Custom Django field types that provide transparent encryption.
"""

import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from .backends import get_encryption_backend


class EncryptedFieldMixin:
    """
    Base mixin for encrypted fields.

    Encrypts in ``get_prep_value`` and decrypts in ``from_db_value`` so model
    instances always hold plaintext. Encrypted columns cannot be filtered on.
    """

    def get_prep_value(self, value):
        """
        Encrypt value before saving to database.
        """
        if value is None:
            return value

        return get_encryption_backend().encrypt(self.prepare_value_for_encryption(value))

    def from_db_value(self, value, expression, connection):
        """
        Decrypt value when loading from database.
        """
        if value is None:
            return value

        return self.to_python(get_encryption_backend().decrypt(value))

    def prepare_value_for_encryption(self, value: Any) -> str:
        return str(value)


class EncryptedTextField(EncryptedFieldMixin, models.TextField):
    """
    Encrypted version of TextField.
    """


class EncryptedJSONField(EncryptedFieldMixin, models.TextField):
    """
    Encrypted JSON document stored in a text column.

    The whole structure is serialized and encrypted as one string.
    """

    def prepare_value_for_encryption(self, value: Any) -> str:
        return json.dumps(value, cls=DjangoJSONEncoder)

    def to_python(self, value):
        if isinstance(value, str):
            return json.loads(value)
        return value
