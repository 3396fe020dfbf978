from django.test import SimpleTestCase, override_settings

from core.encryption import DecryptionError, FernetEncryptionBackend, reset_encryption_backend
from core.encryption.fields import EncryptedJSONField, EncryptedTextField


class FernetEncryptionBackendTest(SimpleTestCase):
    """Tests for the Fernet backend."""

    def tearDown(self):
        reset_encryption_backend()

    def test_encrypt_decrypt(self):
        backend = FernetEncryptionBackend()
        token = backend.encrypt('JBSWY3DPEHPK3PXP')

        self.assertNotEqual(token, 'JBSWY3DPEHPK3PXP')
        self.assertEqual(backend.decrypt(token), 'JBSWY3DPEHPK3PXP')

    def test_decrypt_with_other_key_fails(self):
        token = FernetEncryptionBackend().encrypt('secret')

        with override_settings(SECRET_KEY='another-secret-key'):
            with self.assertRaises(DecryptionError):
                FernetEncryptionBackend().decrypt(token)

    def test_text_field_round_trip(self):
        field = EncryptedTextField()
        stored = field.get_prep_value('secret')

        self.assertNotEqual(stored, 'secret')
        self.assertEqual(field.from_db_value(stored, None, None), 'secret')
        self.assertIsNone(field.get_prep_value(None))

    def test_json_field_round_trip(self):
        field = EncryptedJSONField()
        stored = field.get_prep_value(['abc', 'def'])

        self.assertEqual(field.from_db_value(stored, None, None), ['abc', 'def'])
