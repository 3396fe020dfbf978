from django.test import SimpleTestCase
from rest_framework import serializers
from rest_framework.test import APIRequestFactory

from two_factor.validators import ValidCodeValidator


class FakeUser:
    is_authenticated = True

    def __init__(self, valid_code):
        self.valid_code = valid_code

    def verify_two_factor_code(self, code):
        return code == self.valid_code


class CodeSerializer(serializers.Serializer):
    code = serializers.CharField(validators=[ValidCodeValidator()])


class ValidCodeValidatorTest(SimpleTestCase):
    """Tests for the TOTP code validator."""

    def make_serializer(self, code, user):
        request = APIRequestFactory().post('/')
        request.user = user
        return CodeSerializer(data={'code': code}, context={'request': request})

    def test_valid_code(self):
        self.assertTrue(self.make_serializer('123456', FakeUser('123456')).is_valid())

    def test_invalid_code(self):
        serializer = self.make_serializer('654321', FakeUser('123456'))

        self.assertFalse(serializer.is_valid())
        self.assertEqual(
            str(serializer.errors['code'][0]),
            'The provided two factor authentication code was invalid.'
        )

    def test_missing_request(self):
        serializer = CodeSerializer(data={'code': '123456'})
        self.assertFalse(serializer.is_valid())
