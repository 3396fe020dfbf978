from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase, override_settings
from django.utils import translation

from localisation.exceptions import UnsupportedLocaleError
from localisation.services import Localisation

SUPPORTED_LOCALES = {
    'en': {'name': 'English', 'nativeName': 'English', 'regional': 'en_GB'},
    'fr': {'name': 'French', 'nativeName': 'Français', 'regional': 'fr_FR'},
}


class FakeUser:
    is_authenticated = True

    def __init__(self, language):
        self.language = language


@override_settings(DEFAULT_LOCALE='en', SUPPORTED_LOCALES=SUPPORTED_LOCALES)
class LocalisationTest(TestCase):
    """Tests for locale lookups and negotiation."""

    def setUp(self):
        self.localisation = Localisation()
        self.factory = RequestFactory()

    def tearDown(self):
        translation.activate('en')

    def test_locale_format_conversion(self):
        self.assertEqual(self.localisation.get_iso15897_locale('en-GB'), 'en_GB')
        self.assertEqual(self.localisation.get_iso639_locale('en_GB'), 'en-GB')
        self.assertEqual(self.localisation.get_iso639_locale('fr'), 'fr')

    def test_get_language_from_locale(self):
        self.assertEqual(self.localisation.get_language_from_locale('en_GB'), 'en')
        self.assertEqual(self.localisation.get_language_from_locale('fr-CA'), 'fr')
        self.assertEqual(self.localisation.get_language_from_locale('de'), 'de')
        self.assertEqual(self.localisation.get_language_from_locale('_GB'), '_GB')

    def test_is_supported_locale(self):
        self.assertTrue(self.localisation.is_supported_locale('fr'))
        self.assertFalse(self.localisation.is_supported_locale('de'))
        self.assertFalse(self.localisation.is_supported_locale(''))
        self.assertFalse(self.localisation.is_supported_locale(None))

    def test_get_supported_locales_iso639(self):
        locales = Localisation(
            supported_locales={'en_GB': {'name': 'English', 'nativeName': 'English', 'regional': 'en_GB'}}
        ).get_supported_locales('iso639')

        self.assertEqual(list(locales), ['en-GB'])
        self.assertEqual(locales['en-GB']['regional'], 'en-GB')

    def test_set_locale_activates_translation(self):
        self.localisation.set_locale('fr')
        self.assertEqual(translation.get_language(), 'fr')

    def test_set_locale_rejects_unsupported(self):
        with self.assertRaises(UnsupportedLocaleError):
            self.localisation.set_locale('de')

    def test_unsupported_locale_error_is_value_error(self):
        self.assertTrue(issubclass(UnsupportedLocaleError, ValueError))

    def test_resolve_supported_locale(self):
        self.assertEqual(self.localisation.resolve_supported_locale('fr'), 'fr')
        self.assertEqual(self.localisation.resolve_supported_locale('fr-CA'), 'fr')
        self.assertEqual(self.localisation.resolve_supported_locale('de'), 'en')
        self.assertEqual(self.localisation.resolve_supported_locale(None), 'en')

    def test_locale_from_user_language(self):
        request = self.factory.get('/', HTTP_ACCEPT_LANGUAGE='en')
        request.user = FakeUser('fr_CA')

        self.assertEqual(self.localisation.set_locale_from_request(request), 'fr')

    def test_locale_from_accept_language(self):
        request = self.factory.get('/', HTTP_ACCEPT_LANGUAGE='de;q=0.9,fr-CA;q=0.8')
        request.user = AnonymousUser()

        self.assertEqual(self.localisation.set_locale_from_request(request), 'fr')

    def test_unmatched_accept_language_uses_first_supported(self):
        self.assertEqual(self.localisation.get_locale_from_accept_language('de, es'), 'en')

    def test_missing_accept_language_uses_first_supported(self):
        request = self.factory.get('/')
        request.user = AnonymousUser()

        self.assertEqual(self.localisation.set_locale_from_request(request), 'en')
