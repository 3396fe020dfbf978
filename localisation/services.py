"""
Locale negotiation against the configured ``SUPPORTED_LOCALES``.

Locales are stored in ISO 15897 form (``en_GB``) and exposed to clients in
ISO 639 / BCP 47 form (``en-GB``).
"""
from typing import Dict, Iterable, Optional

from django.conf import settings
from django.utils import translation
from django.utils.translation.trans_real import parse_accept_lang_header

from .exceptions import UnsupportedLocaleError


class Localisation:
    """Locale lookups and activation."""

    def __init__(self, default_locale: Optional[str] = None, supported_locales: Optional[Dict[str, dict]] = None):
        self._default_locale = default_locale
        self._supported_locales = supported_locales

    @property
    def default_locale(self) -> str:
        return self._default_locale or settings.DEFAULT_LOCALE

    @property
    def supported_locales(self) -> Dict[str, dict]:
        if self._supported_locales is not None:
            return self._supported_locales
        return settings.SUPPORTED_LOCALES

    @staticmethod
    def get_iso15897_locale(locale: str) -> str:
        return locale.replace('-', '_')

    @staticmethod
    def get_iso639_locale(locale: str) -> str:
        return locale.replace('_', '-')

    def get_language_from_locale(self, locale: str) -> str:
        locale = self.get_iso15897_locale(locale)

        position = locale.find('_')
        if position <= 0:
            return locale

        return locale[:position]

    def is_supported_locale(self, locale: Optional[str]) -> bool:
        return bool(locale) and locale in self.supported_locales

    def get_default_locale(self) -> str:
        return self.default_locale

    def get_supported_locales(self, format: str = 'iso15897') -> Dict[str, dict]:
        if format == 'iso15897':
            return self.supported_locales

        return {
            self.get_iso639_locale(key): {
                **value,
                'regional': self.get_iso639_locale(value['regional']),
            }
            for key, value in self.supported_locales.items()
        }

    def set_locale(self, locale: str):
        if not self.is_supported_locale(locale):
            raise UnsupportedLocaleError(locale)

        translation.activate(self.get_iso639_locale(locale))

    def set_locale_from_request(self, request) -> str:
        """
        Activate the best locale for the request and return it.

        Order: the authenticated user's language, then the Accept-Language
        header, then the default locale.
        """
        locale = (
            self.get_locale_from_user(getattr(request, 'user', None))
            or self.get_locale_from_accept_language(request.META.get('HTTP_ACCEPT_LANGUAGE', ''))
            or self.default_locale
        )

        self.set_locale(locale)
        return locale

    def resolve_supported_locale(self, locale: Optional[str]) -> str:
        """Map arbitrary input onto a supported locale, falling back to the default."""
        if locale:
            candidates = [
                self.get_iso15897_locale(locale),
                self.get_language_from_locale(locale),
            ]
            supported = self._first_supported(candidates)
            if supported:
                return supported

        return self.default_locale

    def get_locale_from_user(self, user) -> Optional[str]:
        language = getattr(user, 'language', None) if user is not None and user.is_authenticated else None
        if not language:
            return None

        locales = [self.get_iso15897_locale(language)]
        if self._is_extended_locale(locales[0]):
            locales.append(self.get_language_from_locale(locales[0]))

        return self._first_supported(locales)

    def get_locale_from_accept_language(self, header: str) -> Optional[str]:
        """
        Pick the client's most preferred supported locale.

        A regional preference (``fr-CA``) also matches its base language
        (``fr``). When the header names nothing supported the first
        supported locale wins.
        """
        supported = list(self.supported_locales)
        if not supported:
            return None

        by_lower = {locale.lower(): locale for locale in supported}

        preferred = []
        for language, _quality in parse_accept_lang_header(header or ''):
            if language == '*':
                continue
            language = self.get_iso15897_locale(language)
            preferred.append(language)
            if self._is_extended_locale(language):
                preferred.append(self.get_language_from_locale(language))

        if not preferred:
            return supported[0]

        for language in preferred:
            match = by_lower.get(language.lower())
            if match:
                return match

        return supported[0]

    @staticmethod
    def _is_extended_locale(locale: str) -> bool:
        return '_' in locale or '-' in locale

    def _first_supported(self, locales: Iterable[str]) -> Optional[str]:
        return next((locale for locale in locales if self.is_supported_locale(locale)), None)


localisation = Localisation()
