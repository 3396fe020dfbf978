from rest_framework import serializers

from .services import localisation
from .validators import SupportedLocaleValidator


class LocaleField(serializers.CharField):
    """Locale input normalised to ISO 15897 and checked against the supported locales."""

    def __init__(self, **kwargs):
        kwargs.setdefault('max_length', 10)
        super().__init__(**kwargs)
        self.validators.append(SupportedLocaleValidator())

    def to_internal_value(self, data):
        return localisation.get_iso15897_locale(super().to_internal_value(data))
