from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .services import localisation


class SupportedLocaleValidator:
    """Reject locales missing from ``SUPPORTED_LOCALES``."""

    message = _('The selected language is invalid.')

    def __call__(self, value):
        if not localisation.is_supported_locale(value):
            raise serializers.ValidationError(self.message, code='invalid_choice')
