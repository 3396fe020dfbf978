from django.apps import AppConfig


class TwoFactorConfig(AppConfig):
    """Configuration for the two factor app."""

    name = 'two_factor'
    verbose_name = 'Two Factor Authentication'
