from django.apps import AppConfig


class LocalisationConfig(AppConfig):
    """Configuration for the localisation app."""

    name = 'localisation'
    verbose_name = 'Localisation'
