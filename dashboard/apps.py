from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """Configuration for the dashboard app."""

    name = 'dashboard'
    verbose_name = 'Dashboard'
