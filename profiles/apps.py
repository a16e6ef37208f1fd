"""
User profiles and church membership.
"""

from django.apps import AppConfig


class ProfilesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'profiles'
    verbose_name = 'Profiles'

    def ready(self):
        """Import signal handlers when the app is ready."""
        from . import signals  # noqa: F401
