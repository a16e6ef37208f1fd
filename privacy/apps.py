"""
Visibility and permission policy.
"""

from django.apps import AppConfig


class PrivacyConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'privacy'
    verbose_name = 'Privacy'
