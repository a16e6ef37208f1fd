"""
Core application configuration for Lightning.

This app contains shared utilities, exception handlers, the action rate
limiter and middleware used across the entire project.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Core'

    def ready(self):
        from .logging.structured import configure_structlog
        configure_structlog()
