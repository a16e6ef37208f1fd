"""
Friendships, followers and blocked users.
"""

from django.apps import AppConfig


class ConnectionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'connections'
    verbose_name = 'Connections'
