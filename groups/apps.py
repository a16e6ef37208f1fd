"""
Fellowship groups with leader-moderated membership and group chat.
"""

from django.apps import AppConfig


class GroupsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'groups'
    verbose_name = 'Groups'
