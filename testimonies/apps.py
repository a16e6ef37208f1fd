"""
Testimonies and their engagement (views, likes, comments).
"""

from django.apps import AppConfig


class TestimoniesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'testimonies'
    verbose_name = 'Testimonies'
