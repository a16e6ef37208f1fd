"""
Django settings module selector.

Loads the appropriate settings based on the DJANGO_ENVIRONMENT variable.
"""

from decouple import config

ENVIRONMENT = config('DJANGO_ENVIRONMENT', default='development')

if ENVIRONMENT == 'production':
    from .production import *
elif ENVIRONMENT == 'testing':
    from .testing import *
else:
    from .development import *
