"""
Development settings for the lightning project.

This file contains settings specific to local development.
"""

from .base import *

# ============================================================================
# DEBUG & DEVELOPMENT
# ============================================================================

DEBUG = True
ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# ============================================================================
# CORS & CSRF - Development
# ============================================================================

CORS_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]

CSRF_TRUSTED_ORIGINS = CORS_ALLOWED_ORIGINS

CSRF_COOKIE_SECURE = False
SESSION_COOKIE_SECURE = False

# ============================================================================
# CACHING - Development
# ============================================================================

# Fall back to local memory when Redis isn't running locally
if not config('USE_REDIS', default=False, cast=bool):
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'lightning-dev',
        }
    }

# ============================================================================
# LOGGING - Development
# ============================================================================

LOGGING['root']['level'] = 'DEBUG'
