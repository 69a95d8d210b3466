"""
Django Settings - Testing Configuration
"""

from .base import *

DEBUG = False
TESTING = True

# Use faster password hasher
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# In-memory SQLite by default; point TEST_DATABASE_URL at PostgreSQL to
# exercise real row locks (the threaded race tests only run there)
TEST_DATABASE_URL = config('TEST_DATABASE_URL', default='sqlite')

if TEST_DATABASE_URL.startswith('sqlite'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': config('DB_NAME', default='assets'),
            'USER': config('DB_USER', default='assets'),
            'PASSWORD': config('DB_PASSWORD', default='password'),
            'HOST': config('DB_HOST', default='localhost'),
            'PORT': config('DB_PORT', default='5432'),
            'TEST': {
                'NAME': 'test_assets_temp',
                'CHARSET': 'UTF8',
            }
        }
    }

IDENTIFIER_MAX_ATTEMPTS = 3

# Disable logging during tests
LOGGING = {}
