"""
Settings for the test suite.

Usage:
    pytest
"""
import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('JWT_SECRET', 'test-jwt-secret-0123456789abcdef0123456789')
os.environ.setdefault('DB_ENGINE', 'django.db.backends.sqlite3')
os.environ.setdefault('HRIS_DB_SCHEMA', '')

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

HRIS_DB_SCHEMA = ''
HRIS_LOG_LEVEL = 'WARNING'
LOGGING['loggers']['core.security']['level'] = HRIS_LOG_LEVEL  # noqa: F405
LOGGING['loggers']['HR']['level'] = HRIS_LOG_LEVEL  # noqa: F405
