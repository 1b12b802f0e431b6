"""
Django settings for the HRIS project.
"""
import os

from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Security: DEBUG from environment variable (defaults to False for production safety)
DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'

# Security: SECRET_KEY / JWT_SECRET from environment, dev defaults only with DEBUG
SECRET_KEY = os.environ.get('SECRET_KEY') or ('dev-only-secret-key' if DEBUG else None)
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set. Generate one with: openssl rand -hex 32")

JWT_SECRET = os.environ.get('JWT_SECRET') or ('dev-only-jwt-secret-change-me-0123456789abcdef' if DEBUG else None)
if not JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable must be set")

ALLOWED_HOSTS = [h.strip() for h in os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'core.security',
    'HR.employee_records',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'hris_project.urls'

WSGI_APPLICATION = 'hris_project.wsgi.application'

# Database: sqlite unless DB_ENGINE points elsewhere (e.g. mssql, django.db.backends.postgresql)
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')
if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'hris'),
            'USER': os.environ.get('DB_USER', ''),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', ''),
        }
    }

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ─────────────────────────────────────────
# Field security
# ─────────────────────────────────────────
# Schema holding the record and rule tables ('dbo' on SQL Server, empty on sqlite)
HRIS_DB_SCHEMA = os.environ.get('HRIS_DB_SCHEMA', '')

HRIS_RULE_TABLES = {
    'role_column_access': os.environ.get('HRIS_ROLE_COLUMN_ACCESS_TABLE', 'role_column_access'),
    'roles': os.environ.get('HRIS_ROLES_TABLE', 'roles'),
    'column_catalog': os.environ.get('HRIS_COLUMN_CATALOG_TABLE', 'column_catalog'),
    'type_column_access': os.environ.get('HRIS_TYPE_COLUMN_ACCESS_TABLE', 'type_column_access'),
    'role_permissions': os.environ.get('HRIS_ROLE_PERMISSIONS_TABLE', 'role_permissions'),
    'permissions': os.environ.get('HRIS_PERMISSIONS_TABLE', 'permissions'),
    'login': os.environ.get('HRIS_LOGIN_TABLE', 'login'),
}

# (section, column) whose value decides a record's category
HRIS_CATEGORY_FIELD = ('core', 'nationality')

# Category applied on a tie when a record's category is unknown
HRIS_FALLBACK_CATEGORY = os.environ.get('HRIS_FALLBACK_CATEGORY', 'expat')

HRIS_ROLES_CLAIM = 'roles'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTStatelessUserAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'hris_project.response_formatter.StandardizedJSONRenderer',
    ),
    'EXCEPTION_HANDLER': 'hris_project.response_formatter.custom_exception_handler',
    'UNAUTHENTICATED_USER': None,
}

SIMPLE_JWT = {
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': JWT_SECRET,
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'sub',
    'TOKEN_USER_CLASS': 'core.security.authentication.RoleTokenUser',
}

HRIS_LOG_LEVEL = os.environ.get('HRIS_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'core.security': {
            'handlers': ['console'],
            'level': HRIS_LOG_LEVEL,
            'propagate': False,
        },
        'HR': {
            'handlers': ['console'],
            'level': HRIS_LOG_LEVEL,
            'propagate': False,
        },
    },
}
