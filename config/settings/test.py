"""
Django Test Settings for the Payroll Backend

Unit tests mock the database cursor; PostgreSQL settings are only used
when a test explicitly requests database access.
"""
from .base import *  # noqa: F401, F403

# =============================================================================
# Debug Mode for Tests
# =============================================================================

DEBUG = False

# =============================================================================
# Database - Use PostgreSQL for tests to match production
# =============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('TEST_DB_NAME', default='payroll_test'),  # noqa: F405
        'USER': config('TEST_DB_USER', default='postgres'),  # noqa: F405
        'PASSWORD': config('TEST_DB_PASSWORD', default='postgres'),  # noqa: F405
        'HOST': config('TEST_DB_HOST', default='localhost'),  # noqa: F405
        'PORT': config('TEST_DB_PORT', default='5432'),  # noqa: F405
        'OPTIONS': {},
        'TEST': {
            'NAME': 'payroll_test',
        },
    }
}

# =============================================================================
# Speed Optimizations for Tests
# =============================================================================

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable logging during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
}

# =============================================================================
# REST Framework Test Settings
# =============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'apps.core.authentication.SupabaseJWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'apps.core.exceptions.custom_exception_handler',
    'UNAUTHENTICATED_USER': None,
}

# =============================================================================
# Supabase Mock Configuration
# =============================================================================

SUPABASE_URL = 'http://localhost:54321'
SUPABASE_ANON_KEY = 'test-anon-key'
SUPABASE_SERVICE_ROLE_KEY = 'test-service-role-key'
SUPABASE_JWT_SECRET = 'test-jwt-secret-key-for-testing-purposes-only'

# =============================================================================
# Payroll - pin defaults so tests don't depend on the environment
# =============================================================================

PAYROLL_CHATTER_THRESHOLD = '8000'
PAYROLL_DEFAULT_COMMISSION_PERCENTAGE = '2.5'
PAYROLL_ADMIN_ROLES = ['admin', 'owner']

# =============================================================================
# CORS - Allow all for tests
# =============================================================================

CORS_ALLOW_ALL_ORIGINS = True
