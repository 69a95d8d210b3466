"""
Django Settings - Base Configuration
Asset Lifecycle & Transfer Service
"""

from pathlib import Path
from datetime import timedelta
from decouple import config, Csv
from django.core.exceptions import ImproperlyConfigured

# =============================================================================
# PATHS
# =============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# =============================================================================
# SECURITY
# =============================================================================

DEBUG = config("DEBUG", default=True, cast=bool)

SECRET_KEY = config(
    "SECRET_KEY",
    default="django-insecure-development-key-change-in-production",
)

# Block unsafe production deploys
if not DEBUG and SECRET_KEY.startswith("django-insecure"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")

# =============================================================================
# ENVIRONMENT
# =============================================================================

ENVIRONMENT = config("ENVIRONMENT", default="development")

# =============================================================================
# HOSTS
# =============================================================================

if DEBUG:
    ALLOWED_HOSTS = ["*"]
else:
    ALLOWED_HOSTS = config(
        "ALLOWED_HOSTS",
        default="localhost,127.0.0.1",
        cast=Csv(),
    )

USE_X_FORWARDED_HOST = True
USE_X_FORWARDED_PORT = True

# =============================================================================
# APPLICATIONS
# =============================================================================

INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Auth
    "apps.authentication",

    # Domain apps
    "apps.core",
    "apps.assets",

    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "django_filters",
    "drf_spectacular",
]

# =============================================================================
# MIDDLEWARE
# =============================================================================

MIDDLEWARE = [
    # Security (MUST be first)
    "django.middleware.security.SecurityMiddleware",

    # Sessions MUST come before CSRF
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",

    # CSRF must be BEFORE AuthenticationMiddleware
    "django.middleware.csrf.CsrfViewMiddleware",

    # Auth
    "django.contrib.auth.middleware.AuthenticationMiddleware",

    # Request correlation for logs
    "apps.core.middleware.CorrelationIdMiddleware",

    "django.contrib.messages.middleware.MessageMiddleware",
]

# =============================================================================
# URL / WSGI
# =============================================================================

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# =============================================================================
# TEMPLATES
# =============================================================================

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# =============================================================================
# DATABASE
# =============================================================================

DATABASE_URL = config("DATABASE_URL", default="sqlite:///db.sqlite3")

if DATABASE_URL.startswith("sqlite"):
    # SQLite (local development); row locks degrade to whole-database locks
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

else:
    # PostgreSQL (only when explicitly configured)
    POSTGRES_PASSWORD = config("POSTGRES_PASSWORD", default=None)

    if not POSTGRES_PASSWORD:
        raise ImproperlyConfigured(
            "PostgreSQL selected but POSTGRES_PASSWORD is missing"
        )

    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": config("POSTGRES_DB", default="assets"),
            "USER": config("POSTGRES_USER", default="assets"),
            "PASSWORD": POSTGRES_PASSWORD,
            "HOST": config("DB_HOST", default="localhost"),
            "PORT": config("DB_PORT", default="5432"),
            "CONN_MAX_AGE": 60,
            "ATOMIC_REQUESTS": True,
        }
    }

# =============================================================================
# AUTH
# =============================================================================

AUTH_USER_MODEL = "authentication.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# =============================================================================
# I18N
# =============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = config("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

# =============================================================================
# STATIC
# =============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# DRF
# =============================================================================

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated"
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "apps.core.renderers.StandardJSONRenderer",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "apps.core.pagination.StandardResultsPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "apps.core.exceptions.custom_exception_handler",
}

# =============================================================================
# JWT
# =============================================================================

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "ROTATE_REFRESH_TOKENS": False,
}

# =============================================================================
# ASSETS
# =============================================================================

ASSET_TAG_PREFIX = config("ASSET_TAG_PREFIX", default="HW")
TRANSFER_NUMBER_PREFIX = config("TRANSFER_NUMBER_PREFIX", default="TRF")
IDENTIFIER_MAX_ATTEMPTS = config("IDENTIFIER_MAX_ATTEMPTS", default=3, cast=int)

# Roles allowed to approve/reject/complete/cancel transfers and decommission
ASSET_APPROVER_ROLES = config("ASSET_APPROVER_ROLES", default="ADMIN", cast=Csv())
# Roles allowed to register, edit, assign and request transfers
ASSET_MANAGER_ROLES = config("ASSET_MANAGER_ROLES", default="ADMIN,HR", cast=Csv())

# =============================================================================
# API DOCS
# =============================================================================

ENABLE_API_DOCS = config("ENABLE_API_DOCS", default=DEBUG, cast=bool)

SPECTACULAR_SETTINGS = {
    "TITLE": "Asset Lifecycle API",
    "DESCRIPTION": "Asset registry and transfer approval workflow",
    "VERSION": "1.0.0",

    "SERVE_INCLUDE_SCHEMA": False,
    "SCHEMA_PATH_PREFIX": r"/api/v1",
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_COERCE_PATH_PK_SUFFIX": True,
    "SCHEMA_COERCE_METHOD_NAMES": True,
    "DISABLE_ERRORS_AND_WARNINGS": False,

    # status appears on both models with different choices
    "ENUM_NAME_OVERRIDES": {
        "AssetStatusEnum": "apps.assets.models.Asset.STATUS_CHOICES",
        "TransferStatusEnum": "apps.assets.models.AssetTransfer.STATUS_CHOICES",
    },
}
