"""Base settings for all environments.

This configuration file defines the common settings used in development,
production and tests. It follows Django's standard configuration structure
and integrates third‑party packages such as Django Rest Framework,
SimpleJWT and structlog. Environment‑specific settings can be overridden in
`dev.py`, `prod.py` or `test.py`.
"""

import os
from datetime import timedelta
from pathlib import Path

import structlog

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'replace-me-in-production')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = False

ALLOWED_HOSTS: list[str] = os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',')

# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    # Third‑party apps
    'rest_framework',
    'django_filters',
    'corsheaders',
    'drf_spectacular',
    # Domain apps
    'apps.users',
    'apps.tours',
    'apps.experiences',
    'apps.bookings',
    'apps.notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# Database
# https://docs.djangoproject.com/en/5.0/ref/settings/#databases

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DB_NAME', BASE_DIR / 'db.sqlite3'),
        'USER': os.environ.get('DB_USER', ''),
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),
        'HOST': os.environ.get('DB_HOST', ''),
        'PORT': os.environ.get('DB_PORT', ''),
    }
}

# Password validation
# https://docs.djangoproject.com/en/5.0/ref/settings/#auth-password-validators

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Internationalization
# https://docs.djangoproject.com/en/5.0/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'Africa/Nairobi'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/5.0/howto/static-files/

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STATICFILES_DIRS = []

# WhiteNoise configuration for static files
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}

MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

# Email defaults
DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', 'no-reply@olosuashtours.com')
EMAIL_TIMEOUT = int(os.environ.get('EMAIL_TIMEOUT', 30))

# Tour and experience bookings are sent from two separate mailboxes.
BOOKING_MAIL_SENDERS = {
    'tour': {
        'HOST': os.environ.get('BOOKING_EMAIL_OUTGOING_SERVER', ''),
        'PORT': int(os.environ.get('BOOKING_EMAIL_SMTP_PORT', 465)),
        'USERNAME': os.environ.get('BOOKING_EMAIL_USERNAME', ''),
        'PASSWORD': os.environ.get('BOOKING_EMAIL_PASSWORD', ''),
        'USE_SSL': os.environ.get('BOOKING_EMAIL_USE_SSL', 'true').lower() == 'true',
        'FROM_EMAIL': os.environ.get('BOOKING_EMAIL_USERNAME', DEFAULT_FROM_EMAIL),
    },
    'experience': {
        'HOST': os.environ.get('EXPERIENCE_EMAIL_OUTGOING_SERVER', ''),
        'PORT': int(os.environ.get('EXPERIENCE_EMAIL_SMTP_PORT', 465)),
        'USERNAME': os.environ.get('EXPERIENCE_EMAIL_USERNAME', ''),
        'PASSWORD': os.environ.get('EXPERIENCE_EMAIL_PASSWORD', ''),
        'USE_SSL': os.environ.get('EXPERIENCE_EMAIL_USE_SSL', 'true').lower() == 'true',
        'FROM_EMAIL': os.environ.get('EXPERIENCE_EMAIL_USERNAME', DEFAULT_FROM_EMAIL),
    },
}

# Branding and contact details used by notification templates
TOURING_COMPANY = {
    'tour': {
        'company_name': os.environ.get('COMPANY_NAME', 'Olosuash Tours'),
        'company_email': os.environ.get('BOOKING_EMAIL_USERNAME', DEFAULT_FROM_EMAIL),
        'company_phone': os.environ.get('COMPANY_PHONE', '+254786027589'),
        'admin_email': os.environ.get('ADMIN_EMAIL', ''),
        'mpesa_paybill': os.environ.get('MPESA_PAYBILL', '123456'),
        'website_url': os.environ.get('COMPANY_WEBSITE', 'https://www.olosuashtours.com'),
    },
    'experience': {
        'company_name': os.environ.get('EXPERIENCE_COMPANY_NAME', 'Olosuashi Experiences'),
        'company_email': os.environ.get('EXPERIENCE_EMAIL_USERNAME', DEFAULT_FROM_EMAIL),
        'company_phone': os.environ.get('EXPERIENCE_COMPANY_PHONE', '+254708414577'),
        'admin_email': os.environ.get('ADMIN_EMAIL', ''),
        'mpesa_paybill': os.environ.get('MPESA_PAYBILL', '123456'),
        'website_url': os.environ.get('EXPERIENCE_WEBSITE', 'https://www.olosuashi.com'),
        'booking_email_subject': 'Experience Booking Confirmation',
        'booking_approval_subject': 'Experience Booking Confirmed',
        'booking_cancellation_subject': 'Experience Booking Cancelled',
    },
}

FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:5173')
ADMIN_BASE_URL = os.environ.get('ADMIN_BASE_URL', FRONTEND_URL)

# WhatsApp "sending" only builds click-to-chat links, there is no outbound API call.
WHATSAPP = {
    'API_URL': os.environ.get('WHATSAPP_API_URL', 'https://api.whatsapp.com/send'),
    'ADMIN_NUMBER': os.environ.get('ADMIN_WHATSAPP_NUMBER', '+254786027589'),
}

# Notification settings source; the database provider refreshes every TTL seconds.
BOOKING_SETTINGS_PROVIDER = os.environ.get(
    'BOOKING_SETTINGS_PROVIDER',
    'apps.notifications.settings_provider.StaticSettingsProvider',
)
BOOKING_SETTINGS_TTL = int(os.environ.get('BOOKING_SETTINGS_TTL', 300))

MAX_TRAVELERS_PER_BOOKING = 20

# Custom user model
AUTH_USER_MODEL = 'users.CustomUser'

# Django Rest Framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'shared.api.exceptions.envelope_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=60),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
}

# CORS settings (the admin console is served from a separate origin)
CORS_ALLOWED_ORIGINS = os.environ.get(
    'CORS_ALLOWED_ORIGINS',
    'http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173'
).split(',')
CORS_ALLOW_CREDENTIALS = True

# CSRF settings
CSRF_TRUSTED_ORIGINS = os.environ.get(
    'CSRF_TRUSTED_ORIGINS',
    'http://localhost:8000,http://127.0.0.1:8000'
).split(',')

# DRF Spectacular (API docs)
SPECTACULAR_SETTINGS = {
    'TITLE': 'Touring API',
    'DESCRIPTION': 'Tours and experiences booking API',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

# Logging: structlog renders JSON through the stdlib logging handlers
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "structlog.stdlib.ProcessorFormatter",
            "processor": structlog.processors.JSONRenderer(),
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": LOG_LEVEL,
        }
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "shared": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.security.DisallowedHost": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
