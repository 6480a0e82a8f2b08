"""Test settings for the Touring project.

In-memory sqlite, the locmem mail backend (messages land in
``django.core.mail.outbox``) and a fast password hasher.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

TOURING_COMPANY['tour']['admin_email'] = 'admin@olosuashtours.com'  # noqa: F405
TOURING_COMPANY['experience']['admin_email'] = 'admin@olosuashi.com'  # noqa: F405
WHATSAPP['ADMIN_NUMBER'] = '+254700000001'  # noqa: F405
