"""Development settings for the Touring project.

Debug on, every host and origin allowed, and booking emails printed to the
console instead of going through the tour and experience SMTP accounts.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

# The admin console dev server runs on a random port
CORS_ALLOW_ALL_ORIGINS = True

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Empty hosts make get_mail_connection fall back to EMAIL_BACKEND above
for _sender in BOOKING_MAIL_SENDERS.values():  # noqa: F405
    _sender['HOST'] = ''

# Edits to SystemSetting rows show up on the next booking
BOOKING_SETTINGS_TTL = 0
