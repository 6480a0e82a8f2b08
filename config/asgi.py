"""ASGI config for the Touring project.

The API is plain request/response HTTP; ASGI is exposed for servers such as
uvicorn that prefer it over WSGI.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

# Use the development settings by default. Production servers should set
# DJANGO_SETTINGS_MODULE accordingly.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
