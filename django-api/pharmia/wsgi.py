"""WSGI entry point for the PharmIA webinar API."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pharmia.settings")

application = get_wsgi_application()
