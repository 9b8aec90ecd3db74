"""WSGI entry point for the ORI API."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ori.config.settings')

application = get_wsgi_application()
