"""ASGI entry point for the shiftplanner project."""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shiftplanner.settings")

application = get_asgi_application()
