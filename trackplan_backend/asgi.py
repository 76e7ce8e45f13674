"""
ASGI entry point for the tracking plan backend.

The alert check progress stream is served as a streaming HTTP response, so
a plain Django ASGI application is enough.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "trackplan_backend.settings.dev")

application = get_asgi_application()
