"""
ASGI config for the POS backend project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pos_backend.config.settings')

application = get_asgi_application()
