"""
WSGI config for the POS backend project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pos_backend.config.settings')

application = get_wsgi_application()
