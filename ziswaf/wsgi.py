"""
WSGI config for the ziswaf project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ziswaf.settings')

application = get_wsgi_application()
