# PATH: apps/api/config/wsgi.py
# gunicorn apps.api.config.wsgi:application
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    "apps.api.config.settings.prod",
)

application = get_wsgi_application()
