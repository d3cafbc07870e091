# backend/servicedesk_backend/settings/dev.py
from .base import *

DEBUG = True

# Put our dev preflight middleware at the VERY TOP
MIDDLEWARE = [
    "core.middleware.DevCORSPreflightMiddleware",
] + [m for m in MIDDLEWARE if m != "core.middleware.DevCORSPreflightMiddleware"]

ALLOWED_HOSTS = ["*", "localhost", "127.0.0.1"]

FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")

CSRF_TRUSTED_ORIGINS = [FRONTEND_ORIGIN]
CORS_ALLOWED_ORIGINS = [FRONTEND_ORIGIN]

DATABASES = {
    "default": {"ENGINE": "django.db.backends.sqlite3", "NAME": str(BASE_DIR / "db.sqlite3")}
}

# Run background jobs inline unless a broker is configured
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "true").lower() == "true"
