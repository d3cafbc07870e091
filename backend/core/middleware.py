import logging
import re
import time
import uuid

from django.conf import settings
from django.http import HttpResponse

logger = logging.getLogger(__name__)

# No DELETE anywhere in the API
ALLOWED_METHODS = "GET, POST, PATCH, OPTIONS"
ALLOWED_HEADERS = "authorization, content-type, accept, x-request-id"

# Caller-supplied ids end up in headers, logs and audit rows
REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def preflight_response(origin: str) -> HttpResponse:
    resp = HttpResponse(status=204)
    resp["Access-Control-Allow-Origin"] = origin
    resp["Vary"] = "Origin"
    resp["Access-Control-Allow-Methods"] = ALLOWED_METHODS
    resp["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
    resp["Access-Control-Max-Age"] = "600"
    return resp


class DevCORSPreflightMiddleware:
    """
    Lets the portal's local dev server call the API cross-origin while DEBUG is on.
    Must run ahead of CommonMiddleware, whose slash redirects break preflight.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if settings.DEBUG and request.method == "OPTIONS":
            return preflight_response(request.META.get("HTTP_ORIGIN", "*"))
        return self.get_response(request)


class RequestIDMiddleware:
    """
    Tags each request with `request.request_id`. AuditedActionsMixin copies it
    into the audit row, and the response echoes it as X-Request-ID.
    A malformed incoming id is replaced.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        incoming = request.META.get("HTTP_X_REQUEST_ID", "")
        rid = incoming if REQUEST_ID_RE.match(incoming) else uuid.uuid4().hex
        request.request_id = rid
        response = self.get_response(request)
        response["X-Request-ID"] = rid
        return response


class TimingMiddleware:
    """X-Response-Time-ms on every response; SERVICEDESK["SLOW_REQUEST_MS"] and up is logged."""

    def __init__(self, get_response):
        self.get_response = get_response
        self.slow_ms = settings.SERVICEDESK.get("SLOW_REQUEST_MS", 1000)

    def __call__(self, request):
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed = int((time.perf_counter() - started) * 1000)
        response["X-Response-Time-ms"] = str(elapsed)
        if elapsed >= self.slow_ms:
            logger.warning("slow request %s %s took %sms (rid=%s)",
                           request.method, request.path, elapsed, getattr(request, "request_id", "-"))
        return response
