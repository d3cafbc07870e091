from django.conf import settings
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils import timezone

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny


# --- Tiny public endpoints ----------------------------------------------------

def healthz(_request):
    return JsonResponse({"ok": True})


class VersionView(APIView):
    permission_classes = [AllowAny]

    def get(self, _):
        version = getattr(settings, "VERSION", None) or settings.SPECTACULAR_SETTINGS.get("VERSION") or "dev"
        return Response({
            "ok": True,
            "version": str(version),
            "debug": bool(settings.DEBUG),
            "time": timezone.now().isoformat(),
        })


# --- Deeper diagnostics -------------------------------------------------------

def check_db():
    with connection.cursor() as cur:
        cur.execute("SELECT 1;")
        cur.fetchone()
    return {"ok": True}


def check_cache(key="core_healthz_probe", value="1"):
    cache.set(key, value, timeout=10)
    got = cache.get(key)
    if got == value:
        return {"ok": True}
    return {"ok": False, "error": "Cache mismatch"}


def check_celery(timeout=5):
    from core.tasks import ping
    val = ping.delay().get(timeout=timeout)
    return {"ok": val == "pong"}


CHECKS = {"db": check_db, "cache": check_cache, "celery": check_celery}


def run_checks(names):
    """Run the named probes; returns (ok, {name: result})."""
    ok = True
    results = {}
    for name in names:
        try:
            results[name] = CHECKS[name]()
        except Exception as e:
            results[name] = {"ok": False, "error": str(e)}
        if not results[name].get("ok"):
            ok = False
    return ok, results


class DeepHealthView(APIView):
    """
    GET /api/v1/core/deep-health/?db=1&cache=1&celery=1
    Return component statuses. All checks optional.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        names = [n for n in CHECKS if request.query_params.get(n) == "1"]
        ok, results = run_checks(names)
        out = {"ok": ok, "time": timezone.now().isoformat()}
        out.update(results)
        return Response(out)
