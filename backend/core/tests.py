import io
import json
import os
import subprocess
import sys
from unittest import mock

import pytest
from django.conf import settings
from django.core.management import call_command
from django.urls import reverse
from rest_framework.settings import api_settings

from common.pagination import DefaultPagination
from core import middleware
from core.models import AuditLog
from core.services.audit import log_event

pytestmark = pytest.mark.django_db


def test_healthz(client):
    resp = client.get(reverse("core_healthz"))
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_responses_carry_request_id_and_timing(client):
    resp = client.get(reverse("core_healthz"), HTTP_X_REQUEST_ID="abc123")
    assert resp["X-Request-ID"] == "abc123"
    assert int(resp["X-Response-Time-ms"]) >= 0


def test_malformed_request_id_is_replaced(client):
    resp = client.get(reverse("core_healthz"), HTTP_X_REQUEST_ID="bad id\r\nX-Evil: 1")
    assert resp["X-Request-ID"] != "bad id\r\nX-Evil: 1"
    assert len(resp["X-Request-ID"]) == 32


def test_preflight_answered_only_in_debug(client, settings):
    settings.DEBUG = True
    resp = client.options("/api/tickets", HTTP_ORIGIN="http://localhost:5173")
    assert resp.status_code == 204
    assert resp["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert "DELETE" not in resp["Access-Control-Allow-Methods"]


def test_slow_requests_are_logged(client, settings):
    settings.SERVICEDESK = {**settings.SERVICEDESK, "SLOW_REQUEST_MS": 0}
    with mock.patch.object(middleware.logger, "warning") as warn:
        client.get(reverse("core_healthz"), HTTP_X_REQUEST_ID="rid-1")
    assert warn.call_count == 1
    assert warn.call_args.args[-1] == "rid-1"


def test_version(client):
    resp = client.get(reverse("core_version"))
    assert resp.status_code == 200
    assert resp.json()["version"] == "0.1.0"


def test_deep_health_db_and_cache(client):
    resp = client.get(reverse("core_deep_health"), {"db": "1", "cache": "1"})
    body = resp.json()
    assert body["db"] == {"ok": True}
    # the dummy cache used in tests never stores anything
    assert body["cache"]["ok"] is False
    assert body["ok"] is False


def test_deep_health_without_checks_is_ok(client):
    assert client.get(reverse("core_deep_health")).json()["ok"] is True


def test_audit_redacts_secrets():
    entry = log_event(user_id=None, action="create", entity="identity.User", entity_id="42",
                      meta={"password1": "hunter2", "path": "/auth/register/"})
    assert entry.meta_json == {"password1": "***", "path": "/auth/register/"}
    assert AuditLog.objects.filter(entity="identity.User", entity_id="42").count() == 1


def test_core_check_command_reports_json():
    out = io.StringIO()
    call_command("core_check", "--db", "--celery", "--json", stdout=out)
    body = json.loads(out.getvalue())
    assert body["ok"] is True
    assert body["checks"]["db"]["ok"] is True
    assert body["checks"]["celery"]["ok"] is True


def test_core_check_command_fails_on_broken_probe():
    with mock.patch.dict("core.views.CHECKS", {"db": mock.Mock(side_effect=RuntimeError("down"))}):
        with pytest.raises(SystemExit) as exc:
            call_command("core_check", "--db", stdout=io.StringIO())
    assert exc.value.code == 1


def test_default_pagination_resolves():
    assert api_settings.DEFAULT_PAGINATION_CLASS is DefaultPagination


def test_api_imports_cleanly_in_a_fresh_process():
    # rest_framework.generics resolves DEFAULT_PAGINATION_CLASS while it is still importing
    code = "import django; django.setup(); import servicedesk_backend.urls"
    env = {**os.environ, "DJANGO_SETTINGS_MODULE": "servicedesk_backend.settings.test"}
    proc = subprocess.run([sys.executable, "-c", code], cwd=settings.BASE_DIR, env=env,
                          capture_output=True, text=True, timeout=60)
    assert proc.returncode == 0, proc.stderr
