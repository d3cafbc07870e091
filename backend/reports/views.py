from __future__ import annotations
from typing import Any, Dict, List

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import RolePermission, ADMIN_ONLY, STAFF_ROLES
from itsm.models import Problem, Change, Asset
from support.models import Ticket
from . import metrics

TICKET_FIELDS = (
    "id", "status", "priority", "type", "category", "sla_status", "time_spent", "time_to_first_response",
    "satisfaction_score", "assignee_id", "created_at", "updated_at",
)


def ticket_rows() -> List[Ticket]:
    return list(Ticket.objects.only(*TICKET_FIELDS).order_by("created_at", "id"))


def _time_range(request) -> str:
    return request.query_params.get("time_range") or metrics.DEFAULT_TIME_RANGE


def _days(request) -> int:
    default = int(settings.SERVICEDESK.get("TREND_DAYS", 30))
    try:
        days = int(request.query_params.get("days", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(days, 365))


class StatsView(APIView):
    """
    GET /api/stats
    Headline numbers for the admin dashboard cards.
    """
    permission_classes = [RolePermission]
    role_rules = {"*": ADMIN_ONLY}

    def get(self, request):
        data: Dict[str, Any] = metrics.ticket_stats(
            ticket_rows(),
            problems=Problem.objects.only("status"),
            changes=Change.objects.only("status"),
            assets=Asset.objects.only("status"),
        )
        return Response(data)


class ReportViewSet(viewsets.ViewSet):
    """
    Chart view-models for the reports page:
      /api/reports/summary
      /api/reports/status-breakdown
      /api/reports/priority-breakdown
      /api/reports/resolution-trend?days=30
      /api/reports/sla-compliance?time_range=30d
      /api/reports/performance?time_range=30d
      /api/reports/technicians?time_range=30d
    """
    permission_classes = [RolePermission]
    role_rules = {"*": STAFF_ROLES}

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(metrics.report_summary(ticket_rows()))

    @action(detail=False, methods=["get"], url_path="status-breakdown")
    def status_breakdown(self, request):
        return Response(metrics.status_breakdown(ticket_rows()))

    @action(detail=False, methods=["get"], url_path="priority-breakdown")
    def priority_breakdown(self, request):
        return Response(metrics.priority_breakdown(ticket_rows()))

    @action(detail=False, methods=["get"], url_path="resolution-trend")
    def resolution_trend(self, request):
        return Response(metrics.resolution_time_trend(ticket_rows(), days=_days(request)))

    @action(detail=False, methods=["get"], url_path="sla-compliance")
    def sla_compliance(self, request):
        time_range = _time_range(request)
        data = metrics.sla_compliance(ticket_rows(), time_range)
        data["time_range"] = time_range
        return Response(data)

    @action(detail=False, methods=["get"])
    def performance(self, request):
        time_range = _time_range(request)
        return Response({"time_range": time_range, "results": metrics.performance_metrics(ticket_rows(), time_range)})

    @action(detail=False, methods=["get"])
    def technicians(self, request):
        time_range = _time_range(request)
        rows = ticket_rows()
        ids = {t.assignee_id for t in rows if t.assignee_id}
        users = {u.id: u for u in get_user_model().objects.filter(id__in=ids).only("id", "full_name", "username")}
        data = metrics.technician_metrics(rows, users, time_range)
        data["time_range"] = time_range
        return Response(data)
