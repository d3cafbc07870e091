from datetime import date, datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from itsm.models import Asset
from reports import metrics
from support.models import Ticket

User = get_user_model()

NOW = datetime(2024, 3, 18, 12, 0, tzinfo=dt_timezone.utc)


def row(**overrides):
    base = dict(
        status="open", priority="medium", type="incident", category="software", sla_status="on_track",
        time_spent=None, time_to_first_response=None, satisfaction_score=None, assignee_id=None,
        created_at=NOW - timedelta(days=1), updated_at=NOW - timedelta(days=1),
    )
    base.update(overrides)
    return SimpleNamespace(**base)


# -----------------------------
# Helpers
# -----------------------------

def test_percent_of_nothing_is_zero():
    assert metrics.percent(0, 0) == 0


def test_percent_rounds_half_up():
    assert metrics.percent(1, 8) == 13    # 12.5
    assert metrics.percent(1, 3) == 33


def test_round_half_up_one_decimal():
    assert metrics.round_half_up(2.25, 1) == 2.3
    assert metrics.round_half_up(0.5) == 1


def test_status_labels():
    assert metrics.status_label("in_progress") == "In Progress"
    assert metrics.status_label("on_hold") == "On Hold"
    assert metrics.status_label("open") == "Open"
    assert metrics.status_label("waiting_for_customer") == "Waiting_for_customer"


def test_time_range_filter():
    recent = row(created_at=NOW - timedelta(days=2))
    old = row(created_at=NOW - timedelta(days=40))
    assert metrics.in_time_range([recent, old], "7d", now=NOW) == [recent]
    assert metrics.in_time_range([recent, old], "all", now=NOW) == [recent, old]


# -----------------------------
# Cards
# -----------------------------

def test_stats_with_nothing_resolved_is_fully_compliant():
    data = metrics.ticket_stats([row(), row(priority="critical")])
    assert data["sla_compliance"] == 100
    assert data["avg_resolution_time"] == 0
    assert data["open_tickets"] == 2
    assert data["critical_incidents"] == 1
    assert data["tickets_by_priority"] == {"low": 0, "medium": 1, "high": 0, "critical": 1}


def test_stats_compliance_and_resolution_time():
    tickets = [
        row(status="resolved", sla_status="completed", time_spent=90),
        row(status="closed", sla_status="breached", time_spent=60),
        row(status="in_progress", category="hardware"),
    ]
    problems = [SimpleNamespace(status="open"), SimpleNamespace(status="closed")]
    changes = [SimpleNamespace(status="scheduled")]
    assets = [SimpleNamespace(status="repair_needed"), SimpleNamespace(status="active")]

    data = metrics.ticket_stats(tickets, problems, changes, assets)

    assert data["sla_compliance"] == 50
    assert data["avg_resolution_time"] == 1.3     # 75 minutes
    assert data["open_problems"] == 1
    assert data["pending_changes"] == 1
    assert data["assets_count"] == 2
    assert data["assets_needing_maintenance"] == 1
    assert data["hardware_issues"] == 1
    assert data["resolved_tickets"] == 2


# -----------------------------
# Charts
# -----------------------------

def test_status_breakdown_keeps_first_seen_order():
    data = metrics.status_breakdown([row(status="in_progress"), row(), row(status="in_progress")])
    assert data == [
        {"status": "in_progress", "name": "In Progress", "value": 2},
        {"status": "open", "name": "Open", "value": 1},
    ]


def test_priority_breakdown_zero_fills():
    data = metrics.priority_breakdown([row(priority="high")])
    assert [(d["priority"], d["count"]) for d in data] == [("low", 0), ("medium", 0), ("high", 1), ("critical", 0)]
    assert data[2]["name"] == "High"


def test_resolution_trend_buckets_by_day():
    tickets = [
        row(status="resolved", time_spent=120, updated_at=datetime(2024, 3, 17, 12, 0, tzinfo=dt_timezone.utc)),
        row(status="resolved", time_spent=60, updated_at=datetime(2024, 3, 17, 15, 0, tzinfo=dt_timezone.utc)),
        row(status="closed", time_spent=600, updated_at=datetime(2024, 3, 17, 15, 0, tzinfo=dt_timezone.utc)),
    ]
    data = metrics.resolution_time_trend(tickets, days=3, today=date(2024, 3, 18))

    assert [d["name"] for d in data] == ["Mar 16", "Mar 17", "Mar 18"]
    assert data[1] == {"date": "2024-03-17", "name": "Mar 17", "hours": 1.5, "count": 2}
    assert data[0]["hours"] == 0.0


def test_sla_compliance_groups():
    tickets = [
        row(priority="critical", sla_status="completed"),
        row(priority="critical", sla_status="breached"),
        row(priority="low", sla_status="at_risk"),
        row(priority="low", sla_status="on_hold"),
    ]
    data = metrics.sla_compliance(tickets, "30d", now=NOW)

    assert data["total"] == 4
    assert data["overall"] == 25
    assert data["radial"] == [
        {"name": "Compliant", "value": 25},
        {"name": "At Risk/Breached", "value": 50},
        {"name": "No SLA Defined", "value": 25},
    ]
    assert [g["priority"] for g in data["by_priority"]] == ["Critical", "High", "Medium", "Low"]
    assert data["by_priority"][0] == {"priority": "Critical", "compliance_rate": 50, "total": 2}
    assert data["by_priority"][1]["compliance_rate"] == 0


def test_performance_by_day():
    tickets = [
        row(created_at=datetime(2024, 3, 17, 9, 0, tzinfo=dt_timezone.utc), status="resolved",
            time_to_first_response=30),
        row(created_at=datetime(2024, 3, 16, 9, 0, tzinfo=dt_timezone.utc), time_to_first_response=15),
        row(created_at=datetime(2024, 3, 17, 10, 0, tzinfo=dt_timezone.utc)),
    ]
    data = metrics.performance_metrics(tickets, "7d", now=NOW)

    assert data == [
        {"period": "3/16", "created": 1, "resolved": 0, "first_response_time": 15},
        {"period": "3/17", "created": 2, "resolved": 1, "first_response_time": 15},
    ]


def test_performance_by_month_for_long_ranges():
    tickets = [row(created_at=datetime(2024, 1, 5, tzinfo=dt_timezone.utc))]
    data = metrics.performance_metrics(tickets, "year", now=NOW)
    assert data[0]["period"] == "Jan"


def test_technician_metrics():
    alice = SimpleNamespace(full_name="Alice Adams", username="alice")
    tickets = [
        row(assignee_id=1, status="resolved", sla_status="completed", time_spent=60,
            time_to_first_response=10, satisfaction_score=4),
        row(assignee_id=1, status="open", time_to_first_response=20),
        row(assignee_id=2, status="closed", sla_status="breached", time_spent=120),
        row(assignee_id=None, status="open"),
    ]
    data = metrics.technician_metrics(tickets, {1: alice}, "30d", now=NOW)

    first, second = data["technicians"]
    assert first["name"] == "Alice Adams"
    assert first["ticket_count"] == 2
    assert first["resolution_rate"] == 50
    assert first["on_time_rate"] == 100
    assert first["avg_response_time"] == 15
    assert first["satisfaction"] == 4.0
    assert second["name"] == "Tech #2"
    assert second["on_time_rate"] == 0

    assert data["radar_technicians"] == ["Tech #2", "Alice Adams"]
    satisfaction = next(r for r in data["radar"] if r["metric"] == "satisfaction")
    assert satisfaction["values"]["Alice Adams"] == 80.0


# -----------------------------
# Endpoints
# -----------------------------

class ReportApiTest(APITestCase):

    def setUp(self):
        self.requester = User.objects.create_user(email="req@example.com", password="x")
        self.tech = User.objects.create_user(email="tech@example.com", password="x", role=User.Role.TECHNICIAN,
                                             full_name="James Wilson")
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.Role.ADMIN)
        Ticket.objects.create(subject="a", description="x", category="hardware", priority="critical",
                              requester=self.requester, assignee=self.tech)
        Ticket.objects.create(subject="b", description="x", category="email", status="resolved",
                              time_spent=30, requester=self.requester, assignee=self.tech)
        Asset.objects.create(asset_tag="LAP-1", name="Laptop", type="hardware", status="maintenance_required")

    def test_stats_admin_only(self):
        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.get("/api/stats").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/stats")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_tickets"], 2)
        self.assertEqual(response.data["open_tickets"], 1)
        self.assertEqual(response.data["critical_incidents"], 1)
        self.assertEqual(response.data["assets_needing_maintenance"], 1)

    def test_reports_hidden_from_requesters(self):
        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get("/api/reports/summary").status_code, status.HTTP_403_FORBIDDEN)

    def test_report_endpoints(self):
        self.client.force_authenticate(self.tech)

        summary = self.client.get("/api/reports/summary")
        self.assertEqual(summary.data["total"], 2)
        self.assertEqual(summary.data["critical"], 1)

        priorities = self.client.get("/api/reports/priority-breakdown")
        self.assertEqual(len(priorities.data), 4)

        statuses = self.client.get("/api/reports/status-breakdown")
        self.assertEqual({s["status"] for s in statuses.data}, {"open", "resolved"})

        trend = self.client.get("/api/reports/resolution-trend", {"days": 7})
        self.assertEqual(len(trend.data), 7)
        self.assertEqual(trend.data[-1]["count"], 1)

        sla = self.client.get("/api/reports/sla-compliance", {"time_range": "7d"})
        self.assertEqual(sla.data["time_range"], "7d")
        self.assertEqual(sla.data["total"], 2)

        perf = self.client.get("/api/reports/performance")
        self.assertEqual(perf.data["time_range"], "30d")
        self.assertEqual(sum(p["created"] for p in perf.data["results"]), 2)

        techs = self.client.get("/api/reports/technicians")
        self.assertEqual(techs.data["technicians"][0]["name"], "James Wilson")
        self.assertEqual(techs.data["technicians"][0]["ticket_count"], 2)
