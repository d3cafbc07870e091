from datetime import datetime, time, timedelta, timezone as dt_timezone
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from sla.models import SlaDefinition, BusinessHours
from sla.services import (
    add_business_minutes, compute_deadlines, evaluate_sla_status, match_sla, refresh_open_tickets, working_windows,
)
from sla.tasks import refresh_sla_statuses
from support.models import Ticket

User = get_user_model()

NINE_TO_FIVE = {dow: (time(9, 0), time(17, 0)) for dow in range(1, 6)}  # Monday..Friday


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


# -----------------------------
# Business-hours arithmetic
# -----------------------------

def test_business_minutes_within_one_window():
    # Monday 2024-03-18 10:00
    assert add_business_minutes(utc(2024, 3, 18, 10, 0), 90, NINE_TO_FIVE) == utc(2024, 3, 18, 11, 30)


def test_business_minutes_before_opening_start_at_opening():
    assert add_business_minutes(utc(2024, 3, 18, 7, 0), 30, NINE_TO_FIVE) == utc(2024, 3, 18, 9, 30)


def test_business_minutes_roll_over_weekend():
    # Friday 16:00 + 2h -> 1h on Friday, 1h on Monday
    assert add_business_minutes(utc(2024, 3, 15, 16, 0), 120, NINE_TO_FIVE) == utc(2024, 3, 18, 10, 0)


def test_business_minutes_from_saturday():
    assert add_business_minutes(utc(2024, 3, 16, 12, 0), 60, NINE_TO_FIVE) == utc(2024, 3, 18, 10, 0)


def test_business_minutes_without_windows_is_wall_clock():
    start = utc(2024, 3, 16, 12, 0)
    assert add_business_minutes(start, 60, {}) == start + timedelta(hours=1)


def test_business_minutes_zero_returns_start():
    start = utc(2024, 3, 18, 12, 0)
    assert add_business_minutes(start, 0, NINE_TO_FIVE) == start


def test_compute_deadlines_wall_clock():
    sla = SlaDefinition(name="High", priority="high", response_time=60, resolution_time=240,
                        business_hours_only=False)
    start = utc(2024, 3, 16, 12, 0)
    ticket = SimpleNamespace(priority="high", created_at=start)

    compute_deadlines(ticket, sla=sla, hours=NINE_TO_FIVE)

    assert ticket.sla is sla
    assert ticket.response_deadline == start + timedelta(minutes=60)
    assert ticket.resolution_deadline == start + timedelta(minutes=240)


def test_compute_deadlines_business_hours():
    sla = SlaDefinition(name="Medium", priority="medium", response_time=60, resolution_time=600,
                        business_hours_only=True)
    ticket = SimpleNamespace(priority="medium", created_at=utc(2024, 3, 15, 16, 0))

    compute_deadlines(ticket, sla=sla, hours=NINE_TO_FIVE)

    assert ticket.response_deadline == utc(2024, 3, 15, 17, 0)
    # 1h Friday + 8h Monday + 1h Tuesday
    assert ticket.resolution_deadline == utc(2024, 3, 19, 10, 0)


# -----------------------------
# Grading
# -----------------------------

def _ticket(**overrides):
    base = dict(
        status="open", priority="medium", created_at=utc(2024, 3, 18, 9, 0),
        first_response_at=None, resolved_at=None, closed_at=None,
        response_deadline=utc(2024, 3, 18, 10, 0), resolution_deadline=utc(2024, 3, 18, 17, 0),
        sla_status="on_track",
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def test_status_on_track_early():
    assert evaluate_sla_status(_ticket(), now=utc(2024, 3, 18, 9, 30)) == "on_track"


def test_status_breached_when_response_missed():
    assert evaluate_sla_status(_ticket(), now=utc(2024, 3, 18, 10, 1)) == "breached"


def test_status_at_risk_after_threshold():
    ticket = _ticket(first_response_at=utc(2024, 3, 18, 9, 10))
    # 6h of an 8h window = 0.75
    assert evaluate_sla_status(ticket, now=utc(2024, 3, 18, 15, 0)) == "at_risk"


def test_status_breached_after_resolution_deadline():
    ticket = _ticket(first_response_at=utc(2024, 3, 18, 9, 10))
    assert evaluate_sla_status(ticket, now=utc(2024, 3, 18, 17, 30)) == "breached"


def test_status_paused_tickets_are_on_hold():
    ticket = _ticket(status="waiting_for_customer")
    assert evaluate_sla_status(ticket, now=utc(2024, 3, 19, 9, 0)) == "on_hold"


def test_status_done_in_time_is_completed():
    ticket = _ticket(status="resolved", resolved_at=utc(2024, 3, 18, 16, 0))
    assert evaluate_sla_status(ticket, now=utc(2024, 3, 20, 9, 0)) == "completed"


def test_status_done_late_is_breached():
    ticket = _ticket(status="closed", resolved_at=utc(2024, 3, 18, 18, 0))
    assert evaluate_sla_status(ticket, now=utc(2024, 3, 20, 9, 0)) == "breached"


def test_status_without_deadlines_is_kept():
    ticket = _ticket(response_deadline=None, resolution_deadline=None, sla_status="on_track")
    assert evaluate_sla_status(ticket, now=utc(2030, 1, 1)) == "on_track"


# -----------------------------
# Database-backed behaviour
# -----------------------------

@pytest.mark.django_db
def test_match_sla_prefers_active_definition():
    SlaDefinition.objects.create(name="Old", priority="high", response_time=30, resolution_time=60, active=False)
    current = SlaDefinition.objects.create(name="Current", priority="high", response_time=60, resolution_time=120)
    assert match_sla("high") == current
    assert match_sla("low") is None


@pytest.mark.django_db
def test_working_windows_skip_non_working_days():
    BusinessHours.objects.create(day_of_week=1, start_time=time(9), end_time=time(17))
    BusinessHours.objects.create(day_of_week=0, start_time=time(9), end_time=time(17), is_working_day=False)
    assert working_windows() == {1: (time(9), time(17))}


class TicketSlaLifecycleTest(APITestCase):

    def setUp(self):
        self.requester = User.objects.create_user(email="req@example.com", password="x")
        self.sla = SlaDefinition.objects.create(name="High", priority="high", response_time=60,
                                                resolution_time=240, business_hours_only=False)

    def _ticket(self, **kwargs):
        data = {"subject": "Printer jam", "description": "Paper stuck", "category": "hardware",
                "priority": "high", "requester": self.requester}
        data.update(kwargs)
        return Ticket.objects.create(**data)

    def test_sla_attached_on_create(self):
        ticket = self._ticket()

        self.assertEqual(ticket.sla, self.sla)
        self.assertAlmostEqual(ticket.response_deadline, ticket.created_at + timedelta(minutes=60),
                               delta=timedelta(seconds=5))
        self.assertAlmostEqual(ticket.resolution_deadline, ticket.created_at + timedelta(minutes=240),
                               delta=timedelta(seconds=5))
        self.assertEqual(ticket.sla_status, Ticket.SlaStatus.ON_TRACK)

    def test_no_matching_sla_leaves_deadlines_empty(self):
        ticket = self._ticket(priority="low")
        self.assertIsNone(ticket.sla)
        self.assertIsNone(ticket.resolution_deadline)

    def test_priority_change_recomputes_sla(self):
        critical = SlaDefinition.objects.create(name="Critical", priority="critical", response_time=15,
                                                resolution_time=120, business_hours_only=False)
        ticket = self._ticket()
        ticket.priority = "critical"
        ticket.save()
        ticket.refresh_from_db()
        self.assertEqual(ticket.sla, critical)

    def test_refresh_marks_overdue_tickets_breached(self):
        ticket = self._ticket()
        past = timezone.now() - timedelta(hours=1)
        Ticket.objects.filter(pk=ticket.pk).update(response_deadline=past, resolution_deadline=past)

        self.assertEqual(refresh_open_tickets(), 1)
        ticket.refresh_from_db()
        self.assertEqual(ticket.sla_status, Ticket.SlaStatus.BREACHED)
        # second pass has nothing left to change
        self.assertEqual(refresh_open_tickets(), 0)

    def test_refresh_task_runs_eagerly(self):
        ticket = self._ticket()
        past = timezone.now() - timedelta(hours=1)
        Ticket.objects.filter(pk=ticket.pk).update(response_deadline=past, resolution_deadline=past)
        self.assertEqual(refresh_sla_statuses.delay().get(), 1)


class SlaApiTest(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.Role.ADMIN)
        self.tech = User.objects.create_user(email="tech@example.com", password="x", role=User.Role.TECHNICIAN)

    def test_sla_catalogue_is_admin_only(self):
        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.get("/api/slas").status_code, status.HTTP_403_FORBIDDEN)

    def test_create_sla(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/slas", {
            "name": "Critical", "priority": "critical", "response_time": 15, "resolution_time": 120,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["business_hours_only"])

    def test_resolution_shorter_than_response_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/slas", {
            "name": "Broken", "priority": "low", "response_time": 120, "resolution_time": 60,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("resolution_time", response.data)

    def test_list_sorted_by_priority(self):
        for priority in ("low", "critical", "medium"):
            SlaDefinition.objects.create(name=priority, priority=priority, response_time=10, resolution_time=20)
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/slas")
        self.assertEqual([row["priority"] for row in response.data["results"]], ["critical", "medium", "low"])

    def test_business_hours_validation(self):
        self.client.force_authenticate(self.admin)
        bad = self.client.post("/api/business-hours", {
            "day_of_week": 1, "start_time": "17:00", "end_time": "09:00",
        }, format="json")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

        good = self.client.post("/api/business-hours", {
            "day_of_week": 1, "start_time": "09:00", "end_time": "17:00",
        }, format="json")
        self.assertEqual(good.status_code, status.HTTP_201_CREATED)
        self.assertEqual(good.data["day_name"], "Monday")
