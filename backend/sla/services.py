# backend/sla/services.py
"""
SLA engine: pick the definition for a ticket, turn its minute targets into
deadlines (optionally counting business hours only) and grade tickets against them.

Tickets are duck-typed here (anything with the fields below) so the grading
rules can be exercised without a database:

    status, priority, created_at, first_response_at, resolved_at, closed_at,
    response_deadline, resolution_deadline, sla_status
"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Dict, Mapping, Optional, Tuple

from django.conf import settings
from django.utils import timezone

from .models import BusinessHours, SlaDefinition

logger = logging.getLogger(__name__)

Window = Tuple[time, time]

DONE_STATUSES = ("resolved", "closed")
PAUSED_STATUSES = ("on_hold", "waiting_for_customer")

# SLA status values stored on tickets
ON_TRACK = "on_track"
AT_RISK = "at_risk"
BREACHED = "breached"
ON_HOLD = "on_hold"
COMPLETED = "completed"

# Upper bound for the business-hours walk; a single window per week still
# covers any realistic target well inside this.
MAX_WALK_DAYS = 3660


def at_risk_threshold() -> float:
    return float(settings.SERVICEDESK.get("SLA_AT_RISK_THRESHOLD", 0.75))


def match_sla(priority: str) -> Optional[SlaDefinition]:
    """Active definition for `priority`; the most recently updated wins."""
    return (SlaDefinition.objects
            .filter(priority=priority, active=True)
            .order_by("-updated_at", "-id")
            .first())


def working_windows() -> Dict[int, Window]:
    """{day_of_week: (start, end)} for configured working days (0 = Sunday)."""
    rows = BusinessHours.objects.filter(is_working_day=True).values_list("day_of_week", "start_time", "end_time")
    return {dow: (start, end) for dow, start, end in rows if end > start}


def _day_of_week(dt: datetime) -> int:
    # Python: Monday=0; business hours: Sunday=0
    return (dt.weekday() + 1) % 7


def add_business_minutes(start: datetime, minutes: int,
                         hours: Optional[Mapping[int, Window]] = None) -> datetime:
    """
    Walk forward from `start`, consuming only minutes that fall inside working
    windows. Without any working window the target is plain wall-clock time.
    """
    if minutes <= 0:
        return start
    windows = working_windows() if hours is None else hours
    if not windows:
        return start + timedelta(minutes=minutes)

    current = timezone.localtime(start) if timezone.is_aware(start) else start
    remaining = timedelta(minutes=minutes)

    for _ in range(MAX_WALK_DAYS):
        window = windows.get(_day_of_week(current))
        if window:
            open_t, close_t = window
            w_start = current.replace(hour=open_t.hour, minute=open_t.minute, second=0, microsecond=0)
            w_end = current.replace(hour=close_t.hour, minute=close_t.minute, second=0, microsecond=0)
            if current < w_end:
                begin = max(current, w_start)
                available = w_end - begin
                if remaining <= available:
                    return begin + remaining
                remaining -= available
        current = (current + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)

    raise RuntimeError(f"business-hours walk for {minutes} minutes did not terminate")


def compute_deadlines(ticket, sla: Optional[SlaDefinition] = None, start: Optional[datetime] = None,
                      hours: Optional[Mapping[int, Window]] = None):
    """
    Attach the matching SLA to `ticket` and set response/resolution deadlines
    counted from `start` (defaults to the ticket's creation time). Does not save.
    """
    sla = sla if sla is not None else match_sla(ticket.priority)
    ticket.sla = sla
    if sla is None:
        ticket.response_deadline = None
        ticket.resolution_deadline = None
        return ticket

    start = start or ticket.created_at or timezone.now()
    if sla.business_hours_only:
        windows = working_windows() if hours is None else hours
        ticket.response_deadline = add_business_minutes(start, sla.response_time, windows)
        ticket.resolution_deadline = add_business_minutes(start, sla.resolution_time, windows)
    else:
        ticket.response_deadline = start + timedelta(minutes=sla.response_time)
        ticket.resolution_deadline = start + timedelta(minutes=sla.resolution_time)
    return ticket


def evaluate_sla_status(ticket, now: Optional[datetime] = None) -> str:
    """
    Grade a ticket against its deadlines:

    - resolved/closed: completed when finished by the resolution deadline, else breached
    - on_hold / waiting_for_customer: on_hold
    - past the response deadline without a first response, or past the resolution deadline: breached
    - elapsed share of the resolution window >= threshold: at_risk
    - otherwise on_track

    Tickets without deadlines keep whatever status they already carry.
    """
    response_deadline = getattr(ticket, "response_deadline", None)
    resolution_deadline = getattr(ticket, "resolution_deadline", None)
    if response_deadline is None and resolution_deadline is None:
        return ticket.sla_status or ON_TRACK

    now = now or timezone.now()

    if ticket.status in DONE_STATUSES:
        finished = ticket.resolved_at or ticket.closed_at or now
        if resolution_deadline is not None and finished > resolution_deadline:
            return BREACHED
        return COMPLETED

    if ticket.status in PAUSED_STATUSES:
        return ON_HOLD

    if response_deadline is not None and ticket.first_response_at is None and now > response_deadline:
        return BREACHED
    if resolution_deadline is not None and now > resolution_deadline:
        return BREACHED

    if resolution_deadline is not None:
        start = ticket.created_at or now
        window = (resolution_deadline - start).total_seconds()
        if window > 0 and (now - start).total_seconds() / window >= at_risk_threshold():
            return AT_RISK

    return ON_TRACK


def refresh_open_tickets(now: Optional[datetime] = None) -> int:
    """
    Re-grade every ticket that is still running against an SLA.
    Rows are updated with queryset.update so `updated_at` keeps meaning "last edited".
    Returns the number of tickets whose status changed.
    """
    from support.models import Ticket

    now = now or timezone.now()
    changed = 0
    qs = (Ticket.objects
          .exclude(status__in=DONE_STATUSES)
          .filter(resolution_deadline__isnull=False)
          .only("id", "ticket_number", "status", "created_at", "first_response_at", "resolved_at",
                "closed_at", "response_deadline", "resolution_deadline", "sla_status"))
    for ticket in qs.iterator():
        new_status = evaluate_sla_status(ticket, now)
        if new_status != ticket.sla_status:
            Ticket.objects.filter(pk=ticket.pk).update(sla_status=new_status)
            logger.info("ticket %s sla %s -> %s", ticket.ticket_number, ticket.sla_status, new_status)
            changed += 1
    return changed
