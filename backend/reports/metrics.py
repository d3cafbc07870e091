# backend/reports/metrics.py
"""
Dashboard aggregations over ticket-like rows.

Every function takes plain iterables of objects exposing the ticket fields it
reads (status, priority, type, category, sla_status, time_spent,
time_to_first_response, satisfaction_score, assignee_id, created_at,
updated_at), so the same code serves ORM rows and in-memory fixtures.

Percentages are whole numbers rounded half-up; an empty population yields 0.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.utils import timezone

TIME_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90, "year": 365}
DEFAULT_TIME_RANGE = "30d"

PRIORITIES = ("low", "medium", "high", "critical")
OPEN_STATUSES = ("open", "in_progress", "on_hold")
DONE_STATUSES = ("resolved", "closed")
COMPLIANT_SLA = ("completed", "on_track")
VIOLATED_SLA = ("breached", "at_risk")
OPEN_PROBLEM_STATUSES = ("open", "in_progress", "under_review")
PENDING_CHANGE_STATUSES = ("pending_approval", "scheduled", "in_progress")
ASSET_ATTENTION_STATUSES = ("maintenance_required", "repair_needed")

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

RADAR_METRICS = (
    ("resolution_rate", "Resolution Rate"),
    ("on_time_rate", "On-Time Rate"),
    ("satisfaction", "Satisfaction"),
)


# -----------------------------
# Small helpers
# -----------------------------

def round_half_up(value, ndigits: int = 0):
    """0.5 rounds away from zero (Python's round() would give banker's rounding)."""
    quant = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP)
    return int(rounded) if ndigits == 0 else float(rounded)


def percent(part: int, total: int) -> int:
    if not total:
        return 0
    return round_half_up(part / total * 100)


def _local(dt: datetime) -> datetime:
    return timezone.localtime(dt) if timezone.is_aware(dt) else dt


def _number(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def in_time_range(rows: Iterable[Any], time_range: Optional[str], now: Optional[datetime] = None) -> List[Any]:
    """Rows created within the last N days for 7d/30d/90d/year; anything else means all time."""
    rows = [r for r in rows if getattr(r, "created_at", None)]
    days = TIME_RANGE_DAYS.get(time_range or "")
    if days is None:
        return rows
    now = now or timezone.now()
    limit = timedelta(days=days)
    return [r for r in rows if now - r.created_at <= limit]


def status_label(status: str) -> str:
    if status == "in_progress":
        return "In Progress"
    if status == "on_hold":
        return "On Hold"
    return status[:1].upper() + status[1:]


# -----------------------------
# Dashboard cards
# -----------------------------

def ticket_stats(tickets: Iterable[Any], problems: Iterable[Any] = (), changes: Iterable[Any] = (),
                 assets: Iterable[Any] = ()) -> Dict[str, Any]:
    tickets = list(tickets)
    assets = list(assets)
    resolved = [t for t in tickets if t.status in DONE_STATUSES]
    compliant = [t for t in resolved if t.sla_status in COMPLIANT_SLA]
    timed = [t for t in resolved if t.time_spent is not None]

    by_status: Dict[str, int] = {}
    by_priority: Dict[str, int] = {p: 0 for p in PRIORITIES}
    for t in tickets:
        by_status[t.status] = by_status.get(t.status, 0) + 1
        by_priority[t.priority] = by_priority.get(t.priority, 0) + 1

    return {
        "open_tickets": sum(1 for t in tickets if t.status in OPEN_STATUSES),
        "critical_incidents": sum(1 for t in tickets if t.priority == "critical" and t.type == "incident"),
        # nothing resolved yet counts as fully compliant
        "sla_compliance": percent(len(compliant), len(resolved)) if resolved else 100,
        "avg_resolution_time": round_half_up(sum(t.time_spent for t in timed) / len(timed) / 60, 1) if timed else 0,
        "open_problems": sum(1 for p in problems if p.status in OPEN_PROBLEM_STATUSES),
        "pending_changes": sum(1 for c in changes if c.status in PENDING_CHANGE_STATUSES),
        "assets_count": len(assets),
        "assets_needing_maintenance": sum(1 for a in assets if a.status in ASSET_ATTENTION_STATUSES),
        "hardware_issues": sum(1 for t in tickets if t.category == "hardware" and t.status in OPEN_STATUSES),
        "total_tickets": len(tickets),
        "resolved_tickets": len(resolved),
        "tickets_by_status": by_status,
        "tickets_by_priority": by_priority,
    }


def report_summary(tickets: Iterable[Any]) -> Dict[str, Any]:
    tickets = list(tickets)
    resolved = [t for t in tickets if t.status in DONE_STATUSES]
    timed = [t for t in resolved if t.time_spent is not None]
    return {
        "total": len(tickets),
        "open": sum(1 for t in tickets if t.status in OPEN_STATUSES),
        "resolved": len(resolved),
        "critical": sum(1 for t in tickets if t.priority == "critical"),
        "high": sum(1 for t in tickets if t.priority == "high"),
        "avg_resolution_hours": round_half_up(sum(t.time_spent for t in timed) / len(timed) / 60, 1) if timed else 0,
    }


# -----------------------------
# Charts
# -----------------------------

def status_breakdown(tickets: Iterable[Any]) -> List[Dict[str, Any]]:
    counts: "OrderedDict[str, int]" = OrderedDict()
    for t in tickets:
        counts[t.status] = counts.get(t.status, 0) + 1
    return [{"status": s, "name": status_label(s), "value": n} for s, n in counts.items()]


def priority_breakdown(tickets: Iterable[Any]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for t in tickets:
        counts[t.priority] = counts.get(t.priority, 0) + 1
    return [{"priority": p, "name": p.capitalize(), "count": counts.get(p, 0)} for p in PRIORITIES]


def resolution_time_trend(tickets: Iterable[Any], days: int = 30, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    One point per calendar day for the last `days` days (oldest first).
    Only `resolved` tickets with recorded time count, bucketed by the day they were last updated.
    """
    today = today or timezone.localdate()
    buckets: "OrderedDict[date, List[int]]" = OrderedDict(
        (today - timedelta(days=days - i - 1), []) for i in range(days)
    )
    for t in tickets:
        if t.status != "resolved" or t.time_spent is None or not t.updated_at:
            continue
        day = _local(t.updated_at).date()
        if day in buckets:
            buckets[day].append(t.time_spent)

    out = []
    for day, spent in buckets.items():
        hours = round_half_up(sum(spent) / len(spent) / 60, 1) if spent else 0.0
        out.append({
            "date": day.isoformat(),
            "name": f"{MONTH_NAMES[day.month - 1]} {day.day:02d}",
            "hours": hours,
            "count": len(spent),
        })
    return out


def sla_compliance(tickets: Iterable[Any], time_range: Optional[str] = DEFAULT_TIME_RANGE,
                   now: Optional[datetime] = None) -> Dict[str, Any]:
    rows = [t for t in in_time_range(tickets, time_range, now) if t.sla_status]
    total = len(rows)
    compliant = sum(1 for t in rows if t.sla_status in COMPLIANT_SLA)
    violated = sum(1 for t in rows if t.sla_status in VIOLATED_SLA)
    no_sla = total - compliant - violated

    groups = OrderedDict((p, {"total": 0, "compliant": 0}) for p in reversed(PRIORITIES))
    for t in rows:
        group = groups.get(t.priority)
        if group is None:
            continue
        group["total"] += 1
        if t.sla_status in COMPLIANT_SLA:
            group["compliant"] += 1

    return {
        "radial": [
            {"name": "Compliant", "value": percent(compliant, total)},
            {"name": "At Risk/Breached", "value": percent(violated, total)},
            {"name": "No SLA Defined", "value": percent(no_sla, total)},
        ],
        "by_priority": [
            {"priority": p.capitalize(), "compliance_rate": percent(g["compliant"], g["total"]), "total": g["total"]}
            for p, g in groups.items()
        ],
        "overall": percent(compliant, total),
        "total": total,
    }


def performance_metrics(tickets: Iterable[Any], time_range: Optional[str] = DEFAULT_TIME_RANGE,
                        now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Created/resolved counts and mean first response (minutes) per day (7d/30d) or per month."""
    rows = sorted(in_time_range(tickets, time_range, now), key=lambda t: t.created_at)
    by_day = time_range in ("7d", "30d")

    grouped: "OrderedDict[str, Dict[str, int]]" = OrderedDict()
    for t in rows:
        created = _local(t.created_at)
        period = f"{created.month}/{created.day}" if by_day else MONTH_NAMES[created.month - 1]
        g = grouped.setdefault(period, {"created": 0, "resolved": 0, "response_sum": 0})
        g["created"] += 1
        if t.status in DONE_STATUSES:
            g["resolved"] += 1
        if t.time_to_first_response is not None:
            g["response_sum"] += t.time_to_first_response

    return [
        {
            "period": period,
            "created": g["created"],
            "resolved": g["resolved"],
            "first_response_time": round_half_up(g["response_sum"] / g["created"]) if g["created"] else 0,
        }
        for period, g in grouped.items()
    ]


def technician_metrics(tickets: Iterable[Any], users: Optional[Mapping[Any, Any]] = None,
                       time_range: Optional[str] = DEFAULT_TIME_RANGE, now: Optional[datetime] = None,
                       radar_size: int = 5) -> Dict[str, Any]:
    """
    Per-assignee workload and quality. `users` maps assignee id -> user-like object
    (full_name / username) used for display names.
    """
    users = users or {}
    rows = [t for t in in_time_range(tickets, time_range, now) if t.assignee_id]

    groups: "OrderedDict[Any, Dict[str, float]]" = OrderedDict()
    for t in rows:
        g = groups.setdefault(t.assignee_id, {
            "ticket_count": 0, "resolved_count": 0, "resolved_on_time": 0,
            "response_sum": 0, "resolution_sum": 0, "satisfaction_sum": 0.0, "satisfaction_count": 0,
        })
        g["ticket_count"] += 1
        if t.status in DONE_STATUSES:
            g["resolved_count"] += 1
            if t.sla_status in COMPLIANT_SLA:
                g["resolved_on_time"] += 1
            if t.time_spent:
                g["resolution_sum"] += t.time_spent
        if t.time_to_first_response is not None:
            g["response_sum"] += t.time_to_first_response
        score = _number(getattr(t, "satisfaction_score", None))
        if score is not None:
            g["satisfaction_sum"] += score
            g["satisfaction_count"] += 1

    technicians = []
    for assignee_id, g in groups.items():
        user = users.get(assignee_id)
        if user is not None:
            name = getattr(user, "full_name", "") or getattr(user, "username", "") or f"Tech #{assignee_id}"
        else:
            name = f"Tech #{assignee_id}"
        count, resolved = g["ticket_count"], g["resolved_count"]
        technicians.append({
            "assignee_id": str(assignee_id),
            "name": name,
            "ticket_count": count,
            "resolved_count": resolved,
            "resolution_rate": percent(resolved, count),
            "on_time_rate": percent(g["resolved_on_time"], resolved),
            "avg_response_time": round_half_up(g["response_sum"] / count) if count else 0,
            "avg_resolution_time": round_half_up(g["resolution_sum"] / resolved) if resolved else 0,
            "satisfaction": round_half_up(g["satisfaction_sum"] / g["satisfaction_count"], 1)
            if g["satisfaction_count"] else 0,
        })

    # stable sorts: ties keep first-seen order
    by_volume = sorted(technicians, key=lambda x: -x["ticket_count"])
    top = sorted(technicians, key=lambda x: -x["resolution_rate"])[:radar_size]
    radar = []
    for metric, label in RADAR_METRICS:
        values = {}
        for tech in top:
            value = tech[metric]
            # satisfaction is on a 1-5 scale; stretch to 0-100 like the rates
            values[tech["name"]] = round_half_up(value * 20, 1) if metric == "satisfaction" else value
        radar.append({"metric": metric, "label": label, "values": values})

    return {
        "technicians": by_volume,
        "radar": radar,
        "radar_technicians": [t["name"] for t in top],
    }
