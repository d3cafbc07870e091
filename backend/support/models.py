from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
from django.db import models

from common.models import BaseModel
from common.numbering import NumberedModel
from sla.models import Priority


class Ticket(NumberedModel, BaseModel):
    number_field = "ticket_number"
    number_prefix_key = "TICKET_PREFIX"

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        IN_PROGRESS = "in_progress", "In Progress"
        ON_HOLD = "on_hold", "On Hold"
        WAITING_FOR_CUSTOMER = "waiting_for_customer", "Waiting for customer"
        RESOLVED = "resolved", "Resolved"
        CLOSED = "closed", "Closed"

    class Type(models.TextChoices):
        INCIDENT = "incident", "Incident"
        SERVICE_REQUEST = "service_request", "Service request"
        PROBLEM = "problem", "Problem"
        CHANGE = "change", "Change"

    class Impact(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"

    class SlaStatus(models.TextChoices):
        ON_TRACK = "on_track", "On track"
        AT_RISK = "at_risk", "At risk"
        BREACHED = "breached", "Breached"
        ON_HOLD = "on_hold", "On hold"
        COMPLETED = "completed", "Completed"

    OPEN_STATUSES = (Status.OPEN, Status.IN_PROGRESS, Status.ON_HOLD)
    DONE_STATUSES = (Status.RESOLVED, Status.CLOSED)

    ticket_number = models.CharField(max_length=32, unique=True, editable=False)
    subject = models.CharField(max_length=200)
    description = models.TextField()
    status = models.CharField(max_length=24, choices=Status.choices, default=Status.OPEN, db_index=True)
    priority = models.CharField(max_length=16, choices=Priority.choices, default=Priority.MEDIUM, db_index=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.INCIDENT)
    category = models.CharField(max_length=64)
    impact = models.CharField(max_length=16, choices=Impact.choices, default=Impact.MEDIUM)
    requester = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="requested_tickets")
    assignee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name="assigned_tickets")

    first_response_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    response_deadline = models.DateTimeField(null=True, blank=True)
    resolution_deadline = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(null=True, blank=True)  # minutes
    time_to_first_response = models.PositiveIntegerField(null=True, blank=True)  # minutes

    sla = models.ForeignKey("sla.SlaDefinition", on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets")
    sla_status = models.CharField(max_length=16, choices=SlaStatus.choices, default=SlaStatus.ON_TRACK, db_index=True)

    problem = models.ForeignKey("itsm.Problem", on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets")
    change = models.ForeignKey("itsm.Change", on_delete=models.SET_NULL, null=True, blank=True, related_name="tickets")
    related_assets = models.ManyToManyField("itsm.Asset", blank=True, related_name="tickets")
    satisfaction_score = models.DecimalField(
        max_digits=2, decimal_places=1, null=True, blank=True,
        validators=[MinValueValidator(Decimal("1.0")), MaxValueValidator(Decimal("5.0"))],
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.ticket_number} {self.subject}"


class TicketComment(BaseModel):
    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="ticket_comments")
    content = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    is_internal = models.BooleanField(default=False)  # notes hidden from requesters

    class Meta:
        ordering = ["created_at", "id"]


class KnowledgeArticle(BaseModel):
    title = models.CharField(max_length=200)
    content = models.TextField()
    category = models.CharField(max_length=64, db_index=True)
    tags = models.JSONField(default=list, blank=True)
    views = models.PositiveIntegerField(default=0)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="articles")
    published = models.BooleanField(default=False)
    related_problems = models.ManyToManyField("itsm.Problem", blank=True, related_name="articles")
    related_assets = models.ManyToManyField("itsm.Asset", blank=True, related_name="articles")

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self):
        return self.title


class ServiceItem(BaseModel):
    """Service catalog entry a requester can order."""
    name = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=64, db_index=True)
    estimated_time = models.CharField(max_length=64, blank=True)  # e.g. "2 business days"
    approval_required = models.BooleanField(default=False)
    form_data = models.JSONField(default=dict, blank=True)
    sla = models.ForeignKey("sla.SlaDefinition", on_delete=models.SET_NULL, null=True, blank=True,
                            related_name="service_items")
    workflow_steps = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["category", "name"]

    def __str__(self):
        return self.name
