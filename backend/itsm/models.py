from django.conf import settings
from django.db import models

from common.models import BaseModel
from common.numbering import NumberedModel
from sla.models import Priority


class Impact(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class Problem(NumberedModel, BaseModel):
    number_field = "problem_number"
    number_prefix_key = "PROBLEM_PREFIX"

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        IN_PROGRESS = "in_progress", "In progress"
        UNDER_REVIEW = "under_review", "Under review"
        RESOLVED = "resolved", "Resolved"
        CLOSED = "closed", "Closed"

    OPEN_STATUSES = (Status.OPEN, Status.IN_PROGRESS, Status.UNDER_REVIEW)

    problem_number = models.CharField(max_length=32, unique=True, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.OPEN, db_index=True)
    priority = models.CharField(max_length=16, choices=Priority.choices, default=Priority.MEDIUM)
    impact = models.CharField(max_length=16, choices=Impact.choices, default=Impact.MEDIUM)
    category = models.CharField(max_length=64)
    root_cause = models.TextField(blank=True)
    workaround = models.TextField(blank=True)
    resolution = models.TextField(blank=True)
    known_errors = models.JSONField(default=list, blank=True)
    affected_services = models.JSONField(default=list, blank=True)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name="assigned_problems")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="created_problems")
    resolved_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.problem_number} {self.title}"


class Change(NumberedModel, BaseModel):
    number_field = "change_number"
    number_prefix_key = "CHANGE_PREFIX"

    class Type(models.TextChoices):
        NORMAL = "normal", "Normal"
        STANDARD = "standard", "Standard"
        EMERGENCY = "emergency", "Emergency"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SUBMITTED = "submitted", "Submitted"
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        APPROVED = "approved", "Approved"
        SCHEDULED = "scheduled", "Scheduled"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        REJECTED = "rejected", "Rejected"
        CANCELLED = "cancelled", "Cancelled"

    PENDING_STATUSES = (Status.PENDING_APPROVAL, Status.SCHEDULED, Status.IN_PROGRESS)

    change_number = models.CharField(max_length=32, unique=True, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField()
    type = models.CharField(max_length=16, choices=Type.choices, default=Type.NORMAL)
    category = models.CharField(max_length=64)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)
    priority = models.CharField(max_length=16, choices=Priority.choices, default=Priority.MEDIUM)
    impact = models.CharField(max_length=16, choices=Impact.choices, default=Impact.MEDIUM)
    risk = models.CharField(max_length=16, choices=Impact.choices, default=Impact.MEDIUM)
    implementation_plan = models.TextField(blank=True)
    backout_plan = models.TextField(blank=True)
    test_plan = models.TextField(blank=True)
    scheduled_start_time = models.DateTimeField(null=True, blank=True)
    scheduled_end_time = models.DateTimeField(null=True, blank=True)
    actual_start_time = models.DateTimeField(null=True, blank=True)
    actual_end_time = models.DateTimeField(null=True, blank=True)
    affected_services = models.JSONField(default=list, blank=True)
    affected_assets = models.ManyToManyField("itsm.Asset", blank=True, related_name="changes")
    requester = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="requested_changes")
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name="assigned_changes")
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name="approved_changes")
    approval_date = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.change_number} {self.title}"


class Asset(BaseModel):
    """Configuration item tracked in the CMDB."""
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        MAINTENANCE = "maintenance", "Maintenance"
        MAINTENANCE_REQUIRED = "maintenance_required", "Maintenance required"
        REPAIR_NEEDED = "repair_needed", "Repair needed"
        RETIRED = "retired", "Retired"

    NEEDS_ATTENTION = (Status.MAINTENANCE_REQUIRED, Status.REPAIR_NEEDED)

    asset_tag = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=32)  # hardware, software, service, ...
    status = models.CharField(max_length=24, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    manufacturer = models.CharField(max_length=120, blank=True)
    model = models.CharField(max_length=120, blank=True)
    serial_number = models.CharField(max_length=120, blank=True)
    purchase_date = models.DateField(null=True, blank=True)
    warranty_expiration = models.DateField(null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name="assets")
    specifications = models.JSONField(default=dict, blank=True)
    license_info = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True)
    last_audit_date = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.asset_tag} {self.name}"
