from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from common.models import BaseModel


class Priority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"


class SlaDefinition(BaseModel):
    """Response/resolution targets (minutes) for one ticket priority."""
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    priority = models.CharField(max_length=16, choices=Priority.choices, db_index=True)
    response_time = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    resolution_time = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    business_hours_only = models.BooleanField(default=True)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["priority", "-updated_at"]

    def clean(self):
        if self.response_time and self.resolution_time and self.resolution_time < self.response_time:
            raise ValidationError({"resolution_time": "Resolution time cannot be shorter than response time."})

    def __str__(self):
        return f"{self.name} ({self.priority})"


class BusinessHours(BaseModel):
    """One working window per weekday; day_of_week 0 = Sunday ... 6 = Saturday."""
    DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

    day_of_week = models.PositiveSmallIntegerField(
        unique=True, choices=[(i, n) for i, n in enumerate(DAY_NAMES)]
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_working_day = models.BooleanField(default=True)

    class Meta:
        ordering = ["day_of_week"]
        verbose_name_plural = "business hours"

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({"end_time": "End time must be after start time."})

    def __str__(self):
        return f"{self.DAY_NAMES[self.day_of_week]} {self.start_time:%H:%M}-{self.end_time:%H:%M}"
