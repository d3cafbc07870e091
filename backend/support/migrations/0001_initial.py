import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("itsm", "0001_initial"),
        ("sla", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("ticket_number", models.CharField(editable=False, max_length=32, unique=True)),
                ("subject", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("status", models.CharField(choices=[("open", "Open"), ("in_progress", "In Progress"), ("on_hold", "On Hold"), ("waiting_for_customer", "Waiting for customer"), ("resolved", "Resolved"), ("closed", "Closed")], db_index=True, default="open", max_length=24)),
                ("priority", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High"), ("critical", "Critical")], db_index=True, default="medium", max_length=16)),
                ("type", models.CharField(choices=[("incident", "Incident"), ("service_request", "Service request"), ("problem", "Problem"), ("change", "Change")], default="incident", max_length=20)),
                ("category", models.CharField(max_length=64)),
                ("impact", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")], default="medium", max_length=16)),
                ("first_response_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("response_deadline", models.DateTimeField(blank=True, null=True)),
                ("resolution_deadline", models.DateTimeField(blank=True, null=True)),
                ("time_spent", models.PositiveIntegerField(blank=True, null=True)),
                ("time_to_first_response", models.PositiveIntegerField(blank=True, null=True)),
                ("sla_status", models.CharField(choices=[("on_track", "On track"), ("at_risk", "At risk"), ("breached", "Breached"), ("on_hold", "On hold"), ("completed", "Completed")], db_index=True, default="on_track", max_length=16)),
                ("satisfaction_score", models.DecimalField(blank=True, decimal_places=1, max_digits=2, null=True, validators=[django.core.validators.MinValueValidator(Decimal("1.0")), django.core.validators.MaxValueValidator(Decimal("5.0"))])),
                ("assignee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_tickets", to=settings.AUTH_USER_MODEL)),
                ("change", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets", to="itsm.change")),
                ("problem", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets", to="itsm.problem")),
                ("related_assets", models.ManyToManyField(blank=True, related_name="tickets", to="itsm.asset")),
                ("requester", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requested_tickets", to=settings.AUTH_USER_MODEL)),
                ("sla", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets", to="sla.sladefinition")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="TicketComment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("content", models.TextField()),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("is_internal", models.BooleanField(default=False)),
                ("ticket", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="support.ticket")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ticket_comments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="KnowledgeArticle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("content", models.TextField()),
                ("category", models.CharField(db_index=True, max_length=64)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("views", models.PositiveIntegerField(default=0)),
                ("published", models.BooleanField(default=False)),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="articles", to=settings.AUTH_USER_MODEL)),
                ("related_assets", models.ManyToManyField(blank=True, related_name="articles", to="itsm.asset")),
                ("related_problems", models.ManyToManyField(blank=True, related_name="articles", to="itsm.problem")),
            ],
            options={
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="ServiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("category", models.CharField(db_index=True, max_length=64)),
                ("estimated_time", models.CharField(blank=True, max_length=64)),
                ("approval_required", models.BooleanField(default=False)),
                ("form_data", models.JSONField(blank=True, default=dict)),
                ("workflow_steps", models.JSONField(blank=True, default=list)),
                ("sla", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="service_items", to="sla.sladefinition")),
            ],
            options={
                "ordering": ["category", "name"],
            },
        ),
    ]
