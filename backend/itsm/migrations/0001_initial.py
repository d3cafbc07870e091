import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

PRIORITY_CHOICES = [("low", "Low"), ("medium", "Medium"), ("high", "High"), ("critical", "Critical")]
IMPACT_CHOICES = [("low", "Low"), ("medium", "Medium"), ("high", "High")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Asset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("asset_tag", models.CharField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("type", models.CharField(max_length=32)),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive"), ("maintenance", "Maintenance"), ("maintenance_required", "Maintenance required"), ("repair_needed", "Repair needed"), ("retired", "Retired")], db_index=True, default="active", max_length=24)),
                ("manufacturer", models.CharField(blank=True, max_length=120)),
                ("model", models.CharField(blank=True, max_length=120)),
                ("serial_number", models.CharField(blank=True, max_length=120)),
                ("purchase_date", models.DateField(blank=True, null=True)),
                ("warranty_expiration", models.DateField(blank=True, null=True)),
                ("location", models.CharField(blank=True, max_length=200)),
                ("specifications", models.JSONField(blank=True, default=dict)),
                ("license_info", models.JSONField(blank=True, default=dict)),
                ("notes", models.TextField(blank=True)),
                ("last_audit_date", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assets", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Problem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("problem_number", models.CharField(editable=False, max_length=32, unique=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("status", models.CharField(choices=[("open", "Open"), ("in_progress", "In progress"), ("under_review", "Under review"), ("resolved", "Resolved"), ("closed", "Closed")], db_index=True, default="open", max_length=16)),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="medium", max_length=16)),
                ("impact", models.CharField(choices=IMPACT_CHOICES, default="medium", max_length=16)),
                ("category", models.CharField(max_length=64)),
                ("root_cause", models.TextField(blank=True)),
                ("workaround", models.TextField(blank=True)),
                ("resolution", models.TextField(blank=True)),
                ("known_errors", models.JSONField(blank=True, default=list)),
                ("affected_services", models.JSONField(blank=True, default=list)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_problems", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_problems", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Change",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("change_number", models.CharField(editable=False, max_length=32, unique=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("type", models.CharField(choices=[("normal", "Normal"), ("standard", "Standard"), ("emergency", "Emergency")], default="normal", max_length=16)),
                ("category", models.CharField(max_length=64)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("submitted", "Submitted"), ("pending_approval", "Pending approval"), ("approved", "Approved"), ("scheduled", "Scheduled"), ("in_progress", "In progress"), ("completed", "Completed"), ("rejected", "Rejected"), ("cancelled", "Cancelled")], db_index=True, default="draft", max_length=20)),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="medium", max_length=16)),
                ("impact", models.CharField(choices=IMPACT_CHOICES, default="medium", max_length=16)),
                ("risk", models.CharField(choices=IMPACT_CHOICES, default="medium", max_length=16)),
                ("implementation_plan", models.TextField(blank=True)),
                ("backout_plan", models.TextField(blank=True)),
                ("test_plan", models.TextField(blank=True)),
                ("scheduled_start_time", models.DateTimeField(blank=True, null=True)),
                ("scheduled_end_time", models.DateTimeField(blank=True, null=True)),
                ("actual_start_time", models.DateTimeField(blank=True, null=True)),
                ("actual_end_time", models.DateTimeField(blank=True, null=True)),
                ("affected_services", models.JSONField(blank=True, default=list)),
                ("approval_date", models.DateTimeField(blank=True, null=True)),
                ("affected_assets", models.ManyToManyField(blank=True, related_name="changes", to="itsm.asset")),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="approved_changes", to=settings.AUTH_USER_MODEL)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_changes", to=settings.AUTH_USER_MODEL)),
                ("requester", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requested_changes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "abstract": False,
            },
        ),
    ]
