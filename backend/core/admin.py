from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity", "entity_id", "user_id")
    list_filter = ("action", "entity")
    search_fields = ("entity_id",)
    readonly_fields = ("user_id", "action", "entity", "entity_id", "meta_json", "created_at")
