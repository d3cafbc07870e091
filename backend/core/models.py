from django.db import models


class AuditLog(models.Model):
    """Append-only trail of API writes (who changed which row, from which request)."""
    id = models.BigAutoField(primary_key=True)
    user_id = models.UUIDField(blank=True, null=True)
    action = models.CharField(max_length=80)          # e.g. "create", "update", "sla.refresh"
    entity = models.CharField(max_length=120)         # e.g. "support.Ticket"
    entity_id = models.CharField(max_length=120)
    meta_json = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["entity", "entity_id"], name="core_audit_entity_idx")]

    def __str__(self):
        return f"{self.action} {self.entity}#{self.entity_id}"
