from common.mixins import ServiceDeskModelViewSet, AuditedActionsMixin
from common.permissions import ADMIN_ONLY
from .filters import SlaDefinitionFilter
from .models import SlaDefinition, BusinessHours
from .serializers import SlaDefinitionSerializer, BusinessHoursSerializer


class SlaDefinitionViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    """SLA catalogue; admin only."""
    queryset = SlaDefinition.objects.all()
    serializer_class = SlaDefinitionSerializer
    filterset_class = SlaDefinitionFilter
    search_fields = ("name", "description")
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "priority": ("priority_rank", "name"),
    }
    default_ordering = ("priority_rank", "name")
    role_rules = {"*": ADMIN_ONLY}


class BusinessHoursViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    queryset = BusinessHours.objects.all()
    serializer_class = BusinessHoursSerializer
    filterset_fields = ["is_working_day"]
    sort_options = {}
    default_ordering = ("day_of_week",)
    role_rules = {"*": ADMIN_ONLY}
