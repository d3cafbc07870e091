from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework.decorators import action
from rest_framework.response import Response

from common.mixins import ServiceDeskModelViewSet, AuditedActionsMixin
from common.permissions import STAFF_ROLES, MANAGEMENT_ROLES, ADMIN_ONLY, TECHNICIAN
from .filters import ProblemFilter, ChangeFilter, AssetFilter
from .models import Problem, Change, Asset
from .serializers import ProblemSerializer, ChangeSerializer, AssetSerializer


class ProblemViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    queryset = Problem.objects.select_related("assigned_to", "created_by")
    serializer_class = ProblemSerializer
    filterset_class = ProblemFilter
    search_fields = ("title", "description", "problem_number")
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "priority": ("priority_rank", "-created_at"),
    }
    role_rules = {"*": STAFF_ROLES}

    def get_create_kwargs(self):
        return {"created_by": self.request.user}


class ChangeViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    """Change requests; managers and admins only."""
    queryset = Change.objects.select_related("requester", "assigned_to", "approved_by").prefetch_related("affected_assets")
    serializer_class = ChangeSerializer
    filterset_class = ChangeFilter
    search_fields = ("title", "description", "change_number")
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "scheduled": (F("scheduled_start_time").asc(nulls_last=True), "-created_at"),
    }
    role_rules = {"*": MANAGEMENT_ROLES}

    def get_create_kwargs(self):
        if self.request.data.get("requester"):
            return {}
        return {"requester": self.request.user}


class AssetViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    """CMDB. Technicians can look assets up; only admins register or edit them."""
    queryset = Asset.objects.select_related("assigned_to")
    serializer_class = AssetSerializer
    filterset_class = AssetFilter
    search_fields = ("asset_tag", "name", "serial_number", "manufacturer", "model")
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "tag": ("asset_tag",),
    }
    role_rules = {
        "list": {TECHNICIAN},
        "retrieve": {TECHNICIAN},
        "by_tag": {TECHNICIAN},
        "*": ADMIN_ONLY,
    }

    @action(detail=False, methods=["get"], url_path=r"tag/(?P<asset_tag>[^/]+)")
    def by_tag(self, request, asset_tag=None):
        asset = get_object_or_404(Asset, asset_tag=asset_tag)
        return Response(self.get_serializer(asset).data)
