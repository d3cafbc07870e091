import csv
import logging

from django.conf import settings
from django.core.cache import cache
from django.db.models import F
from django.http import HttpResponse
from django.utils import timezone

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from common.mixins import ServiceDeskModelViewSet, AuditedActionsMixin
from common.permissions import (
    PUBLIC, ALL_ROLES, STAFF_ROLES, ADMIN_ONLY, USER, TECHNICIAN, role_of, has_role,
)
from .caching import kb_list_cache_key, kb_list_timeout, invalidate_kb_list
from .filters import TicketFilter, KnowledgeArticleFilter, ServiceItemFilter
from .models import Ticket, KnowledgeArticle, ServiceItem
from .serializers import (
    TicketSerializer, TicketCommentSerializer, KnowledgeArticleSerializer, ServiceItemSerializer,
)

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["ID", "Title", "Category", "Author ID", "Content", "Views", "Published", "Created At"]


def _truthy(value) -> bool:
    return str(value or "").lower() in ("1", "true", "yes")


def _limit(request, default=None, ceiling=100) -> int:
    default = default or settings.SERVICEDESK.get("DEFAULT_LIST_LIMIT", 5)
    try:
        value = int(request.query_params.get("limit", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(value, ceiling))


# -----------------------------
# Tickets
# -----------------------------

class TicketViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    """
    Governance:
      - Everyone signed in can list and raise tickets; requesters only see their own.
      - Technicians, managers and admins can open and work any ticket.
      - Comments: requesters and technicians post; internal notes stay hidden from requesters.
    """
    queryset = Ticket.objects.select_related("requester", "assignee", "sla").prefetch_related("related_assets")
    serializer_class = TicketSerializer
    filterset_class = TicketFilter
    search_fields = ("subject", "description", "ticket_number")
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "priority": ("priority_rank", "-created_at"),
    }
    role_rules = {
        "list": ALL_ROLES,
        "create": ALL_ROLES,
        "retrieve": STAFF_ROLES,
        "partial_update": STAFF_ROLES,
        "comments": {"GET": ALL_ROLES, "POST": {USER, TECHNICIAN}},
    }

    def scope_queryset(self, qs):
        if role_of(self.request.user) == USER:
            return qs.filter(requester=self.request.user)
        return qs

    def get_create_kwargs(self):
        # Requesters always file for themselves; staff may file on someone's behalf
        if role_of(self.request.user) == USER or not self.request.data.get("requester"):
            return {"requester": self.request.user}
        return {}

    @action(detail=True, methods=["get", "post"])
    def comments(self, request, pk=None):
        ticket = self.get_object()
        is_requester_role = role_of(request.user) == USER

        if request.method == "GET":
            qs = ticket.comments.select_related("user")
            if is_requester_role:
                qs = qs.filter(is_internal=False)
            return Response(TicketCommentSerializer(qs, many=True).data)

        ser = TicketCommentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        extra = {"ticket": ticket, "user": request.user}
        if is_requester_role:
            extra["is_internal"] = False
        comment = ser.save(**extra)
        self._audit("comment", ticket, meta={**self._request_meta(), "comment_id": comment.pk})
        return Response(TicketCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


# -----------------------------
# Knowledge base (public read)
# -----------------------------

class KnowledgeArticleViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    """
    Governance:
      - Public read of published articles; no auth required.
      - Staff may pass ?show_unpublished=true to include drafts.
      - Admins create and edit.
    Reading an article bumps its view counter.
    """
    queryset = KnowledgeArticle.objects.select_related("author")
    serializer_class = KnowledgeArticleSerializer
    filterset_class = KnowledgeArticleFilter
    search_fields = ("title", "content")
    search_list_fields = ("tags",)
    sort_options = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
        "views": ("-views", "id"),
    }
    default_ordering = ("-updated_at",)
    role_rules = {
        "list": PUBLIC,
        "retrieve": PUBLIC,
        "most_viewed": PUBLIC,
        "recent": PUBLIC,
        "categories": PUBLIC,
        "export": STAFF_ROLES,
        "create": ADMIN_ONLY,
        "partial_update": ADMIN_ONLY,
    }

    def scope_queryset(self, qs):
        include_drafts = (
            self.action not in ("list", "retrieve", "most_viewed", "recent", "categories", "export")
            or (_truthy(self.request.query_params.get("show_unpublished"))
                and has_role(self.request.user, *STAFF_ROLES))
        )
        return qs if include_drafts else qs.filter(published=True)

    def get_create_kwargs(self):
        return {"author": self.request.user}

    def list(self, request, *args, **kwargs):
        # cached per key version; writes bump the version (see support.signals)
        audience = "staff" if has_role(request.user, *STAFF_ROLES) else "public"
        key = kb_list_cache_key(request, audience)
        data = cache.get(key)
        if data is None:
            data = super().list(request, *args, **kwargs).data
            cache.set(key, data, kb_list_timeout())
        return Response(data)

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        KnowledgeArticle.objects.filter(pk=article.pk).update(views=F("views") + 1)
        invalidate_kb_list()
        article.refresh_from_db(fields=["views"])
        return Response(self.get_serializer(article).data)

    @action(detail=False, methods=["get"], url_path="most-viewed")
    def most_viewed(self, request):
        qs = self.filter_queryset(self.get_queryset()).order_by("-views", "id")[:_limit(request)]
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=["get"])
    def recent(self, request):
        qs = self.filter_queryset(self.get_queryset()).order_by("-updated_at", "-id")[:_limit(request)]
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=["get"])
    def categories(self, request):
        qs = self.filter_queryset(self.get_queryset()).order_by()
        names = sorted(set(qs.values_list("category", flat=True)))
        return Response(names)

    @action(detail=False, methods=["get"])
    def export(self, request):
        """CSV download of the articles matching the current filters."""
        qs = self.filter_queryset(self.get_queryset())
        filename = f"knowledge-base-export-{timezone.localdate().isoformat()}.csv"
        response = HttpResponse(content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'

        writer = csv.writer(response)
        writer.writerow(EXPORT_HEADER)
        for article in qs:
            writer.writerow([
                article.id,
                article.title,
                article.category,
                article.author_id,
                article.content,
                article.views or 0,
                "Yes" if article.published else "No",
                timezone.localtime(article.created_at).date().isoformat() if article.created_at else "",
            ])
        return response


# -----------------------------
# Service catalog
# -----------------------------

class ServiceItemViewSet(AuditedActionsMixin, ServiceDeskModelViewSet):
    queryset = ServiceItem.objects.select_related("sla")
    serializer_class = ServiceItemSerializer
    filterset_class = ServiceItemFilter
    search_fields = ("name", "description")
    sort_options = {
        "created": ("-created_at",),
        "name": ("name",),
    }
    default_ordering = ("category", "name")
    role_rules = {
        "list": PUBLIC,
        "retrieve": PUBLIC,
        "create": ADMIN_ONLY,
        "partial_update": ADMIN_ONLY,
    }
