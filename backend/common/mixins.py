# backend/common/mixins.py
from __future__ import annotations

import logging
from typing import Iterable, Dict, Any, Optional, Sequence, Union

from django.db.models import Q, Model, Case, When, Value, IntegerField, OrderBy
from django.core.exceptions import FieldDoesNotExist
from rest_framework.viewsets import ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from common.pagination import DefaultPagination
from common.permissions import RolePermission
from core.services.audit import log_event

logger = logging.getLogger(__name__)

PRIORITY_ORDER = ("critical", "high", "medium", "low")


def priority_rank(field: str = "priority"):
    """critical=0 ... low=3; unknown priorities sort last."""
    return Case(
        *[When(**{field: p}, then=Value(i)) for i, p in enumerate(PRIORITY_ORDER)],
        default=Value(len(PRIORITY_ORDER)),
        output_field=IntegerField(),
    )


# -----------------------------
# Base service desk MVSet
# -----------------------------
class ServiceDeskModelViewSet(ModelViewSet):
    """
    Opinionated base ViewSet for service desk resources:

    - Role gate per action via `role_rules` (see common.permissions.RolePermission).
    - django-filter exact filters via `filterset_class` / `filterset_fields`.
    - Simple "q" search (icontains across `search_fields`, element-wise over
      the JSON lists named in `search_list_fields`).
    - Named "sort" presets (`sort_options`), falling back to `default_ordering`.
    - No DELETE: rows are created and then partially updated.

    Override:
      - `role_rules` (dict action -> roles)
      - `search_fields` (tuple of field names / lookups)
      - `search_list_fields` (JSON list fields matched per element)
      - `sort_options` (dict sort name -> ordering tuple)
      - `default_ordering` (sequence)
    """
    pagination_class = DefaultPagination
    permission_classes = [RolePermission]
    filter_backends = [DjangoFilterBackend]
    http_method_names = ["get", "post", "patch", "head", "options"]

    role_rules: Dict[str, Any] = {}
    search_fields: Iterable[str] = tuple()
    search_list_fields: Iterable[str] = tuple()
    sort_options: Dict[str, Sequence[Union[str, OrderBy]]] = {
        "created": ("-created_at",),
        "updated": ("-updated_at",),
    }
    default_ordering: Iterable[str] = ("-created_at",)

    # ---- Queryset plumbing ----
    def _model_class(self) -> type[Model]:
        if hasattr(self, "queryset") and self.queryset is not None:
            return self.queryset.model
        return self.get_serializer().Meta.model  # type: ignore[attr-defined]

    def _has_field(self, field_name: str) -> bool:
        try:
            self._model_class()._meta.get_field(field_name)
            return True
        except FieldDoesNotExist:
            return False

    def _list_field_matches(self, qs, field: str, needle: str):
        # JSON text would also match brackets, quotes and escaped characters
        ids = []
        for pk, values in qs.values_list("pk", field):
            if any(needle in str(v).casefold() for v in (values or [])):
                ids.append(pk)
        return ids

    def _apply_search(self, qs):
        q = (self.request.query_params.get("q") or "").strip()
        if not q:
            return qs
        list_fields = tuple(self.search_list_fields)
        fields = tuple(self.search_fields) or tuple(
            f for f in ("name", "title", "description") if self._has_field(f)
        )
        if not fields and not list_fields:
            return qs
        cond = Q()
        for f in fields:
            cond |= Q(**{f"{f}__icontains": q})
        needle = q.casefold()
        for f in list_fields:
            cond |= Q(pk__in=self._list_field_matches(qs, f, needle))
        return qs.filter(cond)

    def _apply_sort(self, qs):
        sort = self.request.query_params.get("sort")
        ordering: Optional[Sequence[Union[str, OrderBy]]] = self.sort_options.get(sort) if sort else None
        if ordering is None:
            ordering = tuple(self.default_ordering)
        if any(isinstance(o, str) and o.lstrip("-") == "priority_rank" for o in ordering):
            qs = qs.annotate(priority_rank=priority_rank())
        return qs.order_by(*ordering) if ordering else qs

    def scope_queryset(self, qs):
        """Hook for per-role row visibility."""
        return qs

    def get_queryset(self):
        qs = super().get_queryset()
        qs = self.scope_queryset(qs)
        qs = self._apply_search(qs)
        qs = self._apply_sort(qs)
        return qs


# -----------------------------
# Audit trail
# -----------------------------
class AuditedActionsMixin:
    """Attach to ViewSets you want to auto-audit."""
    def _audit(self, action: str, obj, meta=None):
        user_id = getattr(self.request.user, "id", None)
        entity = f"{obj._meta.app_label}.{obj.__class__.__name__}"
        entity_id = getattr(obj, "pk", None) or ""
        try:
            log_event(user_id=str(user_id) if user_id else None,
                      action=action, entity=entity, entity_id=str(entity_id), meta=meta or {})
        except Exception:
            # Never break the request on audit failure
            logger.exception("audit %s failed for %s#%s", action, entity, entity_id)

    def _request_meta(self) -> Dict[str, Any]:
        meta = {"path": self.request.path, "method": self.request.method}
        rid = getattr(self.request, "request_id", None)
        if rid:
            meta["request_id"] = rid
        return meta

    def get_create_kwargs(self) -> Dict[str, Any]:
        """Server-side values injected on create (e.g. the requesting user)."""
        return {}

    def perform_create(self, serializer):
        obj = serializer.save(**self.get_create_kwargs())
        self._audit("create", obj, meta=self._request_meta())
        return obj

    def perform_update(self, serializer):
        obj = serializer.save()
        meta = self._request_meta()
        meta["fields"] = sorted(serializer.validated_data.keys())
        self._audit("update", obj, meta=meta)
        return obj
