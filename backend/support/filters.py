import uuid

import django_filters

from .models import Ticket, KnowledgeArticle, ServiceItem


class TicketFilter(django_filters.FilterSet):
    """
    ?status=open&priority=high&assignee=<uuid>|none&type=incident&category=hardware&sla_status=at_risk
    """
    assignee = django_filters.CharFilter(method="filter_assignee")

    class Meta:
        model = Ticket
        fields = ["status", "priority", "type", "category", "sla_status", "requester", "problem", "change"]

    def filter_assignee(self, queryset, name, value):
        if value.lower() in ("none", "null", "unassigned"):
            return queryset.filter(assignee__isnull=True)
        try:
            return queryset.filter(assignee_id=uuid.UUID(value))
        except ValueError:
            return queryset.none()


class KnowledgeArticleFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")

    class Meta:
        model = KnowledgeArticle
        fields = ["category", "author"]


class ServiceItemFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")

    class Meta:
        model = ServiceItem
        fields = ["category", "approval_required"]
