import django_filters

from .models import SlaDefinition


class SlaDefinitionFilter(django_filters.FilterSet):
    """?priority=high&active=true"""
    active = django_filters.BooleanFilter(field_name="active")

    class Meta:
        model = SlaDefinition
        fields = ["priority", "active", "business_hours_only"]
