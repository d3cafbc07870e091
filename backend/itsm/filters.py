import django_filters

from .models import Problem, Change, Asset


class ProblemFilter(django_filters.FilterSet):
    class Meta:
        model = Problem
        fields = ["status", "priority", "impact", "category", "assigned_to"]


class ChangeFilter(django_filters.FilterSet):
    class Meta:
        model = Change
        fields = ["status", "type", "priority", "risk", "assigned_to"]


class AssetFilter(django_filters.FilterSet):
    type = django_filters.CharFilter(field_name="type", lookup_expr="iexact")

    class Meta:
        model = Asset
        fields = ["status", "type", "assigned_to", "location"]
