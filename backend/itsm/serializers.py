from rest_framework import serializers

from .models import Problem, Change, Asset


class ProblemSerializer(serializers.ModelSerializer):
    assigned_to_name = serializers.CharField(source="assigned_to.display_name", read_only=True, default=None)

    class Meta:
        model = Problem
        fields = ("id", "problem_number", "title", "description", "status", "priority", "impact", "category",
                  "root_cause", "workaround", "resolution", "known_errors", "affected_services",
                  "assigned_to", "assigned_to_name", "created_by", "resolved_at", "created_at", "updated_at")
        read_only_fields = ("id", "problem_number", "created_by", "resolved_at", "created_at", "updated_at")


class ChangeSerializer(serializers.ModelSerializer):
    affected_assets = serializers.PrimaryKeyRelatedField(many=True, required=False, queryset=Asset.objects.all())

    class Meta:
        model = Change
        fields = ("id", "change_number", "title", "description", "type", "category", "status", "priority",
                  "impact", "risk", "implementation_plan", "backout_plan", "test_plan",
                  "scheduled_start_time", "scheduled_end_time", "actual_start_time", "actual_end_time",
                  "affected_services", "affected_assets", "requester", "assigned_to", "approved_by",
                  "approval_date", "created_at", "updated_at")
        read_only_fields = ("id", "change_number", "approval_date", "created_at", "updated_at")
        extra_kwargs = {"requester": {"required": False}}

    def validate(self, attrs):
        start = attrs.get("scheduled_start_time", getattr(self.instance, "scheduled_start_time", None))
        end = attrs.get("scheduled_end_time", getattr(self.instance, "scheduled_end_time", None))
        if start and end and end < start:
            raise serializers.ValidationError({"scheduled_end_time": "Scheduled end must not precede the start."})
        return attrs


class AssetSerializer(serializers.ModelSerializer):
    class Meta:
        model = Asset
        fields = ("id", "asset_tag", "name", "type", "status", "manufacturer", "model", "serial_number",
                  "purchase_date", "warranty_expiration", "location", "assigned_to", "specifications",
                  "license_info", "notes", "last_audit_date", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")
