from rest_framework import serializers

from .models import SlaDefinition, BusinessHours


class SlaDefinitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = SlaDefinition
        fields = ("id", "name", "description", "priority", "response_time", "resolution_time",
                  "business_hours_only", "active", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")

    def validate(self, attrs):
        response_time = attrs.get("response_time", getattr(self.instance, "response_time", None))
        resolution_time = attrs.get("resolution_time", getattr(self.instance, "resolution_time", None))
        if response_time and resolution_time and resolution_time < response_time:
            raise serializers.ValidationError(
                {"resolution_time": "Resolution time cannot be shorter than response time."}
            )
        return attrs


class BusinessHoursSerializer(serializers.ModelSerializer):
    day_name = serializers.CharField(source="get_day_of_week_display", read_only=True)

    class Meta:
        model = BusinessHours
        fields = ("id", "day_of_week", "day_name", "start_time", "end_time", "is_working_day")
        read_only_fields = ("id",)

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs
