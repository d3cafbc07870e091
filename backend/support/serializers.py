from rest_framework import serializers

from itsm.models import Asset, Problem
from .models import Ticket, TicketComment, KnowledgeArticle, ServiceItem


class TicketSerializer(serializers.ModelSerializer):
    requester_name = serializers.CharField(source="requester.display_name", read_only=True, default=None)
    assignee_name = serializers.CharField(source="assignee.display_name", read_only=True, default=None)
    related_assets = serializers.PrimaryKeyRelatedField(many=True, required=False, queryset=Asset.objects.all())

    class Meta:
        model = Ticket
        fields = (
            "id", "ticket_number", "subject", "description", "status", "priority", "type", "category", "impact",
            "requester", "requester_name", "assignee", "assignee_name",
            "first_response_at", "resolved_at", "closed_at", "due_date",
            "response_deadline", "resolution_deadline", "time_spent", "time_to_first_response",
            "sla", "sla_status", "problem", "change", "related_assets", "satisfaction_score",
            "created_at", "updated_at",
        )
        read_only_fields = (
            "id", "ticket_number", "first_response_at", "resolved_at", "closed_at",
            "response_deadline", "resolution_deadline", "time_to_first_response",
            "sla", "sla_status", "created_at", "updated_at",
        )
        extra_kwargs = {"requester": {"required": False}}


class TicketCommentSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.display_name", read_only=True, default=None)
    attachments = serializers.ListField(child=serializers.CharField(max_length=500), required=False)

    class Meta:
        model = TicketComment
        fields = ("id", "ticket", "user", "user_name", "content", "attachments", "is_internal", "created_at")
        read_only_fields = ("id", "ticket", "user", "created_at")


class KnowledgeArticleSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True, default=None)
    tags = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    related_problems = serializers.PrimaryKeyRelatedField(many=True, required=False, queryset=Problem.objects.all())
    related_assets = serializers.PrimaryKeyRelatedField(many=True, required=False, queryset=Asset.objects.all())

    class Meta:
        model = KnowledgeArticle
        fields = ("id", "title", "content", "category", "tags", "views", "author", "author_name", "published",
                  "related_problems", "related_assets", "created_at", "updated_at")
        read_only_fields = ("id", "views", "author", "created_at", "updated_at")

    def validate_tags(self, value):
        # keep first occurrence, drop blanks
        seen = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class ServiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceItem
        fields = ("id", "name", "description", "category", "estimated_time", "approval_required",
                  "form_data", "sla", "workflow_steps", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")
