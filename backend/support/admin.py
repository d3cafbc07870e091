from django.contrib import admin

from .models import Ticket, TicketComment, KnowledgeArticle, ServiceItem


class TicketCommentInline(admin.TabularInline):
    model = TicketComment
    extra = 0
    fields = ("user", "content", "is_internal", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("ticket_number", "subject", "status", "priority", "type", "assignee", "sla_status", "created_at")
    list_filter = ("status", "priority", "type", "sla_status")
    search_fields = ("ticket_number", "subject")
    readonly_fields = ("ticket_number", "response_deadline", "resolution_deadline", "first_response_at",
                       "resolved_at", "closed_at", "time_to_first_response", "sla_status")
    inlines = [TicketCommentInline]


@admin.register(KnowledgeArticle)
class KnowledgeArticleAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "published", "views", "updated_at")
    list_filter = ("published", "category")
    search_fields = ("title",)
    readonly_fields = ("views",)


@admin.register(ServiceItem)
class ServiceItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "approval_required", "sla")
    list_filter = ("category", "approval_required")
