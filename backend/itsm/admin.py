from django.contrib import admin

from .models import Problem, Change, Asset


@admin.register(Problem)
class ProblemAdmin(admin.ModelAdmin):
    list_display = ("problem_number", "title", "status", "priority", "assigned_to", "created_at")
    list_filter = ("status", "priority", "impact")
    search_fields = ("problem_number", "title")


@admin.register(Change)
class ChangeAdmin(admin.ModelAdmin):
    list_display = ("change_number", "title", "type", "status", "scheduled_start_time", "approved_by")
    list_filter = ("status", "type", "risk")
    search_fields = ("change_number", "title")


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ("asset_tag", "name", "type", "status", "assigned_to", "location")
    list_filter = ("status", "type")
    search_fields = ("asset_tag", "name", "serial_number")
