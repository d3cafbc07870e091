from django.contrib import admin

from .models import SlaDefinition, BusinessHours


@admin.register(SlaDefinition)
class SlaDefinitionAdmin(admin.ModelAdmin):
    list_display = ("name", "priority", "response_time", "resolution_time", "business_hours_only", "active")
    list_filter = ("priority", "active", "business_hours_only")
    search_fields = ("name",)


@admin.register(BusinessHours)
class BusinessHoursAdmin(admin.ModelAdmin):
    list_display = ("day_of_week", "start_time", "end_time", "is_working_day")
