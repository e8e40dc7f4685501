"""
=============================================================================
SCHEDULING ADMIN CONFIGURATION
=============================================================================

Django admin registration for scheduling models.

Time slots are edited inline on their EmployeePreference; requirement
slots and generated schedules get their own list pages for debugging.
=============================================================================
"""
from django.contrib import admin

from .models import (
    EmployeePreference,
    GeneratedSchedule,
    Position,
    RequirementNotes,
    RequirementPattern,
    RequirementSlot,
    TimeSlotPreference,
)


@admin.register(Position)
class PositionAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)


class TimeSlotPreferenceInline(admin.TabularInline):
    model = TimeSlotPreference
    extra = 0


@admin.register(EmployeePreference)
class EmployeePreferenceAdmin(admin.ModelAdmin):
    list_display = ("employee", "month", "updated_at")
    list_filter = ("month",)
    search_fields = ("employee__username", "employee__first_name", "employee__last_name")
    inlines = [TimeSlotPreferenceInline]


@admin.register(RequirementSlot)
class RequirementSlotAdmin(admin.ModelAdmin):
    list_display = ("date", "start_time", "end_time", "staff_count", "role", "created_by")
    list_filter = ("date", "role")


@admin.register(RequirementPattern)
class RequirementPatternAdmin(admin.ModelAdmin):
    list_display = ("name", "weekday", "start_time", "end_time", "staff_count", "role")
    list_filter = ("weekday",)


admin.site.register(RequirementNotes)


@admin.register(GeneratedSchedule)
class GeneratedScheduleAdmin(admin.ModelAdmin):
    """Keeps the prompt and raw model answer around for debugging bad generations."""
    list_display = ("month", "status", "model_name", "created_by", "created_at", "published_at")
    list_filter = ("status", "month")
    readonly_fields = ("prompt", "raw_response", "created_at", "published_at")
