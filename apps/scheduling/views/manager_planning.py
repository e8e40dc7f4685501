"""
=============================================================================
MANAGER PLANNING VIEWS
=============================================================================

Views for the manager's monthly planning page:
- manager_dashboard() - Requirement calendar, notes, submitted preferences,
                        generate button and schedule history
- requirement_day() - JSON editor for one day's requirement slots
- requirement_notes() - Save general notes for the AI
- apply_patterns() - Expand weekly patterns over the month
- preferences_json() - Everyone's submitted preferences for the month

=============================================================================
"""
from __future__ import annotations

from collections import defaultdict

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import manager_required

from ..forms import RequirementNotesForm
from ..models import AvailabilityStatus, GeneratedSchedule, RequirementPattern
from ..services import (
    apply_requirement_patterns,
    preferences_for_month,
    requirement_notes_for,
    requirement_slots_for_month,
    requirement_summary,
    set_requirement_slots,
    update_requirement_notes,
)
from .helpers import (
    _calendar_weeks,
    _json_validation_error,
    _month_nav,
    _parse_month,
    _parse_required_date,
    _read_requirement_slots,
    _redirect_back,
)


def _requirement_payload(slot) -> dict:
    return {
        "id": slot.id,
        "start_time": slot.start_time.strftime("%H:%M"),
        "end_time": slot.end_time.strftime("%H:%M"),
        "staff_count": slot.staff_count,
        "role": slot.role,
    }


def _preference_payload(pref) -> dict:
    by_date: dict[str, list[dict]] = defaultdict(list)
    for slot in pref.time_slots.all():
        by_date[slot.date.isoformat()].append({
            "start_time": slot.start_time.strftime("%H:%M"),
            "end_time": slot.end_time.strftime("%H:%M"),
            "status": slot.status,
            "status_label": slot.get_status_display(),
            "all_day": slot.is_all_day_unavailable,
        })
    return {
        "employee_id": pref.employee.employee_id,
        "employee_name": pref.employee.display_name,
        "role": pref.employee.role_label,
        "general_notes": pref.general_notes,
        "detailed_availability": dict(sorted(by_date.items())),
        "updated_at": pref.updated_at.isoformat(),
    }


# =============================================================================
# DASHBOARD
# =============================================================================


@manager_required
@require_http_methods(["GET"])
def manager_dashboard(request: HttpRequest) -> HttpResponse:
    """
    Monthly planning page.

    Query Parameters:
    - month: Target month in YYYY-MM format (default: next month)
    """
    month = _parse_month(request.GET.get("month"))

    slots_by_day = defaultdict(list)
    for slot in requirement_slots_for_month(month):
        slots_by_day[slot.date].append(slot)
    cells = {
        day: {"summary": requirement_summary(slots), "has_slots": True}
        for day, slots in slots_by_day.items()
    }

    preferences = list(preferences_for_month(month))
    schedules = GeneratedSchedule.objects.for_month(month).select_related("created_by")

    return render(
        request,
        "manager/dashboard.html",
        {
            **_month_nav(month),
            "weeks": _calendar_weeks(month, cells),
            "notes_form": RequirementNotesForm(initial={"notes": requirement_notes_for(month)}),
            "preferences": [_preference_payload(p) for p in preferences],
            "status_choices": AvailabilityStatus,
            "schedules": schedules,
            "has_patterns": RequirementPattern.objects.exists(),
        },
    )


# =============================================================================
# REQUIREMENTS
# =============================================================================


@manager_required
@require_http_methods(["GET", "POST"])
def requirement_day(request: HttpRequest) -> JsonResponse:
    """
    GET ?date=YYYY-MM-DD: the day's requirement slots.
    POST date + parallel start_time/end_time/staff_count/role lists:
    replaces the day's slots. Slots with staff_count < 1 or end before start
    are dropped, so posting nothing clears the day.
    """
    source = request.POST if request.method == "POST" else request.GET
    try:
        day = _parse_required_date(source.get("date"), "date")
        if request.method == "POST":
            set_requirement_slots(manager=request.user, day=day, slots=_read_requirement_slots(request))
    except ValidationError as exc:
        return _json_validation_error(exc)

    slots = requirement_slots_for_month(day).filter(date=day)
    return JsonResponse({
        "ok": True,
        "date": day.isoformat(),
        "summary": requirement_summary(list(slots)),
        "slots": [_requirement_payload(s) for s in slots],
    })


@manager_required
@require_http_methods(["POST"])
def requirement_notes(request: HttpRequest) -> HttpResponse:
    month = _parse_month(request.POST.get("month"))
    form = RequirementNotesForm(request.POST)
    if form.is_valid():
        update_requirement_notes(manager=request.user, month=month, notes=form.cleaned_data["notes"])
        messages.success(request, "Notes saved.")
    else:
        messages.error(request, "Could not save notes.")
    return _redirect_back(request, "manager_dashboard")


@manager_required
@require_http_methods(["POST"])
def apply_patterns(request: HttpRequest) -> HttpResponse:
    month = _parse_month(request.POST.get("month"))
    replace = request.POST.get("replace") == "1"
    created = apply_requirement_patterns(manager=request.user, month=month, replace=replace)
    if created:
        messages.success(request, f"Added {created} requirement slot(s) from weekly patterns.")
    else:
        messages.info(request, "No requirement slots were added.")
    return _redirect_back(request, "manager_dashboard")


# =============================================================================
# PREFERENCES
# =============================================================================


@manager_required
@require_http_methods(["GET"])
def preferences_json(request: HttpRequest) -> JsonResponse:
    month = _parse_month(request.GET.get("month"))
    return JsonResponse({
        "month": month.strftime("%Y-%m"),
        "preferences": [_preference_payload(p) for p in preferences_for_month(month)],
    })
