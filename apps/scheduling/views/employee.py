"""
=============================================================================
EMPLOYEE VIEWS
=============================================================================

Views for employees:
- employee_availability_view() - Monthly availability calendar + notes
- employee_availability_day() - JSON editor for one day's time slots
- employee_schedule_view() - The published schedule, own shifts highlighted
- employee_schedule_json() - Same data as JSON

=============================================================================
"""
from __future__ import annotations

from collections import defaultdict

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import employee_required

from ..forms import PreferenceNotesForm
from ..models import AvailabilityStatus, EmployeePreference, TimeSlotPreference
from ..services import (
    availability_summary,
    entries_for_employee,
    mark_unavailable_all_day,
    month_start,
    published_schedule_for_month,
    save_time_slot_preferences,
    submit_preference_notes,
)
from .helpers import (
    _calendar_weeks,
    _json_validation_error,
    _month_nav,
    _parse_month,
    _parse_required_date,
    _read_time_slots,
)


def _slot_payload(slot: TimeSlotPreference) -> dict:
    return {
        "start_time": slot.start_time.strftime("%H:%M"),
        "end_time": slot.end_time.strftime("%H:%M"),
        "status": slot.status,
        "status_label": slot.get_status_display(),
        "all_day": slot.is_all_day_unavailable,
    }


def _own_slots(employee, month) -> list[TimeSlotPreference]:
    return list(
        TimeSlotPreference.objects.filter(preference__employee=employee, preference__month=month_start(month))
        .order_by("date", "start_time", "id")
    )


# =============================================================================
# AVAILABILITY
# =============================================================================


@employee_required
@require_http_methods(["GET", "POST"])
def employee_availability_view(request: HttpRequest) -> HttpResponse:
    """
    GET: calendar of the month with a summary per day.
    POST: saves the general notes for the month.
    """
    source = request.POST if request.method == "POST" else request.GET
    month = _parse_month(source.get("month"))

    if request.method == "POST":
        form = PreferenceNotesForm(request.POST)
        if form.is_valid():
            submit_preference_notes(
                employee=request.user,
                month=month,
                general_notes=form.cleaned_data["general_notes"],
            )
            messages.success(request, "Your preferences have been submitted.")
        else:
            messages.error(request, "Could not save your notes.")
        return redirect(f"{reverse('employee_availability')}?month={month:%Y-%m}")

    by_day = defaultdict(list)
    for slot in _own_slots(request.user, month):
        by_day[slot.date].append(slot)
    cells = {
        day: {"summary": availability_summary(slots), "has_slots": True}
        for day, slots in by_day.items()
    }

    preference = EmployeePreference.objects.filter(employee=request.user, month=month).first()
    notes = preference.general_notes if preference else ""

    return render(
        request,
        "employee/availability.html",
        {
            **_month_nav(month),
            "weeks": _calendar_weeks(month, cells),
            "notes_form": PreferenceNotesForm(initial={"general_notes": notes}),
            "status_choices": AvailabilityStatus,
            "last_updated": preference.updated_at if preference else None,
        },
    )


@employee_required
@require_http_methods(["GET", "POST"])
def employee_availability_day(request: HttpRequest) -> JsonResponse:
    """
    GET ?date=YYYY-MM-DD: the day's slots.

    POST date plus one of:
    - all_day=1: replace the day with a single all-day Unavailable slot
    - clear=1: remove every slot of the day
    - parallel start_time/end_time/status lists: replace the day's slots
    """
    source = request.POST if request.method == "POST" else request.GET
    try:
        day = _parse_required_date(source.get("date"), "date")
        if request.method == "POST":
            if request.POST.get("all_day") == "1":
                mark_unavailable_all_day(employee=request.user, day=day)
            elif request.POST.get("clear") == "1":
                save_time_slot_preferences(employee=request.user, day=day, slots=[])
            else:
                save_time_slot_preferences(employee=request.user, day=day, slots=_read_time_slots(request))
    except ValidationError as exc:
        return _json_validation_error(exc)

    slots = [s for s in _own_slots(request.user, day) if s.date == day]
    return JsonResponse({
        "ok": True,
        "date": day.isoformat(),
        "summary": availability_summary(slots),
        "slots": [_slot_payload(s) for s in slots],
    })


# =============================================================================
# PUBLISHED SCHEDULE
# =============================================================================


def _schedule_context(request: HttpRequest) -> dict:
    month = _parse_month(request.GET.get("month"))
    schedule = published_schedule_for_month(month)
    mine = entries_for_employee(schedule, request.user) if schedule else []
    return {
        **_month_nav(month),
        "schedule": schedule,
        "days": schedule.sorted_days() if schedule else [],
        "my_shifts": mine,
    }


@employee_required
@require_http_methods(["GET"])
def employee_schedule_view(request: HttpRequest) -> HttpResponse:
    context = _schedule_context(request)
    context["my_days"] = {day_key for day_key, _ in context["my_shifts"]}
    context["my_name"] = request.user.display_name
    return render(request, "employee/schedule.html", context)


@employee_required
@require_http_methods(["GET"])
def employee_schedule_json(request: HttpRequest) -> JsonResponse:
    """Published schedule for ?month=; `schedule` is null when nothing is published yet."""
    context = _schedule_context(request)
    schedule = context["schedule"]
    if schedule is None:
        return JsonResponse({"month": context["month_param"], "schedule": None, "my_shifts": []})

    return JsonResponse({
        "month": context["month_param"],
        "schedule": {
            "id": schedule.id,
            "published_at": schedule.published_at.isoformat() if schedule.published_at else None,
            "assignments": dict(context["days"]),
            "unassigned_shifts": list(schedule.unassigned_shifts or []),
        },
        "my_shifts": [
            {
                "date": day_key,
                "start_time": entry.start_time.strftime("%H:%M"),
                "end_time": entry.end_time.strftime("%H:%M"),
                "role": entry.role,
            }
            for day_key, entry in context["my_shifts"]
        ],
    })
