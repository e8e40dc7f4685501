"""
=============================================================================
MANAGER SCHEDULE VIEWS
=============================================================================

Views for AI-generated schedules:
- generate_schedule_view() - Ask the AI for a schedule (stored as draft)
- schedule_detail() - Proposal page: days, unassigned shifts, conflicts
- schedule_json() - Same data as JSON
- publish_schedule_view() - Make it visible to employees
- unpublish_schedule_view() - Take it back to draft

=============================================================================
"""
from __future__ import annotations

import logging

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import manager_required

from ..ai_client import ScheduleGenerationError
from ..models import GeneratedSchedule
from ..services import (
    find_unavailability_conflicts,
    generate_schedule,
    publish_schedule,
    unpublish_schedule,
)
from .helpers import _month_nav, _parse_month, _validation_message

logger = logging.getLogger(__name__)


def _dashboard_url(month) -> str:
    return f"{reverse('manager_dashboard')}?month={month:%Y-%m}"


def _schedule_payload(schedule: GeneratedSchedule) -> dict:
    return {
        "id": schedule.id,
        "month": schedule.month.strftime("%Y-%m"),
        "status": schedule.status,
        "assignments": dict(schedule.sorted_days()),
        "unassigned_shifts": list(schedule.unassigned_shifts or []),
        "model_name": schedule.model_name,
        "created_at": schedule.created_at.isoformat(),
        "published_at": schedule.published_at.isoformat() if schedule.published_at else None,
    }


@manager_required
@require_http_methods(["POST"])
def generate_schedule_view(request: HttpRequest) -> HttpResponse:
    """
    Calls the AI for the posted month and redirects to the new draft.
    On failure the manager goes back to the dashboard with the error flashed;
    nothing is stored.
    """
    month = _parse_month(request.POST.get("month"))
    try:
        schedule = generate_schedule(manager=request.user, month=month)
    except ValidationError as exc:
        messages.error(request, _validation_message(exc))
        return redirect(_dashboard_url(month))
    except ScheduleGenerationError as exc:
        logger.warning("Schedule generation failed for %s: %s", month, exc)
        messages.error(request, str(exc))
        return redirect(_dashboard_url(month))

    messages.success(request, "Schedule generated. Review it and publish when ready.")
    return redirect("schedule_detail", schedule_id=schedule.id)


@manager_required
@require_http_methods(["GET"])
def schedule_detail(request: HttpRequest, schedule_id: int) -> HttpResponse:
    schedule = get_object_or_404(GeneratedSchedule.objects.select_related("created_by"), pk=schedule_id)
    return render(
        request,
        "manager/schedule-detail.html",
        {
            **_month_nav(schedule.month),
            "schedule": schedule,
            "days": schedule.sorted_days(),
            "unassigned": schedule.unassigned_shifts or [],
            "conflicts": find_unavailability_conflicts(schedule),
        },
    )


@manager_required
@require_http_methods(["GET"])
def schedule_json(request: HttpRequest, schedule_id: int) -> JsonResponse:
    schedule = get_object_or_404(GeneratedSchedule, pk=schedule_id)
    return JsonResponse(_schedule_payload(schedule))


@manager_required
@require_http_methods(["POST"])
def publish_schedule_view(request: HttpRequest, schedule_id: int) -> HttpResponse:
    schedule = get_object_or_404(GeneratedSchedule, pk=schedule_id)
    if schedule.is_published:
        messages.info(request, "Schedule is already published.")
        return redirect("schedule_detail", schedule_id=schedule.id)

    conflicts = publish_schedule(schedule)
    messages.success(request, f"Schedule for {schedule.month:%B %Y} published to employees.")
    if conflicts:
        messages.warning(
            request,
            f"{len(conflicts)} assignment(s) fall in times employees marked as unavailable.",
        )
    return redirect("schedule_detail", schedule_id=schedule.id)


@manager_required
@require_http_methods(["POST"])
def unpublish_schedule_view(request: HttpRequest, schedule_id: int) -> HttpResponse:
    schedule = get_object_or_404(GeneratedSchedule, pk=schedule_id)
    if unpublish_schedule(schedule):
        messages.success(request, "Schedule reverted to draft.")
    else:
        messages.info(request, "Schedule is not published.")
    return redirect("schedule_detail", schedule_id=schedule.id)
