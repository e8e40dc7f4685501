"""
=============================================================================
SCHEDULING SERVICES (Business Logic Layer)
=============================================================================

This module contains the business logic for AI-assisted shift planning,
separated from views to keep views thin and logic reusable/testable.

Key responsibilities:

1. MONTH HELPERS
   - month_start(), next_month_start(), month_bounds(), month_days()

2. EMPLOYEE AVAILABILITY
   - save_time_slot_preferences() - replace one day's slots
   - mark_unavailable_all_day() - one-click "can't work this day"
   - submit_preference_notes() - free-text notes for the month

3. MANAGER REQUIREMENTS
   - set_requirement_slots() - replace one day's staffing needs
   - update_requirement_notes() - notes for the AI
   - apply_requirement_patterns() - expand weekly patterns over a month

4. AI GENERATION
   - ensure_generation_ready() - refuse to call the AI with nothing to plan
   - build_schedule_request() - collect DB state into the prompt input
   - generate_schedule() - prompt -> Gemini -> stored draft

5. PUBLISHING
   - publish_schedule() / unpublish_schedule()
   - find_unavailability_conflicts() - AI assignments that clash with "Unavailable"
   - entries_for_employee() - the lines an employee sees as their own

All validation raises django.core.exceptions.ValidationError with
user-friendly messages suitable for display. AI failures raise
ai_client.ScheduleGenerationError subclasses.

=============================================================================
"""
from __future__ import annotations

import logging
from datetime import date, time, timedelta
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch, QuerySet
from django.utils import timezone

from .ai_client import GeminiScheduleClient, get_schedule_client, parse_assignment
from .models import (
    ALL_DAY_END,
    ALL_DAY_START,
    AvailabilityStatus,
    EmployeePreference,
    GeneratedSchedule,
    RequirementNotes,
    RequirementPattern,
    RequirementSlot,
    ScheduleStatus,
    TimeSlotPreference,
)
from .prompts import build_schedule_prompt
from .schemas import (
    PreferenceInput,
    RequirementInput,
    ScheduleRequest,
    ShiftEntry,
    TimeSlotInput,
)

logger = logging.getLogger(__name__)


# =============================================================================
# MONTH HELPERS
# =============================================================================

def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month_start(day: date) -> date:
    """First day of the month after the one containing `day` (the default planning target)."""
    return (day.replace(day=28) + timedelta(days=4)).replace(day=1)


def month_bounds(anchor: date) -> tuple[date, date]:
    """
    Returns (start, end) dates for the month containing anchor.
    Go to day 28, add 4 days (always next month), back up to the 1st,
    then subtract a day to get the last day of the original month.
    """
    start = anchor.replace(day=1)
    end = next_month_start(start) - timedelta(days=1)
    return start, end


def month_days(anchor: date) -> list[date]:
    start, end = month_bounds(anchor)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def _overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Two ranges [A_start, A_end) and [B_start, B_end) overlap if A_start < B_end and A_end > B_start."""
    return start_a < end_b and end_a > start_b


# =============================================================================
# EMPLOYEE AVAILABILITY
# =============================================================================

def _slot_is_valid(start_time: time, end_time: time, status: str) -> bool:
    if start_time < end_time:
        return True
    return status == AvailabilityStatus.UNAVAILABLE and start_time == ALL_DAY_START and end_time == ALL_DAY_END


def _preference_for(employee, day: date) -> EmployeePreference:
    preference, _ = EmployeePreference.objects.get_or_create(employee=employee, month=month_start(day))
    return preference


@transaction.atomic
def save_time_slot_preferences(*, employee, day: date, slots: Iterable[dict]) -> list[TimeSlotPreference]:
    """
    Replaces the employee's slots for one day.

    Each slot is a dict with start_time, end_time (datetime.time) and status.
    Slots whose end is not after their start are dropped silently, except the
    all-day-unavailable marker (00:00-23:59, Unavailable). An empty list clears the day.
    """
    preference = _preference_for(employee, day)
    valid = []
    for slot in slots:
        status = slot.get("status") or AvailabilityStatus.AVAILABLE
        if status not in AvailabilityStatus.values:
            raise ValidationError({"status": f"Unknown availability status: {status}."})
        if not _slot_is_valid(slot["start_time"], slot["end_time"], status):
            continue
        valid.append(
            TimeSlotPreference(
                preference=preference,
                date=day,
                start_time=slot["start_time"],
                end_time=slot["end_time"],
                status=status,
            )
        )

    preference.time_slots.filter(date=day).delete()
    created = TimeSlotPreference.objects.bulk_create(valid)
    preference.save(update_fields=["updated_at"])
    return created


def mark_unavailable_all_day(*, employee, day: date) -> list[TimeSlotPreference]:
    return save_time_slot_preferences(
        employee=employee,
        day=day,
        slots=[{"start_time": ALL_DAY_START, "end_time": ALL_DAY_END, "status": AvailabilityStatus.UNAVAILABLE}],
    )


def submit_preference_notes(*, employee, month: date, general_notes: str) -> EmployeePreference:
    preference, _ = EmployeePreference.objects.get_or_create(employee=employee, month=month_start(month))
    preference.general_notes = (general_notes or "").strip()
    preference.save(update_fields=["general_notes", "updated_at"])
    return preference


def preferences_for_month(month: date) -> QuerySet[EmployeePreference]:
    """Submitted preferences of active employees, with slots and roles pre-fetched."""
    return (
        EmployeePreference.objects.filter(month=month_start(month), employee__is_active=True)
        .select_related("employee", "employee__position")
        .prefetch_related(Prefetch("time_slots", queryset=TimeSlotPreference.objects.order_by("date", "start_time", "id")))
        .order_by("employee__last_name", "employee__first_name", "employee__username")
    )


def availability_summary(slots: list[TimeSlotPreference]) -> str:
    """Short per-day label for the employee calendar."""
    if not slots:
        return "Not set"
    if any(s.is_all_day_unavailable for s in slots):
        return "Unavailable all day"
    preferred = sum(1 for s in slots if s.status == AvailabilityStatus.PREFERRED)
    available = sum(1 for s in slots if s.status == AvailabilityStatus.AVAILABLE)
    unavailable = sum(1 for s in slots if s.status == AvailabilityStatus.UNAVAILABLE)
    if preferred:
        return f"{preferred} preferred"
    if available:
        return f"{available} available"
    if unavailable == len(slots):
        return f"{unavailable} unavailable"
    return "Times set"


# =============================================================================
# MANAGER REQUIREMENTS
# =============================================================================

@transaction.atomic
def set_requirement_slots(*, manager, day: date, slots: Iterable[dict]) -> list[RequirementSlot]:
    """
    Replaces the staffing requirements for one day.

    Slots with staff_count < 1 or an end time before the start are dropped.
    """
    valid = []
    for slot in slots:
        staff_count = slot.get("staff_count") or 0
        if staff_count < 1 or slot["start_time"] > slot["end_time"]:
            continue
        valid.append(
            RequirementSlot(
                date=day,
                start_time=slot["start_time"],
                end_time=slot["end_time"],
                staff_count=staff_count,
                role=(slot.get("role") or "").strip(),
                created_by=manager,
            )
        )
    RequirementSlot.objects.filter(date=day).delete()
    return RequirementSlot.objects.bulk_create(valid)


def requirement_slots_for_month(month: date) -> QuerySet[RequirementSlot]:
    start, end = month_bounds(month)
    return RequirementSlot.objects.filter(date__gte=start, date__lte=end).order_by("date", "start_time", "id")


def requirement_summary(slots: list[RequirementSlot]) -> str:
    if not slots:
        return "Not set"
    total = sum(s.staff_count for s in slots)
    return f"{len(slots)} slot(s), {total} staff total"


def requirement_notes_for(month: date) -> str:
    record = RequirementNotes.objects.filter(month=month_start(month)).first()
    return record.notes if record else ""


def update_requirement_notes(*, manager, month: date, notes: str) -> RequirementNotes:
    record, _ = RequirementNotes.objects.update_or_create(
        month=month_start(month),
        defaults={"notes": (notes or "").strip(), "updated_by": manager},
    )
    return record


@transaction.atomic
def apply_requirement_patterns(*, manager, month: date, replace: bool = False) -> int:
    """
    Materializes every weekly pattern into requirement slots for the month.

    Days that already have requirement slots are left alone unless replace=True.
    Returns the number of slots created.
    """
    patterns = list(RequirementPattern.objects.order_by("weekday", "start_time", "id"))
    if not patterns:
        return 0

    days = month_days(month)
    existing_days = set(requirement_slots_for_month(month).values_list("date", flat=True))
    if replace:
        RequirementSlot.objects.filter(date__in=[d for d in days if d.weekday() in {p.weekday for p in patterns}]).delete()
        existing_days = set()

    to_create = []
    for day in days:
        if day in existing_days:
            continue
        for pattern in patterns:
            if pattern.weekday != day.weekday():
                continue
            to_create.append(
                RequirementSlot(
                    date=day,
                    start_time=pattern.start_time,
                    end_time=pattern.end_time,
                    staff_count=pattern.staff_count,
                    role=pattern.role,
                    created_by=manager,
                )
            )
    RequirementSlot.objects.bulk_create(to_create)
    return len(to_create)


# =============================================================================
# AI GENERATION
# =============================================================================

def ensure_generation_ready(month: date) -> None:
    has_requirements = requirement_slots_for_month(month).filter(staff_count__gt=0).exists()
    if not has_requirements and not requirement_notes_for(month):
        raise ValidationError(
            "Define at least one shift requirement (time range, staff count > 0) for a date, "
            "or provide notes for the AI."
        )


def build_schedule_request(*, month: date, today: date) -> ScheduleRequest:
    preferences = [
        PreferenceInput(
            employee_id=pref.employee.employee_id,
            employee_name=pref.employee.display_name,
            role=pref.employee.role_label,
            general_notes=pref.general_notes,
            time_slots=[
                TimeSlotInput(date=s.date, start_time=s.start_time, end_time=s.end_time, status=s.status)
                for s in pref.time_slots.all()
            ],
        )
        for pref in preferences_for_month(month)
    ]
    requirements = [
        RequirementInput(
            date=r.date,
            start_time=r.start_time,
            end_time=r.end_time,
            staff_count=r.staff_count,
            role=r.role,
        )
        for r in requirement_slots_for_month(month).filter(staff_count__gt=0)
    ]
    return ScheduleRequest(
        month=month_start(month),
        today=today,
        preferences=preferences,
        requirements=requirements,
        notes=requirement_notes_for(month),
    )


def generate_schedule(
    *,
    manager,
    month: date,
    client: Optional[GeminiScheduleClient] = None,
    today: Optional[date] = None,
) -> GeneratedSchedule:
    """
    Asks the AI for a schedule for `month` and stores it as a draft.

    Raises ValidationError when there is nothing to plan, and
    ScheduleGenerationError (or a subclass) when the AI call or its answer fails.
    Nothing is stored on failure.
    """
    month = month_start(month)
    ensure_generation_ready(month)

    request = build_schedule_request(month=month, today=today or timezone.localdate())
    prompt = build_schedule_prompt(request)
    client = client or get_schedule_client()

    logger.info(
        "Generating schedule for %s: %d preference(s), %d requirement slot(s)",
        month.strftime("%Y-%m"),
        len(request.preferences),
        len(request.requirements),
    )
    result = client.generate(prompt)

    schedule = GeneratedSchedule.objects.create(
        month=month,
        status=ScheduleStatus.DRAFT,
        assignments=result.proposal.assignments,
        unassigned_shifts=result.proposal.unassigned_shifts,
        prompt=prompt,
        raw_response=result.raw_response,
        model_name=result.model_name,
        created_by=manager,
    )
    logger.info("Stored draft schedule %s with %d day(s)", schedule.id, len(schedule.assignments))
    return schedule


# =============================================================================
# PUBLISHING
# =============================================================================

def find_unavailability_conflicts(schedule: GeneratedSchedule) -> list[str]:
    """
    Lists assignment lines that put an employee into a time they marked Unavailable.

    Lines are matched to employees by display name; lines that don't follow
    the "Name: HH:MM - HH:MM (Role)" format can't be checked and are skipped.
    """
    unavailable: dict[tuple[str, date], list[TimeSlotPreference]] = {}
    slots = TimeSlotPreference.objects.filter(
        preference__month=schedule.month,
        status=AvailabilityStatus.UNAVAILABLE,
    ).select_related("preference__employee")
    for slot in slots:
        key = (slot.preference.employee.display_name.casefold(), slot.date)
        unavailable.setdefault(key, []).append(slot)

    conflicts: list[str] = []
    for day_key, lines in schedule.sorted_days():
        try:
            day = date.fromisoformat(day_key)
        except ValueError:
            continue
        for line in lines:
            entry = parse_assignment(line)
            if not entry.is_structured:
                continue
            # Overnight shifts are checked up to the end of their start day.
            end_time = entry.end_time if entry.end_time > entry.start_time else ALL_DAY_END
            for slot in unavailable.get((entry.employee_name.casefold(), day), []):
                if slot.is_all_day_unavailable or _overlaps(entry.start_time, end_time, slot.start_time, slot.end_time):
                    conflicts.append(f"{day_key}: {line} (marked unavailable)")
                    break
    return conflicts


@transaction.atomic
def publish_schedule(schedule: GeneratedSchedule) -> list[str]:
    """
    Publishes a schedule for its month.

    Only one schedule per month is published at a time: any other published
    schedule of the same month goes back to draft. Returns unavailability
    conflicts so the caller can warn the manager; they don't block publishing.
    """
    GeneratedSchedule.objects.for_month(schedule.month).published().exclude(pk=schedule.pk).update(
        status=ScheduleStatus.DRAFT,
        published_at=None,
    )
    schedule.status = ScheduleStatus.PUBLISHED
    schedule.published_at = timezone.now()
    schedule.save(update_fields=["status", "published_at"])
    return find_unavailability_conflicts(schedule)


def unpublish_schedule(schedule: GeneratedSchedule) -> bool:
    if schedule.status != ScheduleStatus.PUBLISHED:
        return False
    schedule.status = ScheduleStatus.DRAFT
    schedule.published_at = None
    schedule.save(update_fields=["status", "published_at"])
    return True


def published_schedule_for_month(month: date) -> Optional[GeneratedSchedule]:
    return GeneratedSchedule.objects.for_month(month_start(month)).published().order_by("-published_at").first()


def entries_for_employee(schedule: GeneratedSchedule, employee) -> list[tuple[str, ShiftEntry]]:
    """The (day key, entry) pairs whose employee name matches this employee."""
    name = employee.display_name.casefold()
    mine = []
    for day_key, lines in schedule.sorted_days():
        for line in lines:
            entry = parse_assignment(line)
            if entry.is_structured and entry.employee_name.casefold() == name:
                mine.append((day_key, entry))
    return mine
