"""
Tests for the scheduling service layer: availability, requirements,
AI generation and publishing.
"""
from datetime import date, time

import pytest
from django.core.exceptions import ValidationError

from apps.scheduling.ai_client import ScheduleResponseError
from apps.scheduling.models import (
    AvailabilityStatus,
    EmployeePreference,
    GeneratedSchedule,
    RequirementPattern,
    RequirementSlot,
    ScheduleStatus,
    TimeSlotPreference,
    Weekday,
)
from apps.scheduling.services import (
    apply_requirement_patterns,
    availability_summary,
    build_schedule_request,
    ensure_generation_ready,
    entries_for_employee,
    find_unavailability_conflicts,
    generate_schedule,
    mark_unavailable_all_day,
    month_days,
    month_start,
    next_month_start,
    publish_schedule,
    published_schedule_for_month,
    requirement_notes_for,
    requirement_summary,
    save_time_slot_preferences,
    set_requirement_slots,
    submit_preference_notes,
    unpublish_schedule,
    update_requirement_notes,
)

from .conftest import TARGET_MONTH

pytestmark = pytest.mark.django_db

MONDAY = date(2024, 9, 2)


def _slot(start, end, status=AvailabilityStatus.AVAILABLE):
    return {"start_time": start, "end_time": end, "status": status}


def _requirement(start, end, staff_count, role=""):
    return {"start_time": start, "end_time": end, "staff_count": staff_count, "role": role}


def _schedule(manager, assignments, status=ScheduleStatus.DRAFT):
    return GeneratedSchedule.objects.create(
        month=TARGET_MONTH,
        status=status,
        assignments=assignments,
        created_by=manager,
    )


# =============================================================================
# MONTH HELPERS
# =============================================================================


def test_month_helpers():
    assert month_start(date(2024, 9, 17)) == date(2024, 9, 1)
    assert next_month_start(date(2024, 12, 31)) == date(2025, 1, 1)
    days = month_days(date(2024, 2, 10))
    assert len(days) == 29
    assert days[0] == date(2024, 2, 1)
    assert days[-1] == date(2024, 2, 29)


# =============================================================================
# AVAILABILITY
# =============================================================================


def test_save_slots_drops_invalid_ranges(employee):
    saved = save_time_slot_preferences(
        employee=employee,
        day=MONDAY,
        slots=[
            _slot(time(9), time(13), AvailabilityStatus.PREFERRED),
            _slot(time(14), time(14)),
            _slot(time(18), time(10)),
        ],
    )
    assert len(saved) == 1
    pref = EmployeePreference.objects.get(employee=employee)
    assert pref.month == TARGET_MONTH
    assert pref.time_slots.get().status == AvailabilityStatus.PREFERRED


def test_save_slots_replaces_the_day_only(employee):
    save_time_slot_preferences(employee=employee, day=MONDAY, slots=[_slot(time(9), time(12))])
    save_time_slot_preferences(employee=employee, day=date(2024, 9, 3), slots=[_slot(time(9), time(12))])
    save_time_slot_preferences(employee=employee, day=MONDAY, slots=[_slot(time(13), time(17))])

    monday = TimeSlotPreference.objects.filter(date=MONDAY)
    assert [(s.start_time, s.end_time) for s in monday] == [(time(13), time(17))]
    assert TimeSlotPreference.objects.filter(date=date(2024, 9, 3)).count() == 1


def test_unknown_status_is_rejected(employee):
    with pytest.raises(ValidationError):
        save_time_slot_preferences(employee=employee, day=MONDAY, slots=[_slot(time(9), time(12), "maybe")])


def test_all_day_unavailable(employee):
    mark_unavailable_all_day(employee=employee, day=MONDAY)
    slot = TimeSlotPreference.objects.get()
    assert slot.is_all_day_unavailable
    assert availability_summary([slot]) == "Unavailable all day"


def test_availability_summary_labels(employee):
    assert availability_summary([]) == "Not set"
    slots = save_time_slot_preferences(
        employee=employee,
        day=MONDAY,
        slots=[
            _slot(time(9), time(12), AvailabilityStatus.PREFERRED),
            _slot(time(13), time(17), AvailabilityStatus.AVAILABLE),
        ],
    )
    assert availability_summary(slots) == "1 preferred"


def test_submit_notes_creates_preference(employee):
    pref = submit_preference_notes(employee=employee, month=date(2024, 9, 20), general_notes="  Mornings only. ")
    assert pref.month == TARGET_MONTH
    assert pref.general_notes == "Mornings only."


# =============================================================================
# REQUIREMENTS
# =============================================================================


def test_requirement_slots_filtering(manager):
    created = set_requirement_slots(
        manager=manager,
        day=MONDAY,
        slots=[
            _requirement(time(9), time(17), 2, " Staff "),
            _requirement(time(9), time(17), 0),
            _requirement(time(18), time(10), 1),
            _requirement(time(12), time(12), 1),
        ],
    )
    assert len(created) == 2
    assert RequirementSlot.objects.filter(role="Staff").count() == 1
    assert requirement_summary(list(RequirementSlot.objects.all())) == "2 slot(s), 3 staff total"


def test_requirement_notes_round_trip(manager):
    assert requirement_notes_for(TARGET_MONTH) == ""
    update_requirement_notes(manager=manager, month=date(2024, 9, 9), notes="Fair hours.")
    assert requirement_notes_for(TARGET_MONTH) == "Fair hours."


def test_apply_patterns_skips_filled_days_unless_replacing(manager):
    RequirementPattern.objects.create(
        name="Monday day shift",
        weekday=Weekday.MONDAY,
        start_time=time(9),
        end_time=time(17),
        staff_count=2,
        role="Staff",
        created_by=manager,
    )
    # September 2024 has five Mondays.
    assert apply_requirement_patterns(manager=manager, month=TARGET_MONTH) == 5
    assert apply_requirement_patterns(manager=manager, month=TARGET_MONTH) == 0
    assert apply_requirement_patterns(manager=manager, month=TARGET_MONTH, replace=True) == 5
    assert RequirementSlot.objects.count() == 5


def test_apply_patterns_without_patterns(manager):
    assert apply_requirement_patterns(manager=manager, month=TARGET_MONTH) == 0


# =============================================================================
# AI GENERATION
# =============================================================================


def test_generation_needs_requirements_or_notes(manager):
    with pytest.raises(ValidationError, match="Define at least one shift requirement"):
        ensure_generation_ready(TARGET_MONTH)
    update_requirement_notes(manager=manager, month=TARGET_MONTH, notes="Two people every weekday.")
    ensure_generation_ready(TARGET_MONTH)


def test_request_skips_inactive_employees(manager, employee, other_employee):
    submit_preference_notes(employee=employee, month=TARGET_MONTH, general_notes="Mornings.")
    submit_preference_notes(employee=other_employee, month=TARGET_MONTH, general_notes="Evenings.")
    other_employee.is_active = False
    other_employee.save()

    request = build_schedule_request(month=TARGET_MONTH, today=date(2024, 8, 20))
    assert [p.employee_name for p in request.preferences] == ["Alice Smith"]
    assert request.preferences[0].role == "Senior Staff"


def test_generate_schedule_stores_draft(manager, employee, stub_client):
    save_time_slot_preferences(employee=employee, day=MONDAY, slots=[_slot(time(9), time(17))])
    set_requirement_slots(manager=manager, day=MONDAY, slots=[_requirement(time(9), time(17), 1)])
    client = stub_client(
        '{"2024-09-02": ["Alice Smith: 09:00 - 17:00 (Staff)"], "unassigned_shifts": []}'
    )

    schedule = generate_schedule(manager=manager, month=TARGET_MONTH, client=client, today=date(2024, 8, 20))

    assert schedule.status == ScheduleStatus.DRAFT
    assert schedule.assignments == {"2024-09-02": ["Alice Smith: 09:00 - 17:00 (Staff)"]}
    assert schedule.model_name == "stub-model"
    assert schedule.prompt == client.prompts[0]
    assert "- Alice Smith (ID: " in schedule.prompt
    assert "Staff needed: 1" in schedule.prompt


def test_failed_generation_stores_nothing(manager, stub_client):
    update_requirement_notes(manager=manager, month=TARGET_MONTH, notes="Cover weekdays.")
    client = stub_client(error=ScheduleResponseError("bad answer", raw_response="nope"))

    with pytest.raises(ScheduleResponseError):
        generate_schedule(manager=manager, month=TARGET_MONTH, client=client)
    assert not GeneratedSchedule.objects.exists()


def test_generation_refused_before_calling_ai(manager, stub_client):
    client = stub_client()
    with pytest.raises(ValidationError):
        generate_schedule(manager=manager, month=TARGET_MONTH, client=client)
    assert client.prompts == []


# =============================================================================
# PUBLISHING
# =============================================================================


def test_conflicts_with_unavailable_times(manager, employee, other_employee):
    mark_unavailable_all_day(employee=employee, day=MONDAY)
    save_time_slot_preferences(
        employee=other_employee,
        day=MONDAY,
        slots=[_slot(time(17), time(22), AvailabilityStatus.UNAVAILABLE)],
    )
    schedule = _schedule(manager, {
        "2024-09-02": [
            "Alice Smith: 09:00 - 17:00 (Staff)",
            "Bob Johnson: 09:00 - 17:00 (Staff)",
            "Bob Johnson: 16:00 - 20:00 (Staff)",
            "Unparseable note",
        ],
    })

    assert find_unavailability_conflicts(schedule) == [
        "2024-09-02: Alice Smith: 09:00 - 17:00 (Staff) (marked unavailable)",
        "2024-09-02: Bob Johnson: 16:00 - 20:00 (Staff) (marked unavailable)",
    ]


def test_publishing_keeps_one_schedule_per_month(manager):
    first = _schedule(manager, {})
    second = _schedule(manager, {})

    publish_schedule(first)
    publish_schedule(second)
    first.refresh_from_db()

    assert first.status == ScheduleStatus.DRAFT
    assert second.is_published
    assert published_schedule_for_month(date(2024, 9, 14)) == second

    assert unpublish_schedule(second) is True
    assert unpublish_schedule(second) is False
    assert published_schedule_for_month(TARGET_MONTH) is None


def test_entries_for_employee_matches_display_name(manager, employee):
    schedule = _schedule(manager, {
        "2024-09-03": ["alice smith: 10:00 - 18:00"],
        "2024-09-02": ["Alice Smith: 09:00 - 17:00 (Staff)", "Bob Johnson: 09:00 - 17:00 (Staff)"],
    })

    mine = entries_for_employee(schedule, employee)
    assert [(day, entry.start_time) for day, entry in mine] == [
        ("2024-09-02", time(9)),
        ("2024-09-03", time(10)),
    ]


def test_overnight_shift_conflicts_with_late_unavailability(manager, employee):
    save_time_slot_preferences(
        employee=employee,
        day=MONDAY,
        slots=[_slot(time(22), time(23, 30), AvailabilityStatus.UNAVAILABLE)],
    )
    schedule = _schedule(manager, {
        "2024-09-02": ["Alice Smith: 21:00 - 06:00 (Staff)"],
        "2024-09-03": ["Alice Smith: 21:00 - 06:00 (Staff)"],
    })

    assert find_unavailability_conflicts(schedule) == [
        "2024-09-02: Alice Smith: 21:00 - 06:00 (Staff) (marked unavailable)",
    ]


def test_overnight_shift_before_unavailability_window(manager, employee):
    save_time_slot_preferences(
        employee=employee,
        day=MONDAY,
        slots=[_slot(time(6), time(12), AvailabilityStatus.UNAVAILABLE)],
    )
    schedule = _schedule(manager, {"2024-09-02": ["Alice Smith: 21:00 - 06:00 (Staff)"]})

    assert find_unavailability_conflicts(schedule) == []
