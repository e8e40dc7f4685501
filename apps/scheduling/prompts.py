"""
=============================================================================
SCHEDULE PROMPT
=============================================================================

Turns a ScheduleRequest into the text sent to Gemini.

The output is deterministic for a given request: dates are sorted, slots
keep their stored order, and nothing depends on the wall clock (the
"current month" comes from request.today).

Sections, in order:
1. Instructions (role of the assistant, meaning of each availability status)
2. Employee preferences
3. Shift requirements for the target month
4. General notes from the manager
5. Output format (JSON object keyed by date, plus unassigned_shifts)
=============================================================================
"""
from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Iterable

from .models import ALL_DAY_END, ALL_DAY_START, AvailabilityStatus
from .schemas import PreferenceInput, RequirementInput, ScheduleRequest, TimeSlotInput

NO_PREFERENCES_TEXT = "No preferences were submitted by employees."
NO_SLOT_PREFERENCES_TEXT = "No specific date/time preferences."
NO_REQUIREMENTS_TEXT = (
    "No date-specific shift requirements are defined. "
    "Rely on the general notes if there are any; otherwise assume standard business operations."
)
NO_NOTES_TEXT = "No general notes."
UNKNOWN_ROLE = "Unknown role"


def format_date_for_display(day: dt.date) -> str:
    return f"{day.isoformat()} ({day.strftime('%a')})"


def format_month_label(month: dt.date) -> str:
    return month.strftime("%B %Y")


def _status_label(status: str) -> str:
    try:
        return AvailabilityStatus(status).label
    except ValueError:
        return status


def _is_all_day_unavailable(slot: TimeSlotInput) -> bool:
    return (
        slot.status == AvailabilityStatus.UNAVAILABLE
        and slot.start_time == ALL_DAY_START
        and slot.end_time == ALL_DAY_END
    )


def _format_slot(slot: TimeSlotInput) -> str:
    label = _status_label(slot.status)
    if _is_all_day_unavailable(slot):
        return f"    - All day ({label})"
    return f"    - {slot.start_time:%H:%M} - {slot.end_time:%H:%M} ({label})"


def _format_preference(pref: PreferenceInput) -> str:
    role = pref.role or UNKNOWN_ROLE
    lines = [f"- {pref.employee_name} (ID: {pref.employee_id}, Role: {role}):"]

    by_date: dict[dt.date, list[TimeSlotInput]] = defaultdict(list)
    for slot in pref.time_slots:
        by_date[slot.date].append(slot)

    if not by_date and not pref.general_notes:
        lines.append(f"  {NO_SLOT_PREFERENCES_TEXT}")
    for day in sorted(by_date):
        lines.append(f"  {format_date_for_display(day)}:")
        lines.extend(_format_slot(slot) for slot in by_date[day])

    if pref.general_notes:
        lines.append(f"  General notes: {pref.general_notes}")
    return "\n".join(lines) + "\n"


def format_employee_preferences(preferences: Iterable[PreferenceInput]) -> str:
    blocks = [_format_preference(pref) for pref in preferences]
    if not blocks:
        return NO_PREFERENCES_TEXT
    return "\n".join(blocks)


def format_shift_requirements(requirements: Iterable[RequirementInput]) -> str:
    by_date: dict[dt.date, list[RequirementInput]] = defaultdict(list)
    for req in requirements:
        by_date[req.date].append(req)
    if not by_date:
        return NO_REQUIREMENTS_TEXT

    lines: list[str] = []
    for day in sorted(by_date):
        lines.append(f"{format_date_for_display(day)}:")
        for req in by_date[day]:
            line = f"  - Time: {req.start_time:%H:%M} - {req.end_time:%H:%M}, Staff needed: {req.staff_count}"
            if req.role:
                line += f", Role: {req.role}"
            lines.append(line)
    return "\n".join(lines) + "\n"


def format_notes(notes: str) -> str:
    notes = (notes or "").strip()
    if not notes:
        return NO_NOTES_TEXT
    return f"General scheduling notes:\n{notes}"


def build_schedule_prompt(request: ScheduleRequest) -> str:
    current_month = format_month_label(request.today)
    target_month = format_month_label(request.month)
    example_day = request.month.replace(day=15).isoformat()
    example_next = request.month.replace(day=16).isoformat()
    example_late = request.month.replace(day=20).isoformat()

    preferences_text = format_employee_preferences(request.preferences)
    requirements_text = format_shift_requirements(request.requirements)
    notes_text = format_notes(request.notes)

    return f"""
You are an AI shift scheduling assistant.
The current month is {current_month}. The employee preferences and the manager's shift requirements below are for {target_month}.
Your task is to create the **work schedule for {target_month}** based on the employees' detailed date/time preferences and the manager's date-specific shift requirements.

Pay attention to the following:
1.  Analyse each employee's detailed date/time preferences carefully. Every preference has a start time, an end time and one of three statuses: "Preferred", "Available" or "Unavailable".
    - "Preferred": the times the employee most wants to work. Prioritise these wherever possible.
    - "Available": the times the employee is able to work.
    - "Unavailable": the times the employee cannot work. Never assign the employee during these times.
    - "All day (Unavailable)" means the employee cannot work at all on that date.
    - Take the employees' roles into account as well (for example when a shift lead is required).
2.  Satisfy the manager's shift requirements (time range, staff needed, role) for each date in {target_month}.
3.  Distribute shifts fairly among the available employees while respecting their preferences.
4.  If a requirement cannot be met with the submitted preferences, list it in the "unassigned_shifts" array. For each unfilled shift give the date, the time, the role or number of staff needed, and a short reason.
5.  Build the schedule date by date for {target_month}. The keys of the JSON you output must be the actual date strings (for example "{example_day}") of the days with assigned shifts.

Employee preferences ({target_month}):
{preferences_text}

Shift requirements for {target_month}:
{requirements_text}

{notes_text}

Output the schedule strictly as a JSON object.
The JSON object must have one key per date that has assigned shifts (for example "{example_day}", "{example_next}").
The value for each date is an array of strings; each string is one assignment in the form "Employee Name: HH:MM - HH:MM (Role)". If the requirement for that shift did not specify a role, you may omit it or use a general term such as "Staff".
If any shifts could not be assigned, include an "unassigned_shifts" array at the root of the JSON object. It must contain strings describing each unmet requirement and the reason.

Example JSON output (shifts on specific days of {target_month}):
{{
  "{example_day}": [
    "Alice Smith: 09:00 - 17:00 (Cashier)",
    "Bob Johnson: 09:00 - 17:00 (Floor Staff)"
  ],
  "{example_next}": [
    "Charlie Brown: 10:00 - 18:00 (Supervisor)"
  ],
  "unassigned_shifts": [
    "{example_late} 17:00 - 21:00 - 1 person (Closer) needed; no available employee has evening availability that day."
  ]
}}

Output only the JSON object. Do not include any text or explanation outside the JSON structure.
If no shifts can be assigned at all from the input, return empty arrays for the date keys and explain in unassigned_shifts. For example: {{"unassigned_shifts": ["No employees are available for the required shifts."]}}
"""
