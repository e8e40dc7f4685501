"""
=============================================================================
HELPER FUNCTIONS
=============================================================================

Private helper functions used by scheduling views.
These functions handle:
- Date/time/month parsing and validation
- Month calendar grids for the templates
- Reading per-day slot editors from POST data
- Turning ValidationErrors into JSON responses and redirects

Note: These functions are prefixed with underscore (_) to indicate
they are private/internal. They should not be imported outside this package.
=============================================================================
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme

from ..models import AvailabilityStatus
from ..services import month_days, month_start, next_month_start


# =============================================================================
# DATE/TIME PARSING
# =============================================================================


def _parse_month(value: str | None, default: date | None = None) -> date:
    """
    Parses ?month=YYYY-MM (a full YYYY-MM-DD is accepted too) into the first day of that month.
    Falls back to next month, the usual planning target.
    """
    if default is None:
        default = next_month_start(timezone.localdate())
    raw = (value or "").strip()
    for fmt in ("%Y-%m", "%Y-%m-%d"):
        try:
            return datetime.strptime(raw, fmt).date().replace(day=1)
        except ValueError:
            continue
    return default


def _parse_count(value: str | None) -> int:
    """Lenient staff count: anything unparseable counts as 0 (and the slot gets dropped)."""
    try:
        return int((value or "").strip())
    except (TypeError, ValueError):
        return 0


def _parse_required_date(value: str | None, field: str) -> date:
    """
    Parses a required date string in YYYY-MM-DD format.
    Raises ValidationError with field name if invalid.
    """
    raw = (value or "").strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError({field: "Enter a valid date."})


def _parse_required_time(value: str | None, field: str):
    """
    Parses a required time string in HH:MM format.
    Raises ValidationError with field name if invalid.
    """
    raw = (value or "").strip()
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except (TypeError, ValueError):
        raise ValidationError({field: "Enter a valid time."})


# =============================================================================
# MONTH CALENDAR
# =============================================================================


def _month_nav(month: date) -> dict:
    prev_month = month_start(month.replace(day=1) - timedelta(days=1))
    return {
        "month": month,
        "month_param": month.strftime("%Y-%m"),
        "month_label": month.strftime("%B %Y"),
        "prev_month_param": prev_month.strftime("%Y-%m"),
        "next_month_param": next_month_start(month).strftime("%Y-%m"),
    }


def _calendar_weeks(month: date, cells: dict[date, dict]) -> list[list[dict | None]]:
    """
    Lays the month out as Monday-first weeks for the templates.
    `cells` maps a date to the extra data shown in its box; missing days get {}.
    Padding before the 1st and after the last day is None.
    """
    days = month_days(month)
    row: list[dict | None] = [None] * days[0].weekday()
    weeks: list[list[dict | None]] = []
    today = timezone.localdate()
    for day in days:
        row.append({"date": day, "iso": day.isoformat(), "is_today": day == today, **cells.get(day, {})})
        if len(row) == 7:
            weeks.append(row)
            row = []
    if row:
        row.extend([None] * (7 - len(row)))
        weeks.append(row)
    return weeks


# =============================================================================
# SLOT EDITORS (POST DATA)
# =============================================================================


def _read_time_slots(request: HttpRequest) -> list[dict]:
    """
    Reads the availability editor: parallel start_time / end_time / status lists.
    Raises ValidationError for malformed times or unknown statuses.
    """
    starts = request.POST.getlist("start_time")
    ends = request.POST.getlist("end_time")
    statuses = request.POST.getlist("status")
    if not (len(starts) == len(ends) == len(statuses)):
        raise ValidationError("Each time slot needs a start time, an end time and a status.")

    slots = []
    for start, end, status in zip(starts, ends, statuses):
        if status not in AvailabilityStatus.values:
            raise ValidationError({"status": f"Unknown availability status: {status}."})
        slots.append({
            "start_time": _parse_required_time(start, "start_time"),
            "end_time": _parse_required_time(end, "end_time"),
            "status": status,
        })
    return slots


def _read_requirement_slots(request: HttpRequest) -> list[dict]:
    """Reads the requirement editor: parallel start_time / end_time / staff_count / role lists."""
    starts = request.POST.getlist("start_time")
    ends = request.POST.getlist("end_time")
    counts = request.POST.getlist("staff_count")
    roles = request.POST.getlist("role")
    if not (len(starts) == len(ends) == len(counts)):
        raise ValidationError("Each requirement needs a start time, an end time and a staff count.")
    roles = roles + [""] * (len(starts) - len(roles))

    return [
        {
            "start_time": _parse_required_time(start, "start_time"),
            "end_time": _parse_required_time(end, "end_time"),
            "staff_count": _parse_count(count),
            "role": role,
        }
        for start, end, count, role in zip(starts, ends, counts, roles)
    ]


# =============================================================================
# ERRORS & REDIRECTS
# =============================================================================


def _validation_message(exc: ValidationError) -> str:
    """First human-readable message from a ValidationError (field-keyed or plain)."""
    msg_dict = getattr(exc, "message_dict", None)
    if isinstance(msg_dict, dict) and msg_dict:
        first = next(iter(msg_dict.values()))
        if first:
            return first[0]
    if exc.messages:
        return exc.messages[0]
    return str(exc)


def _json_validation_error(exc: ValidationError) -> JsonResponse:
    return JsonResponse({"ok": False, "error": _validation_message(exc)}, status=400)


def _json_form_errors(form) -> JsonResponse:
    """Field -> list of messages, as plain strings."""
    errors = {field: [str(message) for message in messages] for field, messages in form.errors.items()}
    return JsonResponse({"ok": False, "errors": errors}, status=400)


def _redirect_back(request: HttpRequest, fallback_url_name: str) -> HttpResponse:
    """
    Redirects to HTTP_REFERER if it's a safe URL, otherwise to fallback.
    Prevents open redirect vulnerabilities by validating the host.
    """
    ref = request.META.get("HTTP_REFERER")
    if ref and url_has_allowed_host_and_scheme(
        url=ref,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return redirect(ref)
    return redirect(fallback_url_name)
