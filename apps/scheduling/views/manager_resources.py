"""
=============================================================================
MANAGER RESOURCE VIEWS - Weekly Patterns & Roles
=============================================================================

Views for managing scheduling resources:

Patterns (weekly requirement templates):
- patterns_list() - List all patterns (JSON)
- pattern_create() - Create new pattern
- pattern_update() - Update existing pattern
- pattern_delete() - Delete pattern

Positions (employee roles):
- positions_list() - List all positions (JSON)
- position_create() - Create new position
- position_update() - Update existing position
- position_delete() - Delete position (if not in use)

=============================================================================
"""
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models.deletion import ProtectedError
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import manager_required

from ..forms import PositionForm, RequirementPatternForm
from ..models import Position, RequirementPattern
from .helpers import _json_form_errors, _json_validation_error


# =============================================================================
# WEEKLY PATTERNS
# =============================================================================


@manager_required
@require_http_methods(["GET"])
def patterns_list(request: HttpRequest) -> JsonResponse:
    """All weekly patterns, Monday first."""
    patterns = RequirementPattern.objects.order_by("weekday", "start_time", "name")
    return JsonResponse({
        "patterns": [
            {
                "id": p.id,
                "name": p.name,
                "weekday": p.weekday,
                "weekday_label": p.get_weekday_display(),
                "start_time": p.start_time.strftime("%H:%M"),
                "end_time": p.end_time.strftime("%H:%M"),
                "staff_count": p.staff_count,
                "role": p.role,
            }
            for p in patterns
        ]
    })


def _save_pattern(form: RequirementPatternForm, request: HttpRequest) -> JsonResponse | RequirementPattern:
    if not form.is_valid():
        return _json_form_errors(form)
    pattern = form.save(commit=False)
    if not pattern.created_by_id:
        pattern.created_by = request.user
    try:
        pattern.full_clean()
    except ValidationError as exc:
        return _json_validation_error(exc)
    pattern.save()
    return pattern


@manager_required
@require_http_methods(["POST"])
def pattern_create(request: HttpRequest) -> JsonResponse:
    """Creates a new weekly pattern. Returns {ok: true, id: <new_id>}."""
    result = _save_pattern(RequirementPatternForm(request.POST), request)
    if isinstance(result, JsonResponse):
        return result
    return JsonResponse({"ok": True, "id": result.id})


@manager_required
@require_http_methods(["POST"])
def pattern_update(request: HttpRequest, pattern_id: int) -> JsonResponse:
    pattern = get_object_or_404(RequirementPattern, pk=pattern_id)
    result = _save_pattern(RequirementPatternForm(request.POST, instance=pattern), request)
    if isinstance(result, JsonResponse):
        return result
    return JsonResponse({"ok": True})


@manager_required
@require_http_methods(["POST"])
def pattern_delete(request: HttpRequest, pattern_id: int) -> JsonResponse:
    pattern = get_object_or_404(RequirementPattern, pk=pattern_id)
    pattern.delete()
    return JsonResponse({"ok": True})


# =============================================================================
# POSITIONS
# =============================================================================


@manager_required
@require_http_methods(["GET"])
def positions_list(request: HttpRequest) -> JsonResponse:
    roles = Position.objects.order_by("name")
    return JsonResponse({
        "positions": [
            {"id": p.id, "name": p.name, "is_active": p.is_active, "employee_count": p.employees.count()}
            for p in roles
        ]
    })


@manager_required
@require_http_methods(["POST"])
def position_create(request: HttpRequest) -> JsonResponse:
    form = PositionForm(request.POST)
    if not form.is_valid():
        return _json_form_errors(form)
    position = form.save()
    return JsonResponse({"ok": True, "id": position.id})


@manager_required
@require_http_methods(["POST"])
def position_update(request: HttpRequest, position_id: int) -> JsonResponse:
    position = get_object_or_404(Position, pk=position_id)
    form = PositionForm(request.POST, instance=position)
    if not form.is_valid():
        return _json_form_errors(form)
    form.save()
    return JsonResponse({"ok": True})


@manager_required
@require_http_methods(["POST"])
def position_delete(request: HttpRequest, position_id: int) -> JsonResponse:
    """Deletes a role unless employees still hold it."""
    position = get_object_or_404(Position, pk=position_id)

    if position.employees.exists():
        return JsonResponse(
            {"ok": False, "error": "Cannot delete role: employees are assigned."},
            status=400,
        )

    try:
        position.delete()
    except ProtectedError:
        return JsonResponse(
            {"ok": False, "error": "Cannot delete role: it is referenced by existing data."},
            status=400,
        )

    return JsonResponse({"ok": True})
