"""
=============================================================================
SCHEDULING VIEWS - MODULAR STRUCTURE
=============================================================================

This package contains all HTTP view functions for the scheduling app,
organized into logical modules:

├── __init__.py           - This file (exports all public views)
├── helpers.py            - Private helpers (parsing, calendars, redirects)
├── manager_planning.py   - Monthly requirements, notes, submitted preferences
├── manager_schedules.py  - AI generation, review and publishing
├── manager_resources.py  - Weekly patterns and positions
├── employee.py           - Availability editor and published schedule

Import Pattern:
    from apps.scheduling.views import manager_dashboard, requirement_day, ...

=============================================================================
"""

# Manager planning views
from .manager_planning import (
    manager_dashboard,
    requirement_day,
    requirement_notes,
    apply_patterns,
    preferences_json,
)

# Manager schedule views
from .manager_schedules import (
    generate_schedule_view,
    schedule_detail,
    schedule_json,
    publish_schedule_view,
    unpublish_schedule_view,
)

# Manager resource views (patterns, positions)
from .manager_resources import (
    patterns_list,
    pattern_create,
    pattern_update,
    pattern_delete,
    positions_list,
    position_create,
    position_update,
    position_delete,
)

# Employee views
from .employee import (
    employee_availability_view,
    employee_availability_day,
    employee_schedule_view,
    employee_schedule_json,
)

__all__ = [
    # Manager planning
    "manager_dashboard",
    "requirement_day",
    "requirement_notes",
    "apply_patterns",
    "preferences_json",
    # Manager schedules
    "generate_schedule_view",
    "schedule_detail",
    "schedule_json",
    "publish_schedule_view",
    "unpublish_schedule_view",
    # Manager resources
    "patterns_list",
    "pattern_create",
    "pattern_update",
    "pattern_delete",
    "positions_list",
    "position_create",
    "position_update",
    "position_delete",
    # Employee
    "employee_availability_view",
    "employee_availability_day",
    "employee_schedule_view",
    "employee_schedule_json",
]
