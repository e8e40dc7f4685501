from __future__ import annotations

from typing import Any

from django.urls import reverse

_MANAGER_NAV = (
    ("Dashboard", "manager_dashboard"),
    ("Employees", "manager_employees"),
)
_EMPLOYEE_NAV = (
    ("My availability", "employee_availability"),
    ("Published schedule", "employee_schedule"),
)


def user_ui_context(request) -> dict[str, Any]:
    """Header data for base.html: who is logged in and which links to show."""
    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        return {}

    display_name = user.get_full_name() or user.username
    initials = "".join(p[0] for p in display_name.split()[:2] if p) or display_name[:1]
    is_manager = bool(getattr(user, "is_manager", False))
    position = getattr(getattr(user, "position", None), "name", None)

    nav = _MANAGER_NAV if is_manager else _EMPLOYEE_NAV
    return {
        "user_display_name": display_name,
        "user_initials": initials.upper(),
        "user_header_role": "Manager" if is_manager else (position or "Employee"),
        "nav_links": [{"label": label, "url": reverse(name)} for label, name in nav],
    }
