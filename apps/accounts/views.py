from __future__ import annotations

import logging
from datetime import time

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.db import models, transaction
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.scheduling.models import Position, RequirementPattern, Weekday
from apps.scheduling.services import (
    apply_requirement_patterns,
    next_month_start,
    requirement_notes_for,
    update_requirement_notes,
)

from .decorators import manager_required
from .forms import CreateEmployeeForm, LoginForm, UpdateEmployeeForm
from .models import User, UserRole

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo12345!"
DEMO_MANAGER_EMAIL = "manager_demo@example.com"

# (first name, last name, position)
DEMO_EMPLOYEES = [
    ("Alice", "Smith", "Senior Staff"),
    ("Bob", "Johnson", "Staff"),
    ("Charlie", "Brown", "Staff"),
    ("Diana", "Prince", "Shift Lead"),
]

# (name, weekday, start, end, staff count)
DEMO_PATTERNS = [
    ("Monday day shift", Weekday.MONDAY, time(9, 0), time(17, 0), 2),
    ("Tuesday day shift", Weekday.TUESDAY, time(9, 0), time(17, 0), 2),
    ("Wednesday late shift", Weekday.WEDNESDAY, time(10, 0), time(18, 0), 1),
    ("Thursday late shift", Weekday.THURSDAY, time(10, 0), time(18, 0), 1),
    ("Friday day shift", Weekday.FRIDAY, time(9, 0), time(17, 0), 3),
]

DEMO_NOTES = "Prioritise experienced staff on weekends. Aim for a fair distribution of hours."


@require_http_methods(["GET", "POST"])
def login_view(request: HttpRequest) -> HttpResponse:
    if request.user.is_authenticated:
        return redirect("home")

    form = LoginForm(request, data=request.POST or None)
    if request.method == "POST" and form.is_valid():
        user = authenticate(
            request,
            username=form.cleaned_data["username"],
            password=form.cleaned_data["password"],
        )
        if user is not None:
            login(request, user)
            return redirect("home")
        messages.error(request, "Invalid login.")

    return render(request, "auth/login.html", {"form": form, "show_demo": settings.DEBUG})


@login_required
def logout_view(request: HttpRequest) -> HttpResponse:
    logout(request)
    return redirect("login")


@login_required
def home(request: HttpRequest) -> HttpResponse:
    if getattr(request.user, "is_manager", False):
        return redirect("manager_dashboard")
    return redirect("employee_availability")


def _demo_user(email: str, first_name: str, last_name: str, role: str, position=None) -> User:
    user, _ = User.objects.get_or_create(
        username=email,
        defaults={"email": email, "first_name": first_name, "last_name": last_name, "role": role},
    )
    user.role = role
    user.email = user.email or email
    user.is_staff = role == UserRole.MANAGER
    if position is not None:
        user.position = user.position or position
    user.set_password(DEMO_PASSWORD)
    user.save()
    return user


@transaction.atomic
def _seed_demo_data() -> tuple[User, list[User]]:
    positions = {
        name: Position.objects.get_or_create(name=name, defaults={"is_active": True})[0]
        for name in sorted({p for _, _, p in DEMO_EMPLOYEES})
    }

    manager = _demo_user(DEMO_MANAGER_EMAIL, "Demo", "Manager", UserRole.MANAGER)
    employees = [
        _demo_user(
            f"{first.lower()}.{last.lower()}@example.com",
            first,
            last,
            UserRole.EMPLOYEE,
            positions[position],
        )
        for first, last, position in DEMO_EMPLOYEES
    ]

    # Weekly patterns and next month's requirements, only on first use.
    if not RequirementPattern.objects.filter(created_by=manager).exists():
        RequirementPattern.objects.bulk_create([
            RequirementPattern(
                name=name,
                weekday=weekday,
                start_time=start,
                end_time=end,
                staff_count=count,
                role="Staff",
                created_by=manager,
            )
            for name, weekday, start, end, count in DEMO_PATTERNS
        ])
        month = next_month_start(timezone.localdate())
        created = apply_requirement_patterns(manager=manager, month=month)
        if not requirement_notes_for(month):
            update_requirement_notes(manager=manager, month=month, notes=DEMO_NOTES)
        logger.info("Seeded demo data: %d requirement slot(s) for %s", created, month.strftime("%Y-%m"))

    return manager, employees


@require_http_methods(["GET"])
def demo_login(request: HttpRequest, role: str) -> HttpResponse:
    if not settings.DEBUG:
        return redirect("login")

    role = (role or "").lower()
    if role not in ("manager", "employee"):
        return redirect("login")

    manager, employees = _seed_demo_data()

    user = manager if role == "manager" else employees[0]
    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    return redirect("home")


def _store_one_time_credentials(request: HttpRequest, employee: User, password: str) -> None:
    request.session["one_time_credentials"] = {
        "login": employee.email,
        "temporary_password": password,
        "employee_id": employee.employee_id,
    }


@manager_required
@require_http_methods(["GET", "POST"])
def manager_employees(request: HttpRequest) -> HttpResponse:
    if request.method == "POST":
        form = CreateEmployeeForm(request.POST)
        if form.is_valid():
            employee = form.save(commit=False)
            password = form.cleaned_data.get("password")
            if password:
                employee.set_password(password)
                employee.save()
            else:
                temp_password = User.generate_temporary_password()
                employee.set_password(temp_password)
                employee.save()
                _store_one_time_credentials(request, employee, temp_password)
            messages.success(request, "Employee created.")
            return redirect("manager_employees")
        messages.error(request, "Please fix the errors and try again.")
    else:
        form = CreateEmployeeForm()

    q = (request.GET.get("q") or "").strip()
    role_id = (request.GET.get("position") or "").strip()

    creds = request.session.pop("one_time_credentials", None)

    employees = User.objects.filter(role=UserRole.EMPLOYEE).select_related("position").order_by("last_name", "first_name")
    if q:
        employees = employees.filter(
            models.Q(employee_id__icontains=q)
            | models.Q(first_name__icontains=q)
            | models.Q(last_name__icontains=q)
            | models.Q(email__icontains=q)
            | models.Q(phone__icontains=q)
        )
    if role_id.isdigit():
        employees = employees.filter(position_id=int(role_id))

    positions = Position.objects.order_by("name")
    return render(
        request,
        "manager/manager-employees.html",
        {"employees": employees, "positions": positions, "form": form, "q": q, "position": role_id, "creds": creds},
    )


def _json_form_errors(form) -> JsonResponse:
    errors = {field: [str(message) for message in messages] for field, messages in form.errors.items()}
    return JsonResponse({"ok": False, "errors": errors}, status=400)


def _employee_payload(employee: User) -> dict:
    return {
        "id": employee.id,
        "employee_id": employee.employee_id,
        "first_name": employee.first_name,
        "last_name": employee.last_name,
        "full_name": employee.display_name,
        "email": employee.email,
        "phone": employee.phone,
        "position_id": employee.position_id,
        "position": employee.role_label,
    }


@manager_required
@require_http_methods(["GET"])
def employee_details(request: HttpRequest, user_id: int) -> JsonResponse:
    employee = get_object_or_404(User.objects.select_related("position"), pk=user_id, role=UserRole.EMPLOYEE)
    return JsonResponse(_employee_payload(employee))


@manager_required
@require_http_methods(["POST"])
def employee_update(request: HttpRequest, user_id: int) -> JsonResponse:
    employee = get_object_or_404(User, pk=user_id, role=UserRole.EMPLOYEE)
    form = UpdateEmployeeForm(request.POST, instance=employee)
    if not form.is_valid():
        return _json_form_errors(form)
    updated = form.save()
    return JsonResponse({"ok": True, "employee": _employee_payload(updated)})


@manager_required
@require_http_methods(["POST"])
def reset_employee_password(request: HttpRequest, user_id: int) -> HttpResponse:
    employee = get_object_or_404(User, pk=user_id, role=UserRole.EMPLOYEE)
    temp_password = User.generate_temporary_password()
    employee.set_password(temp_password)
    employee.save(update_fields=["password"])
    _store_one_time_credentials(request, employee, temp_password)
    return redirect("manager_employees")


@manager_required
@require_http_methods(["POST"])
def employee_delete(request: HttpRequest, user_id: int) -> HttpResponse:
    """Deletes the employee; their submitted preferences go with them."""
    employee = get_object_or_404(User, pk=user_id, role=UserRole.EMPLOYEE)
    label = employee.display_name
    employee.delete()
    messages.success(request, f"Deleted employee: {label}.")
    return redirect("manager_employees")
