"""
Tests for login, demo seeding and the manager's employee management.
"""
import pytest
from django.contrib.auth import authenticate
from django.test import RequestFactory
from django.urls import reverse
from django.utils import timezone

from apps.accounts.context_processors import user_ui_context
from apps.accounts.models import User, UserRole
from apps.scheduling.models import EmployeePreference, RequirementPattern, RequirementSlot
from apps.scheduling.services import next_month_start, requirement_notes_for, submit_preference_notes

pytestmark = pytest.mark.django_db


def test_home_redirects_by_role(client, manager, employee):
    client.force_login(manager)
    assert client.get(reverse("home")).url == reverse("manager_dashboard")

    client.force_login(employee)
    assert client.get(reverse("home")).url == reverse("employee_availability")


def test_login_with_email(client, employee):
    response = client.post(reverse("login"), {"username": "alice@example.com", "password": "alice-pass-123"})
    assert response.status_code == 302
    assert response.url == reverse("home")


def test_login_page_hides_demo_outside_debug(client, settings):
    settings.DEBUG = False
    response = client.get(reverse("login"))
    assert response.status_code == 200
    assert response.context["show_demo"] is False


def test_demo_login_seeds_data(client, settings):
    settings.DEBUG = True
    response = client.get(reverse("demo_login", args=["manager"]))
    assert response.url == reverse("home")

    names = set(User.objects.filter(role=UserRole.EMPLOYEE).values_list("first_name", flat=True))
    assert names == {"Alice", "Bob", "Charlie", "Diana"}
    assert User.objects.get(first_name="Diana").role_label == "Shift Lead"
    assert RequirementPattern.objects.count() == 5

    month = next_month_start(timezone.localdate())
    assert RequirementSlot.objects.filter(date__gte=month).exists()
    assert "fair distribution of hours" in requirement_notes_for(month)

    # Logging in again must not duplicate anything.
    client.get(reverse("demo_login", args=["employee"]))
    assert User.objects.filter(role=UserRole.EMPLOYEE).count() == 4
    assert RequirementPattern.objects.count() == 5


def test_demo_login_disabled_outside_debug(client, settings):
    settings.DEBUG = False
    response = client.get(reverse("demo_login", args=["manager"]))
    assert response.url == reverse("login")
    assert not User.objects.exists()


@pytest.fixture
def manager_client(client, manager):
    client.force_login(manager)
    return client


def test_create_employee_with_temporary_password(manager_client, positions):
    response = manager_client.post(reverse("manager_employees"), {
        "full_name": "Charlie  Brown",
        "email": "Charlie@Example.com",
        "phone": "",
        "position": positions["Staff"].id,
    })
    assert response.status_code == 302

    employee = User.objects.get(email="charlie@example.com")
    assert employee.username == "charlie@example.com"
    assert (employee.first_name, employee.last_name) == ("Charlie", "Brown")
    assert employee.role == UserRole.EMPLOYEE
    assert employee.employee_id.startswith("EMP-")

    page = manager_client.get(reverse("manager_employees"))
    creds = page.context["creds"]
    assert creds["login"] == "charlie@example.com"
    assert authenticate(username="charlie@example.com", password=creds["temporary_password"]) == employee
    # Shown once only.
    assert manager_client.get(reverse("manager_employees")).context["creds"] is None


def test_create_employee_with_explicit_password(manager_client, positions):
    manager_client.post(reverse("manager_employees"), {
        "full_name": "Diana Prince",
        "email": "diana@example.com",
        "password": "lead-pass-9876",
        "position": positions["Shift Lead"].id,
    })
    assert authenticate(username="diana@example.com", password="lead-pass-9876") is not None


def test_duplicate_email_rejected(manager_client, employee, positions):
    manager_client.post(reverse("manager_employees"), {
        "full_name": "Alice Again",
        "email": "ALICE@example.com",
        "position": positions["Staff"].id,
    })
    assert User.objects.filter(email__iexact="alice@example.com").count() == 1


def test_search_and_filter(manager_client, employee, other_employee):
    page = manager_client.get(reverse("manager_employees"), {"q": "john"})
    assert [e.last_name for e in page.context["employees"]] == ["Johnson"]

    page = manager_client.get(reverse("manager_employees"), {"position": employee.position_id})
    assert [e.first_name for e in page.context["employees"]] == ["Alice"]


def test_employee_details_and_update(manager_client, employee, positions):
    data = manager_client.get(reverse("employee_details", args=[employee.id])).json()
    assert data["full_name"] == "Alice Smith"
    assert data["position"] == "Senior Staff"

    response = manager_client.post(reverse("employee_update", args=[employee.id]), {
        "full_name": "Alice Cooper",
        "email": "alice@example.com",
        "phone": "+1 555 0100",
        "position": positions["Shift Lead"].id,
    })
    payload = response.json()
    assert payload["ok"] is True
    assert payload["employee"]["full_name"] == "Alice Cooper"
    assert payload["employee"]["position"] == "Shift Lead"


def test_reset_password(manager_client, employee):
    manager_client.post(reverse("reset_employee_password", args=[employee.id]))
    creds = manager_client.get(reverse("manager_employees")).context["creds"]
    assert creds["employee_id"] == employee.employee_id
    assert authenticate(username="alice@example.com", password="alice-pass-123") is None


def test_delete_employee_removes_preferences(manager_client, employee):
    submit_preference_notes(employee=employee, month=next_month_start(employee.date_joined.date()), general_notes="x")
    manager_client.post(reverse("employee_delete", args=[employee.id]))
    assert not User.objects.filter(pk=employee.pk).exists()
    assert not EmployeePreference.objects.exists()


def test_nav_links_follow_role(manager, employee):
    request = RequestFactory().get("/")
    request.user = manager
    labels = [link["label"] for link in user_ui_context(request)["nav_links"]]
    assert labels == ["Dashboard", "Employees"]

    request.user = employee
    context = user_ui_context(request)
    assert context["user_initials"] == "AS"
    assert context["user_header_role"] == "Senior Staff"
    assert [link["url"] for link in context["nav_links"]] == [
        reverse("employee_availability"),
        reverse("employee_schedule"),
    ]


def test_debug_is_off_without_env(monkeypatch):
    import importlib

    import dotenv

    from shiftplanner import settings as project_settings

    monkeypatch.delenv("DJANGO_DEBUG", raising=False)
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: False)
    try:
        assert importlib.reload(project_settings).DEBUG is False
        monkeypatch.setenv("DJANGO_DEBUG", "1")
        assert importlib.reload(project_settings).DEBUG is True
    finally:
        monkeypatch.undo()
        importlib.reload(project_settings)
