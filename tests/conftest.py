from datetime import date

import pytest

from apps.accounts.models import User, UserRole
from apps.scheduling.ai_client import GenerationResult, parse_schedule_response
from apps.scheduling.models import Position

TARGET_MONTH = date(2024, 9, 1)


class StubScheduleClient:
    """Stands in for GeminiScheduleClient: records prompts, answers with canned text."""

    model = "stub-model"

    def __init__(self, raw_response: str = '{"unassigned_shifts": []}', error: Exception | None = None):
        self.raw_response = raw_response
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GenerationResult(
            proposal=parse_schedule_response(self.raw_response),
            raw_response=self.raw_response,
            model_name=self.model,
        )


@pytest.fixture
def stub_client():
    return StubScheduleClient


@pytest.fixture
def positions(db):
    return {
        name: Position.objects.create(name=name)
        for name in ("Senior Staff", "Staff", "Shift Lead")
    }


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        username="manager@example.com",
        email="manager@example.com",
        password="manager-pass-123",
        first_name="Maria",
        last_name="Manager",
        role=UserRole.MANAGER,
    )


@pytest.fixture
def employee(db, positions):
    return User.objects.create_user(
        username="alice@example.com",
        email="alice@example.com",
        password="alice-pass-123",
        first_name="Alice",
        last_name="Smith",
        role=UserRole.EMPLOYEE,
        position=positions["Senior Staff"],
    )


@pytest.fixture
def other_employee(db, positions):
    return User.objects.create_user(
        username="bob@example.com",
        email="bob@example.com",
        password="bob-pass-123",
        first_name="Bob",
        last_name="Johnson",
        role=UserRole.EMPLOYEE,
        position=positions["Staff"],
    )
