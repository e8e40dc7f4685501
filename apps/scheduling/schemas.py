"""
Validated data exchanged with the AI scheduler.

``ScheduleRequest`` is what the prompt builder consumes (built from the
database by services.build_schedule_request). ``ScheduleProposal`` is what
the Gemini response is parsed into before it is stored.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNASSIGNED_KEY = "unassigned_shifts"


class TimeSlotInput(BaseModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: str


class PreferenceInput(BaseModel):
    employee_id: str
    employee_name: str
    role: str = ""
    time_slots: list[TimeSlotInput] = Field(default_factory=list)
    general_notes: str = ""


class RequirementInput(BaseModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    staff_count: int = Field(ge=1)
    role: str = ""


class ScheduleRequest(BaseModel):
    month: dt.date
    today: dt.date
    preferences: list[PreferenceInput] = Field(default_factory=list)
    requirements: list[RequirementInput] = Field(default_factory=list)
    notes: str = ""


def _as_text_list(value: Any, *, what: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, (dict, list)):
            raise ValueError(f"{what} must contain only strings.")
        text = str(item).strip()
        if text:
            items.append(text)
    return items


class ScheduleProposal(BaseModel):
    """
    The model's answer: day key -> assignment lines, plus the requirements it could not fill.

    Day keys are normally ISO dates, but whatever key the model used is kept.
    """
    model_config = ConfigDict(extra="forbid")

    assignments: dict[str, list[str]] = Field(default_factory=dict)
    unassigned_shifts: list[str] = Field(default_factory=list)

    @field_validator("assignments", mode="before")
    @classmethod
    def _coerce_assignments(cls, value: Any) -> dict[str, list[str]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("Schedule must be a JSON object keyed by date.")
        return {str(key).strip(): _as_text_list(items, what=f"Day {key!r}") for key, items in value.items()}

    @field_validator("unassigned_shifts", mode="before")
    @classmethod
    def _coerce_unassigned(cls, value: Any) -> list[str]:
        return _as_text_list(value, what=UNASSIGNED_KEY)

    @classmethod
    def from_json_object(cls, data: dict[str, Any]) -> "ScheduleProposal":
        days = {key: value for key, value in data.items() if key != UNASSIGNED_KEY}
        return cls.model_validate({"assignments": days, "unassigned_shifts": data.get(UNASSIGNED_KEY)})


class ShiftEntry(BaseModel):
    """One assignment line split into parts; fields stay None when the line didn't follow the format."""

    raw: str
    employee_name: Optional[str] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    role: Optional[str] = None

    @property
    def is_structured(self) -> bool:
        return self.employee_name is not None
