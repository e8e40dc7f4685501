"""
Tests for the Gemini client wrapper and response parsing. No network calls.
"""
from datetime import time
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from apps.scheduling import ai_client
from apps.scheduling.ai_client import (
    GeminiScheduleClient,
    MissingAPIKeyError,
    ScheduleGenerationError,
    ScheduleResponseError,
    get_schedule_client,
    parse_assignment,
    parse_schedule_response,
    strip_code_fence,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ("```\n[1, 2]\n```", "[1, 2]"),
        ('  {"a": 1}  ', '{"a": 1}'),
    ],
)
def test_strip_code_fence(raw, expected):
    assert strip_code_fence(raw) == expected


def test_parse_fenced_schedule():
    raw = (
        "```json\n"
        '{"2024-09-02": ["Alice Smith: 09:00 - 17:00 (Staff)"],'
        ' "unassigned_shifts": ["2024-09-06 09:00 - 17:00 - 1 person needed"]}\n'
        "```"
    )
    proposal = parse_schedule_response(raw)
    assert proposal.assignments == {"2024-09-02": ["Alice Smith: 09:00 - 17:00 (Staff)"]}
    assert proposal.unassigned_shifts == ["2024-09-06 09:00 - 17:00 - 1 person needed"]


def test_loose_values_are_coerced():
    proposal = parse_schedule_response(
        '{"2024-09-02": "Alice Smith: 09:00 - 17:00", "2024-09-03": [" ", 42, null],'
        ' "2024-09-04": null, "unassigned_shifts": "Friday is short one person"}'
    )
    assert proposal.assignments == {
        "2024-09-02": ["Alice Smith: 09:00 - 17:00"],
        "2024-09-03": ["42"],
        "2024-09-04": [],
    }
    assert proposal.unassigned_shifts == ["Friday is short one person"]


def test_non_date_keys_are_kept():
    proposal = parse_schedule_response('{"Monday": ["Bob Johnson: 10:00 - 18:00"]}')
    assert proposal.assignments == {"Monday": ["Bob Johnson: 10:00 - 18:00"]}
    assert proposal.unassigned_shifts == []


def test_invalid_json_keeps_raw_text():
    with pytest.raises(ScheduleResponseError) as excinfo:
        parse_schedule_response("Sorry, I cannot help with that.")
    assert "Raw response: Sorry, I cannot help with that." in str(excinfo.value)
    assert excinfo.value.raw_response == "Sorry, I cannot help with that."


def test_json_array_is_rejected():
    with pytest.raises(ScheduleResponseError, match="not a valid schedule JSON object"):
        parse_schedule_response('["Alice Smith: 09:00 - 17:00"]')


def test_nested_objects_are_rejected():
    with pytest.raises(ScheduleResponseError, match="not a valid schedule"):
        parse_schedule_response('{"2024-09-02": [{"name": "Alice"}]}')


def test_parse_assignment_line():
    entry = parse_assignment("Alice Smith: 09:00 - 17:00 (Senior Staff)")
    assert entry.is_structured
    assert entry.employee_name == "Alice Smith"
    assert entry.start_time == time(9)
    assert entry.end_time == time(17)
    assert entry.role == "Senior Staff"

    no_role = parse_assignment("Bob Johnson: 10:00 - 18:00")
    assert no_role.employee_name == "Bob Johnson"
    assert no_role.role is None


def test_parse_assignment_free_text():
    entry = parse_assignment("Everyone off for the holiday")
    assert not entry.is_structured
    assert entry.raw == "Everyone off for the holiday"


def test_missing_api_key():
    with pytest.raises(MissingAPIKeyError):
        GeminiScheduleClient(api_key="")


def test_get_schedule_client_reads_settings(settings):
    settings.GEMINI_API_KEY = ""
    with pytest.raises(MissingAPIKeyError, match="GEMINI_API_KEY"):
        get_schedule_client()


class _FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def _patch_genai(monkeypatch, models):
    def fake_client(api_key):
        assert api_key == "test-key"
        return SimpleNamespace(models=models)

    monkeypatch.setattr(ai_client.genai, "Client", fake_client)


def test_generate_sends_json_config(monkeypatch):
    models = _FakeModels(text='{"2024-09-02": ["Alice Smith: 09:00 - 17:00"]}')
    _patch_genai(monkeypatch, models)

    client = GeminiScheduleClient(api_key="test-key", model="gemini-test", temperature=0.1)
    result = client.generate("PROMPT")

    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "PROMPT"
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].temperature == 0.1
    assert result.model_name == "gemini-test"
    assert result.proposal.assignments == {"2024-09-02": ["Alice Smith: 09:00 - 17:00"]}


def test_api_errors_are_wrapped(monkeypatch):
    error = genai_errors.APIError(500, {"error": {"code": 500, "message": "boom", "status": "INTERNAL"}})
    _patch_genai(monkeypatch, _FakeModels(error=error))

    client = GeminiScheduleClient(api_key="test-key")
    with pytest.raises(ScheduleGenerationError, match="AI schedule generation failed"):
        client.generate("PROMPT")


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_transport_errors_are_wrapped(monkeypatch, error):
    _patch_genai(monkeypatch, _FakeModels(error=error))

    client = GeminiScheduleClient(api_key="test-key")
    with pytest.raises(ScheduleGenerationError, match="AI schedule generation failed") as excinfo:
        client.generate("PROMPT")
    assert excinfo.value.__cause__ is error


def test_empty_response_is_a_response_error(monkeypatch):
    _patch_genai(monkeypatch, _FakeModels(text=None))

    client = GeminiScheduleClient(api_key="test-key")
    with pytest.raises(ScheduleResponseError):
        client.generate("PROMPT")
