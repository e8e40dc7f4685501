"""Gemini-backed schedule generation with structured JSON I/O.

``GeminiScheduleClient.generate`` sends a prompt and returns a ``ScheduleProposal``.
``parse_schedule_response`` turns raw model text into a ``ScheduleProposal``.
``parse_assignment`` splits one "Name: HH:MM - HH:MM (Role)" line.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime

from django.conf import settings
from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from .schemas import ScheduleProposal, ShiftEntry

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_ASSIGNMENT_RE = re.compile(
    r"^\s*(?P<name>[^:]+?)\s*:\s*"
    r"(?P<start>\d{1,2}:\d{2})\s*[-–~]\s*(?P<end>\d{1,2}:\d{2})"
    r"(?:\s*\((?P<role>[^)]*)\))?\s*$"
)


class ScheduleGenerationError(Exception):
    """Base error for anything that stops the AI from producing a schedule."""


class MissingAPIKeyError(ScheduleGenerationError):
    """Raised when no Gemini API key is configured."""


class ScheduleResponseError(ScheduleGenerationError):
    """Raised when the model's answer is not a usable schedule JSON object."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


# ------------------------------------------------------------------
# Response parsing
# ------------------------------------------------------------------

def strip_code_fence(text: str) -> str:
    """Trim the text and unwrap it if the whole thing is one ```lang ... ``` block."""
    text = (text or "").strip()
    match = _FENCE_RE.match(text)
    if match and match.group(2):
        return match.group(2).strip()
    return text


def parse_schedule_response(raw_text: str) -> ScheduleProposal:
    json_text = strip_code_fence(raw_text)
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as exc:
        logger.error("Gemini returned invalid JSON: %s", json_text[:500])
        raise ScheduleResponseError(
            f"Could not parse the AI response as schedule JSON. Raw response: {json_text}",
            raw_response=json_text,
        ) from exc

    if not isinstance(data, dict):
        logger.error("Gemini returned JSON that is not an object: %s", json_text[:500])
        raise ScheduleResponseError(
            f"The AI response is not a valid schedule JSON object. Raw response: {json_text}",
            raw_response=json_text,
        )

    try:
        return ScheduleProposal.from_json_object(data)
    except PydanticValidationError as exc:
        logger.error("Gemini schedule failed validation: %s", exc)
        details = "; ".join(err["msg"] for err in exc.errors())
        raise ScheduleResponseError(
            f"The AI response is not a valid schedule: {details}. Raw response: {json_text}",
            raw_response=json_text,
        ) from exc


def parse_assignment(line: str) -> ShiftEntry:
    match = _ASSIGNMENT_RE.match(line or "")
    if not match:
        return ShiftEntry(raw=line)
    try:
        start = datetime.strptime(match.group("start"), "%H:%M").time()
        end = datetime.strptime(match.group("end"), "%H:%M").time()
    except ValueError:
        return ShiftEntry(raw=line)
    role = (match.group("role") or "").strip() or None
    return ShiftEntry(
        raw=line,
        employee_name=match.group("name").strip(),
        start_time=start,
        end_time=end,
        role=role,
    )


# ------------------------------------------------------------------
# Gemini call
# ------------------------------------------------------------------

@dataclass
class GenerationResult:
    proposal: ScheduleProposal
    raw_response: str
    model_name: str


class GeminiScheduleClient:
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", temperature: float = 0.1):
        if not api_key:
            raise MissingAPIKeyError("The Gemini API key is not configured. Set the GEMINI_API_KEY environment variable.")
        self.model = model
        self.temperature = temperature
        self._client = genai.Client(api_key=api_key)

    def generate(self, prompt: str) -> GenerationResult:
        logger.info("Calling Gemini model=%s with a %d-char prompt", self.model, len(prompt))
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except Exception as exc:
            logger.exception("Gemini API call failed")
            raise ScheduleGenerationError(f"AI schedule generation failed: {exc}") from exc

        raw_text = (response.text or "").strip()
        logger.info("Gemini response length: %d chars", len(raw_text))
        logger.debug("Gemini raw: %s", raw_text[:500])
        return GenerationResult(
            proposal=parse_schedule_response(raw_text),
            raw_response=raw_text,
            model_name=self.model,
        )


def get_schedule_client() -> GeminiScheduleClient:
    return GeminiScheduleClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        temperature=settings.GEMINI_TEMPERATURE,
    )
