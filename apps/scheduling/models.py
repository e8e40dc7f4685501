from __future__ import annotations

from datetime import date, time

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

# The all-day "can't work" marker an employee can set with one click.
ALL_DAY_START = time(0, 0)
ALL_DAY_END = time(23, 59)


def _validate_time_range_and_staff(*, start_time, end_time, staff_count) -> None:
    errors: dict[str, str] = {}
    if start_time and end_time and start_time > end_time:
        errors["end_time"] = "End time cannot be before start time."
    if staff_count is not None and staff_count < 1:
        errors["staff_count"] = "Staff count must be at least 1."
    if errors:
        raise ValidationError(errors)


class Position(models.Model):
    name = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)

    def clean(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValidationError({"name": "Role name is required."})
        if len(name) > 25:
            raise ValidationError({"name": "Role name must be 25 characters or fewer."})
        self.name = name

    def __str__(self) -> str:
        return self.name


# =============================================================================
# EMPLOYEE AVAILABILITY
# =============================================================================


class AvailabilityStatus(models.TextChoices):
    PREFERRED = "preferred", "Preferred"
    AVAILABLE = "available", "Available"
    UNAVAILABLE = "unavailable", "Unavailable"


class EmployeePreference(models.Model):
    """One employee's submission for one target month."""

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="preferences",
    )
    month = models.DateField(db_index=True)
    general_notes = models.TextField(blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["month", "employee__last_name", "employee__first_name"]
        constraints = [
            models.UniqueConstraint(fields=["employee", "month"], name="unique_employee_preference_month"),
        ]

    def __str__(self) -> str:
        return f"{self.employee.employee_id} preferences for {self.month:%Y-%m}"


class TimeSlotPreference(models.Model):
    preference = models.ForeignKey(EmployeePreference, on_delete=models.CASCADE, related_name="time_slots")
    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(max_length=20, choices=AvailabilityStatus.choices, default=AvailabilityStatus.AVAILABLE)

    class Meta:
        ordering = ["date", "start_time", "id"]

    @property
    def is_all_day_unavailable(self) -> bool:
        return (
            self.status == AvailabilityStatus.UNAVAILABLE
            and self.start_time == ALL_DAY_START
            and self.end_time == ALL_DAY_END
        )

    def clean(self) -> None:
        if self.start_time and self.end_time and self.start_time >= self.end_time and not self.is_all_day_unavailable:
            raise ValidationError({"end_time": "End time must be after start time."})

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.start_time:%H:%M}-{self.end_time:%H:%M} {self.status}"


# =============================================================================
# MANAGER REQUIREMENTS
# =============================================================================


class RequirementSlot(models.Model):
    """How many people (optionally of which role) a given date/time range needs."""

    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    staff_count = models.PositiveIntegerField(default=1)
    role = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="requirement_slots",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time", "id"]

    def clean(self) -> None:
        _validate_time_range_and_staff(
            start_time=self.start_time,
            end_time=self.end_time,
            staff_count=self.staff_count,
        )

    @property
    def time_range(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


class RequirementNotes(models.Model):
    """Free-text guidance for the AI, one record per target month."""

    month = models.DateField(unique=True)
    notes = models.TextField(blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "requirement notes"

    def __str__(self) -> str:
        return f"Notes for {self.month:%Y-%m}"


class Weekday(models.IntegerChoices):
    MONDAY = 0, "Monday"
    TUESDAY = 1, "Tuesday"
    WEDNESDAY = 2, "Wednesday"
    THURSDAY = 3, "Thursday"
    FRIDAY = 4, "Friday"
    SATURDAY = 5, "Saturday"
    SUNDAY = 6, "Sunday"


class RequirementPattern(models.Model):
    """A weekly requirement (e.g. every Monday 09:00-17:00, 2 staff) applied to whole months."""

    name = models.CharField(max_length=120)
    weekday = models.PositiveSmallIntegerField(choices=Weekday.choices)
    start_time = models.TimeField()
    end_time = models.TimeField()
    staff_count = models.PositiveIntegerField(default=1)
    role = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="requirement_patterns",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["weekday", "start_time"]
        constraints = [
            models.UniqueConstraint(fields=["created_by", "name"], name="unique_pattern_name_per_manager"),
        ]

    def clean(self) -> None:
        _validate_time_range_and_staff(
            start_time=self.start_time,
            end_time=self.end_time,
            staff_count=self.staff_count,
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.get_weekday_display()})"


# =============================================================================
# AI-GENERATED SCHEDULES
# =============================================================================


class ScheduleStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


class GeneratedScheduleQuerySet(models.QuerySet):
    def for_month(self, month: date):
        return self.filter(month=month)

    def published(self):
        return self.filter(status=ScheduleStatus.PUBLISHED)


class GeneratedSchedule(models.Model):
    month = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=ScheduleStatus.choices, default=ScheduleStatus.DRAFT)
    # {"2024-08-15": ["Alice Smith: 09:00 - 17:00 (Cashier)", ...]}
    assignments = models.JSONField(default=dict, blank=True)
    unassigned_shifts = models.JSONField(default=list, blank=True)
    prompt = models.TextField(blank=True)
    raw_response = models.TextField(blank=True)
    model_name = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="generated_schedules",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    published_at = models.DateTimeField(null=True, blank=True)

    objects = GeneratedScheduleQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    @property
    def is_published(self) -> bool:
        return self.status == ScheduleStatus.PUBLISHED

    def sorted_days(self) -> list[tuple[str, list[str]]]:
        """Day keys in calendar order; keys that are not ISO dates go last, as given."""
        def sort_key(key: str):
            try:
                return (0, date.fromisoformat(key), key)
            except ValueError:
                return (1, date.max, key)

        return [(key, list(self.assignments.get(key) or [])) for key in sorted(self.assignments, key=sort_key)]

    def __str__(self) -> str:
        return f"Schedule {self.month:%Y-%m} ({self.status})"
