"""
=============================================================================
SCHEDULING FORMS
=============================================================================

Django forms for the scheduling app.

Per-day slot editors (availability and requirements) post lists of
values and are parsed directly in views/helpers.py; the forms here cover
the single-record editors:
- PositionForm: create/edit employee roles
- RequirementPatternForm: create/edit weekly requirement patterns
- RequirementNotesForm: manager notes for the AI
- PreferenceNotesForm: employee notes for the month
=============================================================================
"""
from __future__ import annotations

from django import forms

from .models import Position, RequirementPattern


class PositionForm(forms.ModelForm):
    class Meta:
        model = Position
        fields = ["name", "is_active"]


class RequirementPatternForm(forms.ModelForm):
    """
    Weekly requirement, e.g. "Weekday mornings": Monday 09:00-17:00, 2 x Staff.

    Fields:
    - weekday: 0 = Monday ... 6 = Sunday
    - start_time, end_time: the time range to staff
    - staff_count: number of people needed (>= 1)
    - role: optional role the people should have
    """
    class Meta:
        model = RequirementPattern
        fields = ["name", "weekday", "start_time", "end_time", "staff_count", "role"]


class RequirementNotesForm(forms.Form):
    notes = forms.CharField(
        label="General notes for the AI",
        required=False,
        widget=forms.Textarea(attrs={"rows": 3, "placeholder": "e.g. Prioritise experienced staff on weekends."}),
    )


class PreferenceNotesForm(forms.Form):
    general_notes = forms.CharField(
        label="Other requests or notes",
        required=False,
        widget=forms.Textarea(attrs={"rows": 3}),
    )
