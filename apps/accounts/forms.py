# Forms validate user input before it is saved and render the HTML fields
# for the login page and the manager's employee editor.

from __future__ import annotations

import re

from django import forms
from django.contrib.auth.forms import AuthenticationForm
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError

from apps.scheduling.models import Position

from .models import User, UserRole

PHONE_RE = re.compile(r"[0-9+()\-\s]{6,25}")


def _split_full_name(full_name: str) -> tuple[str, str]:
    parts = [p for p in (full_name or "").split() if p]
    first_name = parts[0] if parts else ""
    last_name = " ".join(parts[1:]) if len(parts) > 1 else ""
    return first_name, last_name


class LoginForm(AuthenticationForm):
    username = forms.CharField(label="Email / Username")


class EmployeeBaseForm(forms.ModelForm):
    full_name = forms.CharField(label="Full name", max_length=150)

    class Meta:
        model = User
        fields = ["email", "phone", "position"]
        labels = {"position": "Role"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"].required = True
        self.fields["phone"].required = False
        self.fields["position"].queryset = Position.objects.filter(is_active=True).order_by("name")
        self.fields["position"].required = True
        if self.instance and self.instance.pk and not self.is_bound:
            self.initial.setdefault("full_name", self.instance.get_full_name())

    def clean_full_name(self):
        full_name = (self.cleaned_data.get("full_name") or "").strip()
        if not full_name:
            raise ValidationError("Name is required.")
        return full_name

    def clean_phone(self):
        phone = (self.cleaned_data.get("phone") or "").strip()
        if phone and not PHONE_RE.fullmatch(phone):
            raise ValidationError("Enter a valid phone number.")
        return phone

    def clean_email(self):
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if not email:
            raise ValidationError("Email is required.")
        qs = User.objects.filter(email=email)
        if self.instance and self.instance.pk:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ValidationError("An employee with this email already exists.")
        return email

    def save(self, commit=True) -> User:
        user: User = super().save(commit=False)
        user.first_name, user.last_name = _split_full_name(self.cleaned_data.get("full_name"))
        user.username = self.cleaned_data["email"]
        if commit:
            user.save()
        return user


class CreateEmployeeForm(EmployeeBaseForm):
    # Left blank, the view generates a one-time temporary password instead.
    password = forms.CharField(label="Password", required=False, strip=False, widget=forms.PasswordInput)

    def clean_password(self):
        password = self.cleaned_data.get("password") or ""
        if password:
            validate_password(password)
        return password

    def save(self, commit=True) -> User:
        user: User = super().save(commit=False)
        user.role = UserRole.EMPLOYEE
        user.is_staff = False
        user.is_superuser = False
        if commit:
            user.save()
        return user


class UpdateEmployeeForm(EmployeeBaseForm):
    pass
