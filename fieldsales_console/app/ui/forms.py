from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from fieldsales_console.app.core.config import settings

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_REGEX = re.compile(r"^\+?\d{7,15}$")
ID_TYPES = ("Aadhar", "PAN", "Voter ID", "Driving License", "Passport")


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str


class FormValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        return f"{issue.field}: {issue.reason}"


@dataclass
class FormResult:
    values: dict[str, Any]
    field_errors: dict[str, str]

    @property
    def first_invalid_field(self) -> str | None:
        return next(iter(self.field_errors), None)

    @property
    def is_valid(self) -> bool:
        return len(self.field_errors) == 0

    def raise_for_errors(self) -> None:
        if self.field_errors:
            raise FormValidationError([ValidationIssue(name, reason) for name, reason in self.field_errors.items()])


def _text(value: Any) -> str:
    return str(value or "").strip()


def validate_login_form(identifier: str | None, password: str | None, *, by_email: bool) -> FormResult:
    normalized = _text(identifier)
    field_name = "email" if by_email else "phone"
    field_errors: dict[str, str] = {}
    if not normalized:
        field_errors[field_name] = "Email is required." if by_email else "Phone number is required."
    elif by_email and not EMAIL_REGEX.match(normalized):
        field_errors[field_name] = "Enter a valid email address."
    elif not by_email and not PHONE_REGEX.match(normalized):
        field_errors[field_name] = "Enter a valid phone number."
    if not _text(password):
        field_errors["password"] = "Password is required."
    values = {field_name: normalized.lower() if by_email else normalized, "password": password or ""}
    return FormResult(values=values, field_errors=field_errors)


def validate_staff_form(form: Mapping[str, Any], *, require_manager: bool = False) -> FormResult:
    """Validate the create-manager / create-officer form before anything is sent."""
    values = {
        "employee_id": _text(form.get("employee_id")),
        "name": _text(form.get("name")),
        "phone_number": _text(form.get("phone_number")),
        "password": str(form.get("password") or ""),
        "address": _text(form.get("address")),
        "dob": _text(form.get("dob")) or None,
        "id_type": _text(form.get("id_type")) or settings.DEFAULT_ID_TYPE,
        "id_no": _text(form.get("id_no")),
        "reporting_manager_id": _text(form.get("reporting_manager_id")) or None,
    }
    field_errors: dict[str, str] = {}
    if not values["employee_id"]:
        field_errors["employee_id"] = "Employee ID is required."
    if not values["name"]:
        field_errors["name"] = "Name is required."
    if not values["phone_number"]:
        field_errors["phone_number"] = "Phone number is required."
    elif not PHONE_REGEX.match(values["phone_number"]):
        field_errors["phone_number"] = "Enter a valid phone number."
    if not values["password"]:
        field_errors["password"] = "Password is required."
    elif len(values["password"]) < settings.MIN_PASSWORD_LENGTH:
        field_errors["password"] = f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters."
    if values["id_type"] not in ID_TYPES:
        field_errors["id_type"] = f"ID type must be one of: {', '.join(ID_TYPES)}."
    if values["dob"]:
        try:
            date.fromisoformat(values["dob"])
        except ValueError:
            field_errors["dob"] = "Date of birth must be YYYY-MM-DD."
    if require_manager and not values["reporting_manager_id"]:
        field_errors["reporting_manager_id"] = "Select a reporting manager."
    return FormResult(values=values, field_errors=field_errors)
