from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from formdesk.taxonomy import FieldType

REQUIRED_MESSAGE = "This field is required"
EMAIL_MESSAGE = "Please enter a valid email address"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def is_valid_email(value: Any) -> bool:
    return bool(EMAIL_PATTERN.match(str(value)))


def validate(
    fields: Sequence[Mapping[str, Any]], values: Mapping[str, Any]
) -> dict[str, str]:
    """Check every field against the submitted values.

    Returns a map of field id to error message; an empty map means the
    values are valid. Within a field the required check runs first and the
    email format check second, so a later failure replaces an earlier one.
    """
    errors: dict[str, str] = {}
    for field in fields:
        field_id = field["id"]
        value = values.get(field_id)
        if field.get("required") and is_empty(value):
            errors[field_id] = REQUIRED_MESSAGE
        if field.get("type") == FieldType.EMAIL.value and not is_empty(value):
            if not is_valid_email(value):
                errors[field_id] = EMAIL_MESSAGE
    return errors
