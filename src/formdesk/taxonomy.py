"""The fixed catalog of field types a form can contain."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from formdesk.utils import generate_field_id


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    FILE = "file"
    URL = "url"


FIELD_TYPES = [member.value for member in FieldType]
CHOICE_TYPES = {FieldType.SELECT.value, FieldType.RADIO.value, FieldType.CHECKBOX.value}
DEFAULT_OPTIONS = ["Option 1", "Option 2"]


def coerce_field_type(value: Any) -> FieldType | None:
    """Return the matching taxonomy member, or None for an unknown type."""
    if isinstance(value, FieldType):
        return value
    try:
        return FieldType(str(value))
    except ValueError:
        return None


def is_choice_type(value: Any) -> bool:
    return str(getattr(value, "value", value)) in CHOICE_TYPES


def default_label(type_name: str) -> str:
    return f"{type_name[:1].upper()}{type_name[1:]} Field"


def default_field(field_type: str, existing_ids: Iterable[str] = ()) -> dict[str, Any]:
    type_name = str(getattr(field_type, "value", field_type))
    field: dict[str, Any] = {
        "id": generate_field_id(existing_ids),
        "type": type_name,
        "label": default_label(type_name),
        "required": False,
        "placeholder": f"Enter {type_name}",
    }
    if type_name in CHOICE_TYPES:
        field["options"] = list(DEFAULT_OPTIONS)
    return field
