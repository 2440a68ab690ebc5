from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from formdesk.flatten import decode_payload
from formdesk.store import DEFAULT_TITLE
from formdesk.taxonomy import DEFAULT_OPTIONS, FIELD_TYPES, default_label, is_choice_type
from formdesk.utils import generate_field_id, to_iso

FIELDS_REQUIRED_MESSAGE = "Fields array is required and must contain at least one field"
TITLE_REQUIRED_MESSAGE = "Form title is required"
OWNER_REQUIRED_MESSAGE = "Your name is required"
RESERVED_FIELD_IDS = {"submitter_name"}

FIELD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": FIELD_TYPES},
        "label": {"type": ["string", "null"]},
        "required": {"type": ["boolean", "null"]},
        "placeholder": {"type": ["string", "null"]},
        "options": {"type": ["array", "null"], "items": {"type": "string"}},
        "order": {"type": ["integer", "null"]},
    },
}

FORM_PAYLOAD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": ["string", "null"]},
        "description": {"type": ["string", "null"]},
        "owner_name": {"type": ["string", "null"]},
        "fields": {"type": "array", "items": FIELD_SCHEMA},
    },
}

SUBMISSION_PAYLOAD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["data"],
    "properties": {
        "data": {"type": "object"},
        "submitter_name": {"type": ["string", "null"]},
    },
}

FIELD_UPDATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        key: value for key, value in FIELD_SCHEMA["properties"].items() if key not in {"id", "order"}
    },
}

METADATA_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        key: {"type": ["string", "null"]} for key in ("title", "description", "owner_name")
    },
}

SESSION_PAYLOAD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "form_id": {"type": ["string", "null"]},
        "metadata": METADATA_SCHEMA,
    },
}

_flag_validators = {
    key: Draft7Validator({"type": "object", "properties": {key: {"type": "boolean"}}})
    for key in ("is_published", "is_active")
}
_form_validator = Draft7Validator(FORM_PAYLOAD_SCHEMA)
_metadata_validator = Draft7Validator(METADATA_SCHEMA)
_session_validator = Draft7Validator(SESSION_PAYLOAD_SCHEMA)
_field_update_validator = Draft7Validator(FIELD_UPDATE_SCHEMA)
_submission_validator = Draft7Validator(SUBMISSION_PAYLOAD_SCHEMA)


def _schema_messages(validator: Draft7Validator, payload: Any) -> list[str]:
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    messages: list[str] = []
    for error in errors:
        location = ".".join(str(part) for part in error.path)
        messages.append(f"{location}: {error.message}" if location else error.message)
    return messages


def normalize_fields(raw_fields: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], list[str]]:
    """Fill defaults for builder-supplied field dicts and check id uniqueness."""
    errors: list[str] = []
    seen_ids: set[str] = set()
    fields: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_fields):
        field_type = str(raw["type"])
        field_id = str(raw.get("id") or "").strip() or generate_field_id(seen_ids)
        if field_id in seen_ids:
            errors.append(f"fields.{index}: duplicate field id ({field_id})")
            continue
        if field_id in RESERVED_FIELD_IDS:
            errors.append(f"fields.{index}: field id is reserved ({field_id})")
            continue
        seen_ids.add(field_id)
        label = raw.get("label")
        placeholder = raw.get("placeholder")
        field: dict[str, Any] = {
            "id": field_id,
            "type": field_type,
            "label": default_label(field_type) if label is None else str(label),
            "required": bool(raw.get("required")),
            "placeholder": "" if placeholder is None else str(placeholder),
            "order": len(fields),
        }
        if is_choice_type(field_type):
            options = raw.get("options")
            field["options"] = list(options) if options is not None else list(DEFAULT_OPTIONS)
        fields.append(field)
    return fields, errors


def parse_form_payload(
    payload: Any, partial: bool = False
) -> tuple[dict[str, Any], list[str]]:
    """Validate a create/update request body.

    With ``partial`` only the keys present are returned; otherwise missing
    metadata falls back to defaults and a non-empty field list is required.
    """
    errors = _schema_messages(_form_validator, payload)
    if errors:
        return {}, errors

    data: dict[str, Any] = {}
    if "title" in payload or not partial:
        title = str(payload.get("title") or "").strip()
        data["title"] = title or DEFAULT_TITLE
    for key in ("description", "owner_name"):
        if key in payload or not partial:
            data[key] = str(payload.get(key) or "").strip()

    if "fields" in payload or not partial:
        raw_fields = payload.get("fields") or []
        if not raw_fields:
            return {}, [FIELDS_REQUIRED_MESSAGE]
        fields, field_errors = normalize_fields(raw_fields)
        if field_errors:
            return {}, field_errors
        data["fields"] = fields
    return data, []


def parse_flag_payload(payload: Any, key: str, default: bool) -> tuple[bool, list[str]]:
    """Read a single JSON boolean such as ``is_published`` from a request body."""
    errors = _schema_messages(_flag_validators[key], payload)
    if errors:
        return default, errors
    return payload.get(key, default), []


def parse_metadata_payload(payload: Any) -> tuple[dict[str, Any], list[str]]:
    errors = _schema_messages(_metadata_validator, payload)
    if errors:
        return {}, errors
    return {key: payload[key] for key in METADATA_SCHEMA["properties"] if key in payload}, []


def parse_session_payload(payload: Any) -> tuple[dict[str, Any], list[str]]:
    errors = _schema_messages(_session_validator, payload)
    if errors:
        return {}, errors
    return {
        "form_id": payload.get("form_id") or None,
        "metadata": payload.get("metadata") or {},
    }, []


def check_builder_payload(payload: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Trim builder metadata and list what blocks saving, in display order."""
    data = dict(payload)
    for key in ("title", "description", "owner_name"):
        data[key] = str(data.get(key) or "").strip()
    errors: list[str] = []
    if not data["title"]:
        errors.append(TITLE_REQUIRED_MESSAGE)
    if not data["owner_name"]:
        errors.append(OWNER_REQUIRED_MESSAGE)
    if not data.get("fields"):
        errors.append(FIELDS_REQUIRED_MESSAGE)
    return data, errors


def parse_submission_payload(payload: Any) -> tuple[dict[str, Any], list[str]]:
    errors = _schema_messages(_submission_validator, payload)
    if errors:
        return {}, errors
    submitter = payload.get("submitter_name")
    return {
        "data": payload["data"],
        "submitter_name": str(submitter).strip() if submitter else None,
    }, []


def sanitize_form_output(
    form: dict[str, Any], submission_count: int | None = None
) -> dict[str, Any]:
    output = {
        "id": form["id"],
        "title": form.get("title", ""),
        "description": form.get("description", ""),
        "owner_name": form.get("owner_name", ""),
        "fields": [dict(field) for field in form.get("fields", [])],
        "is_published": bool(form.get("is_published")),
        "is_active": bool(form.get("is_active", True)),
        "published_at": to_iso(form.get("published_at")),
        "created_at": to_iso(form.get("created_at")),
        "updated_at": to_iso(form.get("updated_at")),
    }
    if submission_count is not None:
        output["submission_count"] = submission_count
    return output


def sanitize_submission_output(
    submission: dict[str, Any], form_title: str | None = None
) -> dict[str, Any]:
    output = {
        "id": submission["id"],
        "form_id": submission["form_id"],
        "submitter_name": submission.get("submitter_name"),
        "data": decode_payload(submission.get("data")),
        "created_at": to_iso(submission.get("created_at")),
    }
    if form_title is not None:
        output["form_title"] = form_title
    return output


def parse_field_update(payload: Any) -> tuple[dict[str, Any], list[str]]:
    errors = _schema_messages(_field_update_validator, payload)
    if errors:
        return {}, errors
    updates = {
        key: value
        for key, value in payload.items()
        if key in FIELD_UPDATE_SCHEMA["properties"]
    }
    if "required" in updates:
        updates["required"] = bool(updates["required"])
    for key in ("label", "placeholder"):
        if key in updates and updates[key] is None:
            updates[key] = ""
    return updates, []
