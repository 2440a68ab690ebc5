"""Turn nested submission payloads into flat, ordered display columns."""

from __future__ import annotations

from typing import Any

import orjson

KEY_SEPARATOR = " - "
LIST_SEPARATOR = "; "
RAW_DATA_KEY = "Raw Data"


def _compact_json(value: Any) -> str:
    return orjson.dumps(value).decode("utf-8")


def display_text(value: Any) -> str:
    """Render a scalar the way it reads in a spreadsheet cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return _compact_json(value)
    return str(value)


def decode_payload(raw: Any) -> Any:
    """Parse stored payload text, returning the original text when it is not JSON."""
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw


def _flatten_value(value: Any, key: str, out: list[tuple[str, str]]) -> None:
    if value is None:
        out.append((key, ""))
    elif isinstance(value, dict):
        for child_key, child_value in value.items():
            child = f"{key}{KEY_SEPARATOR}{child_key}" if key else str(child_key)
            _flatten_value(child_value, child, out)
    elif isinstance(value, list):
        out.append((key, LIST_SEPARATOR.join(display_text(item) for item in value)))
    else:
        out.append((key, display_text(value)))


def flatten(payload: Any, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten ``payload`` into ``(column, value)`` pairs.

    Objects recurse with their keys joined by `` - ``; arrays collapse into a
    single ``; ``-joined cell. Text input is parsed as JSON first; text that
    is not a JSON object yields a single ``Raw Data`` column holding it.
    """
    if isinstance(payload, (str, bytes)):
        original = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
        try:
            parsed = orjson.loads(payload)
        except orjson.JSONDecodeError:
            return [(RAW_DATA_KEY, original)]
        if not isinstance(parsed, dict):
            return [(RAW_DATA_KEY, original)]
        payload = parsed

    out: list[tuple[str, str]] = []
    if isinstance(payload, dict):
        for key, value in payload.items():
            column = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else str(key)
            _flatten_value(value, column, out)
    else:
        _flatten_value(payload, prefix, out)
    return out


def flatten_to_dict(payload: Any, prefix: str = "") -> dict[str, str]:
    """Same as :func:`flatten` but keyed; a repeated column keeps its last value."""
    return dict(flatten(payload, prefix))
