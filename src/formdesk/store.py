from __future__ import annotations

from typing import Any, Mapping, Sequence

from formdesk.reorder import reorder
from formdesk.taxonomy import default_field

DEFAULT_TITLE = "Untitled Form"
METADATA_KEYS = ("title", "description", "owner_name")


def default_metadata() -> dict[str, str]:
    return {"title": DEFAULT_TITLE, "description": "", "owner_name": ""}


class FormValueStore:
    """State behind one builder or preview session.

    Holds the form metadata, the ordered field list, the values typed into
    the preview, the validation errors and the submit lifecycle flags. Each
    method replaces the collections it touches in one assignment, so callers
    never see a field id in ``values`` or ``errors`` that is missing from
    ``fields``.
    """

    def __init__(
        self,
        metadata: Mapping[str, Any] | None = None,
        fields: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        self.metadata = default_metadata()
        if metadata:
            self.update_metadata(metadata)
        self.fields: list[dict[str, Any]] = [dict(field) for field in fields or []]
        self.values: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.is_submitting = False
        self.is_submitted = False
        self.submit_error: str | None = None

    @property
    def field_ids(self) -> list[str]:
        return [field["id"] for field in self.fields]

    def get_field(self, field_id: str) -> dict[str, Any] | None:
        for field in self.fields:
            if field["id"] == field_id:
                return field
        return None

    def update_metadata(self, updates: Mapping[str, Any]) -> dict[str, str]:
        merged = dict(self.metadata)
        for key in METADATA_KEYS:
            if key in updates:
                merged[key] = "" if updates[key] is None else str(updates[key])
        self.metadata = merged
        return merged

    def add_field(self, field_type: str) -> dict[str, Any]:
        field = default_field(field_type, self.field_ids)
        self.fields = [*self.fields, field]
        return field

    def update_field(self, field_id: str, updates: Mapping[str, Any]) -> dict[str, Any] | None:
        changes = {key: value for key, value in updates.items() if key != "id"}
        updated: dict[str, Any] | None = None
        fields: list[dict[str, Any]] = []
        for field in self.fields:
            if field["id"] == field_id:
                updated = {**field, **changes}
                fields.append(updated)
            else:
                fields.append(field)
        self.fields = fields
        return updated

    def delete_field(self, field_id: str) -> bool:
        if self.get_field(field_id) is None:
            return False
        fields = [field for field in self.fields if field["id"] != field_id]
        values = {key: value for key, value in self.values.items() if key != field_id}
        errors = {key: value for key, value in self.errors.items() if key != field_id}
        self.fields, self.values, self.errors = fields, values, errors
        return True

    def reorder_fields(self, new_order: Sequence[Mapping[str, Any]]) -> None:
        """Replace the field sequence with a permutation of the current one."""
        current = {field["id"]: field for field in self.fields}
        ids = [field["id"] for field in new_order]
        if len(ids) != len(current) or set(ids) != set(current):
            raise ValueError("New order must contain exactly the current fields")
        self.fields = [current[field_id] for field_id in ids]

    def move_field(self, source_id: str, target_id: str) -> list[dict[str, Any]]:
        self.fields = reorder(self.fields, source_id, target_id)
        return self.fields

    def update_value(self, field_id: str, value: Any) -> None:
        if self.get_field(field_id) is None:
            raise KeyError(field_id)
        self.values = {**self.values, field_id: value}
        # Editing a field dismisses its stale error.
        if field_id in self.errors:
            self.clear_error(field_id)

    def set_errors(self, errors: Mapping[str, str]) -> None:
        known = set(self.field_ids)
        self.errors = {key: value for key, value in errors.items() if key in known}

    def clear_error(self, field_id: str | None = None) -> None:
        if field_id is None:
            self.errors = {}
        else:
            self.errors = {key: value for key, value in self.errors.items() if key != field_id}

    def reset_all(self) -> None:
        self.fields = []
        self.values = {}
        self.errors = {}
        self.is_submitting = False
        self.is_submitted = False
        self.submit_error = None

    def reset_values_only(self) -> None:
        self.values = {}
        self.errors = {}
        self.is_submitted = False
        self.submit_error = None

    def materialized_fields(self) -> list[dict[str, Any]]:
        """Fields as persisted: dense ``order`` values following list position."""
        return [{**field, "order": index} for index, field in enumerate(self.fields)]

    def to_payload(self) -> dict[str, Any]:
        return {**self.metadata, "fields": self.materialized_fields()}

    def snapshot(self) -> dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "fields": [dict(field) for field in self.fields],
            "values": dict(self.values),
            "errors": dict(self.errors),
            "is_submitting": self.is_submitting,
            "is_submitted": self.is_submitted,
            "submit_error": self.submit_error,
        }
