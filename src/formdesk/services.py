"""Form and submission lifecycle on top of a storage backend."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from formdesk.errors import (
    FormNotFoundError,
    FormUnavailableError,
    SubmissionNotFoundError,
    ValidationFailedError,
)
from formdesk.protocols import Storage
from formdesk.utils import dumps_json, new_ulid, now_utc
from formdesk.validation import validate

logger = logging.getLogger(__name__)

NOT_PUBLISHED_MESSAGE = "Form is not published"
NOT_ACTIVE_MESSAGE = "Form is no longer accepting responses"


def get_form(storage: Storage, form_id: str) -> dict[str, Any]:
    form = storage.forms.get_form(form_id)
    if not form:
        raise FormNotFoundError(form_id)
    return form


def availability_error(form: Mapping[str, Any]) -> str | None:
    if not form.get("is_published"):
        return NOT_PUBLISHED_MESSAGE
    if not form.get("is_active", True):
        return NOT_ACTIVE_MESSAGE
    return None


def get_open_form(storage: Storage, form_id: str) -> dict[str, Any]:
    """Return a form that currently accepts submissions."""
    form = get_form(storage, form_id)
    reason = availability_error(form)
    if reason:
        raise FormUnavailableError(form_id, reason)
    return form


def create_form(storage: Storage, data: Mapping[str, Any]) -> dict[str, Any]:
    now = now_utc()
    form = storage.forms.create_form(
        {
            "id": new_ulid(),
            "title": data["title"],
            "description": data.get("description", ""),
            "owner_name": data.get("owner_name", ""),
            "fields": data["fields"],
            "is_published": False,
            "is_active": True,
            "published_at": None,
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info("Created form %s with %d fields", form["id"], len(form["fields"]))
    return form


def update_form(storage: Storage, form_id: str, updates: Mapping[str, Any]) -> dict[str, Any]:
    get_form(storage, form_id)
    changes = dict(updates)
    changes["updated_at"] = now_utc()
    form = storage.forms.update_form(form_id, changes)
    logger.info("Updated form %s", form_id)
    return form


def set_published(storage: Storage, form_id: str, is_published: bool) -> dict[str, Any]:
    get_form(storage, form_id)
    now = now_utc()
    form = storage.forms.update_form(
        form_id,
        {
            "is_published": is_published,
            "published_at": now if is_published else None,
            "updated_at": now,
        },
    )
    logger.info("Form %s %s", form_id, "published" if is_published else "unpublished")
    return form


def set_active(storage: Storage, form_id: str, is_active: bool) -> dict[str, Any]:
    get_form(storage, form_id)
    form = storage.forms.update_form(
        form_id, {"is_active": is_active, "updated_at": now_utc()}
    )
    logger.info("Form %s %s", form_id, "reactivated" if is_active else "archived")
    return form


def delete_form(storage: Storage, form_id: str) -> None:
    if not storage.forms.delete_form(form_id):
        raise FormNotFoundError(form_id)
    # Backends without foreign keys still have to drop the children.
    removed = storage.submissions.delete_for_form(form_id)
    logger.info("Deleted form %s", form_id)
    if removed:
        logger.debug("Removed %d orphaned submissions of form %s", removed, form_id)


def submit(
    storage: Storage,
    form_id: str,
    data: Mapping[str, Any],
    submitter_name: str | None = None,
) -> dict[str, Any]:
    """Validate ``data`` against the form's fields and store it once."""
    form = get_open_form(storage, form_id)
    errors = validate(form["fields"], data)
    if errors:
        raise ValidationFailedError(errors)
    submission = storage.submissions.create_submission(
        {
            "id": new_ulid(),
            "form_id": form_id,
            "submitter_name": submitter_name or None,
            "data": dumps_json(dict(data)),
            "created_at": now_utc(),
        }
    )
    logger.info("Stored submission %s for form %s", submission["id"], form_id)
    return submission


def delete_submission(storage: Storage, submission_id: str) -> None:
    if not storage.submissions.delete_submission(submission_id):
        raise SubmissionNotFoundError(submission_id)
    logger.info("Deleted submission %s", submission_id)


def form_titles(storage: Storage) -> dict[str, str]:
    return {form["id"]: form.get("title", "") for form in storage.forms.list_forms()}
