from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from formdesk.flatten import flatten
from formdesk.protocols import Storage

ANONYMOUS = "Anonymous"


class ExportRequestError(ValueError):
    pass


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: datetime | None) -> str:
    value = _as_utc(value)
    return value.strftime("%Y-%m-%d") if value else ""


def format_time(value: datetime | None) -> str:
    value = _as_utc(value)
    return value.strftime("%H:%M:%S") if value else ""


def format_datetime(value: datetime | None) -> str:
    value = _as_utc(value)
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


def form_overview_row(form: dict[str, Any], submission_count: int) -> dict[str, Any]:
    return {
        "Form ID": form["id"],
        "Title": form.get("title", ""),
        "Description": form.get("description") or "",
        "Creator": form.get("owner_name", ""),
        "Status": "Published" if form.get("is_published") else "Draft",
        "Active": "Yes" if form.get("is_active", True) else "No",
        "Created Date": format_date(form.get("created_at")),
        "Updated Date": format_date(form.get("updated_at")),
        "Published Date": format_date(form.get("published_at")),
        "Total Submissions": submission_count,
        "Fields Count": len(form.get("fields") or []),
    }


def form_detailed_row(form: dict[str, Any], submission_count: int) -> dict[str, Any]:
    row = form_overview_row(form, submission_count)
    for index, field in enumerate(form.get("fields") or [], start=1):
        prefix = f"Field {index}"
        row[f"{prefix} - Label"] = field.get("label", "")
        row[f"{prefix} - Type"] = field.get("type", "")
        row[f"{prefix} - Required"] = "Yes" if field.get("required") else "No"
        row[f"{prefix} - Order"] = field.get("order", index - 1)
        if field.get("placeholder"):
            row[f"{prefix} - Placeholder"] = field["placeholder"]
        if field.get("options"):
            row[f"{prefix} - Options"] = field["options"]
    return row


def submission_row(submission: dict[str, Any], form_title: str) -> dict[str, Any]:
    created_at = submission.get("created_at")
    row: dict[str, Any] = {
        "Submission ID": submission["id"],
        "Form Title": form_title,
        "Form ID": submission["form_id"],
        "User Name": submission.get("submitter_name") or ANONYMOUS,
        "Submission Date": format_date(created_at),
        "Submission Time": format_time(created_at),
        "Submission DateTime": format_datetime(created_at),
    }
    row.update(flatten(submission.get("data") or ""))
    return row


def build_export(
    storage: Storage,
    export_type: str | None,
    export_format: str | None,
    form_id: str | None = None,
    today: date | None = None,
) -> tuple[str, list[dict[str, Any]]]:
    """Collect the rows for one export and the download's base filename."""
    stamp = (today or datetime.now(timezone.utc).date()).isoformat()

    if export_type == "forms":
        forms = storage.forms.list_forms()
        counts = storage.submissions.count_by_form()
        if export_format == "overview":
            rows = [form_overview_row(form, counts.get(form["id"], 0)) for form in forms]
            return f"forms-overview-{stamp}", rows
        rows = [form_detailed_row(form, counts.get(form["id"], 0)) for form in forms]
        return f"forms-detailed-{stamp}", rows

    if export_type == "submissions":
        titles = {form["id"]: form.get("title", "") for form in storage.forms.list_forms()}
        if export_format == "form" and form_id:
            submissions = storage.submissions.list_submissions(form_id)
            name = f"form-submissions-{form_id}-{stamp}"
        else:
            submissions = storage.submissions.list_submissions()
            name = f"all-submissions-{stamp}"
        rows = [
            submission_row(submission, titles.get(submission["form_id"], ""))
            for submission in submissions
        ]
        return name, rows

    raise ExportRequestError('Invalid export type. Use "forms" or "submissions"')
