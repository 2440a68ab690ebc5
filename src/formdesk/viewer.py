from __future__ import annotations

from typing import Any, Mapping

from formdesk.flatten import flatten
from formdesk.table import TableController


def _status_matches(item: dict[str, Any], status: str) -> bool:
    if status == "published":
        return bool(item.get("is_published"))
    if status == "draft":
        return not item.get("is_published")
    if status == "archived":
        return not item.get("is_active", True)
    return True


def forms_table(forms: list[dict[str, Any]], page_size: int = 10) -> TableController:
    return TableController(
        forms,
        search_fields=["title", "description", "owner_name"],
        filter_fields={"status": _status_matches},
        sort_fields={
            "title": "title",
            "owner_name": "owner_name",
            "submissions": "submission_count",
            "created_at": "created_at",
        },
        page_size=page_size,
        sort_by="created_at",
        sort_order="desc",
    )


def submissions_table(
    submissions: list[dict[str, Any]], page_size: int = 10
) -> TableController:
    return TableController(
        submissions,
        search_fields=["form_title", "submitter_name", "id"],
        filter_fields={"form_id": "form_id"},
        sort_fields={
            "form_title": "form_title",
            "submitter_name": "submitter_name",
            "created_at": "created_at",
        },
        page_size=page_size,
        sort_by="created_at",
        sort_order="desc",
    )


def with_flattened_data(submission: dict[str, Any], raw_data: Any) -> dict[str, Any]:
    columns = [{"key": key, "value": value} for key, value in flatten(raw_data or "")]
    return {**submission, "columns": columns}


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def apply_query(table: TableController, params: Mapping[str, Any]) -> dict[str, Any]:
    """Apply viewer query parameters in the order a user would set them."""
    if "page_size" in params:
        table.set_page_size(_to_int(params.get("page_size"), table.page_size))
    sort = str(params.get("sort") or "")
    if sort in table.sortable:
        table.set_sort(sort, str(params.get("order") or "asc"))
    for name in table.filterable:
        if params.get(name):
            table.set_filter(name, str(params[name]))
    table.set_search(params.get("q"))
    table.set_page(_to_int(params.get("page"), 1))
    return table.snapshot()


def dashboard_stats(forms: list[dict[str, Any]], counts: Mapping[str, int]) -> dict[str, int]:
    """Headline numbers for the dashboard: form totals by status and submissions."""
    published = sum(1 for form in forms if form.get("is_published"))
    return {
        "total_forms": len(forms),
        "published_forms": published,
        "draft_forms": len(forms) - published,
        "total_submissions": sum(counts.get(form["id"], 0) for form in forms),
    }
