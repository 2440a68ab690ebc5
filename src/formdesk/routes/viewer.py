from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from formdesk import services
from formdesk.schema import sanitize_form_output, sanitize_submission_output
from formdesk.viewer import (
    apply_query,
    dashboard_stats,
    forms_table,
    submissions_table,
    with_flattened_data,
)

router = APIRouter()


@router.get("/api/viewer/stats", tags=["api/viewer"])
async def viewer_stats(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    counts = storage.submissions.count_by_form()
    return JSONResponse(dashboard_stats(storage.forms.list_forms(), counts))


@router.get("/api/viewer/forms", tags=["api/viewer"])
async def viewer_forms(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    settings = request.app.state.settings
    counts = storage.submissions.count_by_form()
    forms = [
        sanitize_form_output(form, counts.get(form["id"], 0))
        for form in storage.forms.list_forms()
    ]
    table = forms_table(forms, page_size=settings.default_page_size)
    return JSONResponse(apply_query(table, request.query_params))


@router.get("/api/viewer/submissions", tags=["api/viewer"])
async def viewer_submissions(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    settings = request.app.state.settings
    titles = services.form_titles(storage)
    rows = [
        with_flattened_data(
            sanitize_submission_output(item, titles.get(item["form_id"], "")),
            item.get("data"),
        )
        for item in storage.submissions.list_submissions()
    ]
    table = submissions_table(rows, page_size=settings.default_page_size)
    return JSONResponse(apply_query(table, request.query_params))
