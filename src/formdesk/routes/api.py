from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from formdesk import services
from formdesk.routes.common import read_json, require_object
from formdesk.schema import (
    parse_flag_payload,
    parse_form_payload,
    parse_submission_payload,
    sanitize_form_output,
    sanitize_submission_output,
)

router = APIRouter()


@router.get("/api/forms", tags=["api/forms"])
async def api_list_forms(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    counts = storage.submissions.count_by_form()
    forms = storage.forms.list_forms()
    return JSONResponse(
        [sanitize_form_output(form, counts.get(form["id"], 0)) for form in forms]
    )


@router.post("/api/forms", tags=["api/forms"])
async def api_create_form(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    payload = require_object(await read_json(request))
    data, errors = parse_form_payload(payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    form = services.create_form(storage, data)
    return JSONResponse(sanitize_form_output(form, 0), status_code=201)


@router.get("/api/forms/{form_id}", tags=["api/forms"])
async def api_get_form(form_id: str, request: Request) -> JSONResponse:
    form = services.get_form(request.app.state.storage, form_id)
    return JSONResponse(sanitize_form_output(form))


@router.put("/api/forms/{form_id}", tags=["api/forms"])
async def api_update_form(form_id: str, request: Request) -> JSONResponse:
    storage = request.app.state.storage
    payload = require_object(await read_json(request))
    data, errors = parse_form_payload(payload, partial=True)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    form = services.update_form(storage, form_id, data)
    return JSONResponse(sanitize_form_output(form))


@router.delete("/api/forms/{form_id}", tags=["api/forms"])
async def api_delete_form(form_id: str, request: Request) -> JSONResponse:
    services.delete_form(request.app.state.storage, form_id)
    return JSONResponse({"message": "Form deleted successfully"})


@router.post("/api/forms/{form_id}/publish", tags=["api/forms"])
async def api_publish_form(form_id: str, request: Request) -> JSONResponse:
    payload = require_object(await read_json(request, default={}))
    is_published, errors = parse_flag_payload(payload, "is_published", True)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    form = services.set_published(request.app.state.storage, form_id, is_published)
    return JSONResponse(sanitize_form_output(form))


@router.post("/api/forms/{form_id}/archive", tags=["api/forms"])
async def api_archive_form(form_id: str, request: Request) -> JSONResponse:
    payload = require_object(await read_json(request, default={}))
    is_active, errors = parse_flag_payload(payload, "is_active", False)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    form = services.set_active(request.app.state.storage, form_id, is_active)
    return JSONResponse(sanitize_form_output(form))


@router.get("/api/forms/{form_id}/submissions", tags=["api/submissions"])
async def api_list_form_submissions(form_id: str, request: Request) -> JSONResponse:
    storage = request.app.state.storage
    form = services.get_form(storage, form_id)
    submissions = storage.submissions.list_submissions(form_id)
    return JSONResponse(
        [sanitize_submission_output(item, form.get("title", "")) for item in submissions]
    )


@router.post("/api/forms/{form_id}/submissions", tags=["api/submissions"])
async def api_submit_form(form_id: str, request: Request) -> JSONResponse:
    storage = request.app.state.storage
    # Unknown and closed forms are reported before the body is looked at.
    services.get_open_form(storage, form_id)
    payload = require_object(await read_json(request))
    data, errors = parse_submission_payload(payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    submission = services.submit(storage, form_id, data["data"], data["submitter_name"])
    return JSONResponse(sanitize_submission_output(submission), status_code=201)


@router.get("/api/submissions", tags=["api/submissions"])
async def api_list_submissions(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    titles = services.form_titles(storage)
    submissions = storage.submissions.list_submissions()
    return JSONResponse(
        [
            sanitize_submission_output(item, titles.get(item["form_id"], ""))
            for item in submissions
        ]
    )


@router.delete("/api/submissions/{submission_id}", tags=["api/submissions"])
async def api_delete_submission(submission_id: str, request: Request) -> JSONResponse:
    services.delete_submission(request.app.state.storage, submission_id)
    return JSONResponse({"message": "Submission deleted successfully"})


@router.get("/healthz", tags=["system"])
async def healthz() -> dict[str, Any]:
    return {"status": "ok"}
