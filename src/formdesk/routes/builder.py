from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from formdesk.builder import BuilderSession
from formdesk.renderer import FieldEvent, render_field
from formdesk.routes.common import read_json, require_object
from formdesk.schema import (
    parse_field_update,
    parse_flag_payload,
    parse_metadata_payload,
    parse_session_payload,
    sanitize_form_output,
)
from formdesk.taxonomy import coerce_field_type
from formdesk.validation import validate

router = APIRouter(prefix="/api/builder/sessions", tags=["api/builder"])


def get_session(request: Request, session_id: str) -> BuilderSession:
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Builder session not found")
    return session


def get_session_field(session: BuilderSession, field_id: str) -> dict[str, Any]:
    field = session.store.get_field(field_id)
    if field is None:
        raise HTTPException(status_code=404, detail="Field not found")
    return field


@router.post("")
async def create_session(request: Request) -> JSONResponse:
    payload = require_object(await read_json(request, default={}))
    data, errors = parse_session_payload(payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    session = request.app.state.sessions.create(data["form_id"], data["metadata"])
    return JSONResponse(session.snapshot(), status_code=201)


@router.get("/{session_id}")
async def read_session(session_id: str, request: Request) -> JSONResponse:
    return JSONResponse(get_session(request, session_id).snapshot())


@router.delete("/{session_id}")
async def close_session(session_id: str, request: Request) -> JSONResponse:
    get_session(request, session_id)
    request.app.state.sessions.close(session_id)
    return JSONResponse({"message": "Session closed"})


@router.patch("/{session_id}/metadata")
async def update_metadata(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    metadata, errors = parse_metadata_payload(require_object(await read_json(request)))
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    session.store.update_metadata(metadata)
    return JSONResponse(session.snapshot())


@router.post("/{session_id}/fields")
async def add_field(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    payload = require_object(await read_json(request))
    field_type = coerce_field_type(payload.get("type"))
    if field_type is None:
        raise HTTPException(status_code=400, detail="Unknown field type")
    field = session.store.add_field(field_type.value)
    return JSONResponse(field, status_code=201)


@router.patch("/{session_id}/fields/{field_id}")
async def update_field(session_id: str, field_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    get_session_field(session, field_id)
    updates, errors = parse_field_update(require_object(await read_json(request)))
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    field = session.store.update_field(field_id, updates)
    return JSONResponse(field)


@router.delete("/{session_id}/fields/{field_id}")
async def delete_field(session_id: str, field_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    session.store.delete_field(field_id)
    return JSONResponse(session.snapshot())


@router.post("/{session_id}/reorder")
async def reorder_fields(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    payload = require_object(await read_json(request))
    if "order" in payload:
        order = payload["order"]
        if not isinstance(order, list):
            raise HTTPException(status_code=400, detail="order must be a list of field ids")
        try:
            session.store.reorder_fields([{"id": field_id} for field_id in order])
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    else:
        session.store.move_field(
            str(payload.get("source_id", "")), str(payload.get("target_id", ""))
        )
    return JSONResponse(session.snapshot())


@router.put("/{session_id}/values/{field_id}")
async def update_value(session_id: str, field_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    field = get_session_field(session, field_id)
    payload = require_object(await read_json(request))
    store = session.store
    rendered = render_field(field, store.values.get(field_id), on_change=store.update_value)
    rendered.handle(FieldEvent(payload.get("value"), payload.get("checked")))
    return JSONResponse(session.snapshot())


@router.get("/{session_id}/preview", response_class=HTMLResponse)
async def preview(session_id: str, request: Request) -> HTMLResponse:
    session = get_session(request, session_id)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "form_preview.html",
        {
            "metadata": session.store.metadata,
            "fields": session.store.fields,
            "values": session.store.values,
            "errors": session.store.errors,
            "disabled": request.query_params.get("disabled") == "1",
        },
    )


@router.post("/{session_id}/validate")
async def validate_session(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    errors = validate(session.store.fields, session.store.values)
    session.store.set_errors(errors)
    return JSONResponse({"valid": not errors, "errors": errors})


@router.post("/{session_id}/save")
async def save_session(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    session.save()
    return JSONResponse(session.snapshot())


@router.post("/{session_id}/publish")
async def publish_session(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    payload = require_object(await read_json(request, default={}))
    is_published, errors = parse_flag_payload(payload, "is_published", True)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    form = session.publish(is_published)
    return JSONResponse({"form": sanitize_form_output(form), "session": session.snapshot()})


@router.post("/{session_id}/submit")
async def submit_session(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    payload = require_object(await read_json(request, default={}))
    accepted = session.submit(payload.get("submitter_name"))
    return JSONResponse(
        {"accepted": accepted, **session.snapshot()},
        status_code=201 if accepted else 400,
    )


@router.post("/{session_id}/reset")
async def reset_session(session_id: str, request: Request) -> JSONResponse:
    session = get_session(request, session_id)
    payload = require_object(await read_json(request, default={}))
    if payload.get("scope") == "all":
        session.store.reset_all()
    else:
        session.store.reset_values_only()
    return JSONResponse(session.snapshot())
