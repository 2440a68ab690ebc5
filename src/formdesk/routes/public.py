from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from formdesk import services
from formdesk.errors import FormNotFoundError, FormUnavailableError, ValidationFailedError
from formdesk.renderer import collect_values

router = APIRouter()
logger = logging.getLogger(__name__)

FORM_MISSING_MESSAGE = "This form does not exist"


def _unavailable(request: Request, message: str, status_code: int) -> HTMLResponse:
    return request.app.state.templates.TemplateResponse(
        request,
        "unavailable.html",
        {"message": message},
        status_code=status_code,
    )


def _form_page(
    request: Request,
    form: dict[str, Any],
    values: dict[str, Any] | None = None,
    errors: dict[str, str] | None = None,
    submitter_name: str = "",
    status_code: int = 200,
) -> HTMLResponse:
    return request.app.state.templates.TemplateResponse(
        request,
        "form_public.html",
        {
            "form": form,
            "fields": form.get("fields", []),
            "values": values or {},
            "errors": errors or {},
            "submitter_name": submitter_name,
            "disabled": False,
        },
        status_code=status_code,
    )


@router.get("/f/{form_id}", response_class=HTMLResponse, tags=["public"])
async def public_form(request: Request, form_id: str) -> HTMLResponse:
    storage = request.app.state.storage
    try:
        form = services.get_open_form(storage, form_id)
    except FormNotFoundError:
        return _unavailable(request, FORM_MISSING_MESSAGE, 404)
    except FormUnavailableError as exc:
        return _unavailable(request, exc.reason, 403)
    return _form_page(request, form)


@router.post("/f/{form_id}", response_class=HTMLResponse, tags=["public"])
async def submit_form(request: Request, form_id: str) -> HTMLResponse:
    storage = request.app.state.storage
    try:
        form = services.get_open_form(storage, form_id)
    except FormNotFoundError:
        return _unavailable(request, FORM_MISSING_MESSAGE, 404)
    except FormUnavailableError as exc:
        return _unavailable(request, exc.reason, 403)

    form_data = await request.form()
    values = collect_values(form["fields"], form_data)
    submitter_name = str(form_data.get("submitter_name") or "").strip()
    try:
        submission = services.submit(storage, form_id, values, submitter_name or None)
    except ValidationFailedError as exc:
        logger.debug("Rejected submission for form %s: %s", form_id, exc.errors)
        return _form_page(request, form, values, exc.errors, submitter_name, 400)

    return request.app.state.templates.TemplateResponse(
        request,
        "form_submitted.html",
        {"form": form, "submission": submission},
    )
