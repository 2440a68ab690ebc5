from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from formdesk.builder import SessionRegistry
from formdesk.config import BASE_DIR, Settings
from formdesk.errors import (
    FormNotFoundError,
    FormUnavailableError,
    InvalidFormError,
    PersistenceError,
    SubmissionNotFoundError,
    ValidationFailedError,
)
from formdesk.renderer import render_field
from formdesk.routes.api import router as api_router
from formdesk.routes.builder import router as builder_router
from formdesk.routes.export import router as export_router
from formdesk.routes.public import router as public_router
from formdesk.routes.viewer import router as viewer_router
from formdesk.storage import init_storage

logger = logging.getLogger(__name__)


def format_dt(value: Any) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone().strftime("%Y-%m-%d %H:%M")
    return str(value or "")


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FormNotFoundError)
    async def form_not_found(request: Request, exc: FormNotFoundError) -> JSONResponse:
        return JSONResponse({"detail": "Form not found"}, status_code=404)

    @app.exception_handler(SubmissionNotFoundError)
    async def submission_not_found(
        request: Request, exc: SubmissionNotFoundError
    ) -> JSONResponse:
        return JSONResponse({"detail": "Submission not found"}, status_code=404)

    @app.exception_handler(FormUnavailableError)
    async def form_unavailable(request: Request, exc: FormUnavailableError) -> JSONResponse:
        return JSONResponse({"detail": exc.reason}, status_code=400)

    @app.exception_handler(ValidationFailedError)
    async def validation_failed(request: Request, exc: ValidationFailedError) -> JSONResponse:
        return JSONResponse(
            {"detail": "Validation failed", "errors": exc.errors}, status_code=400
        )

    @app.exception_handler(InvalidFormError)
    async def invalid_form(request: Request, exc: InvalidFormError) -> JSONResponse:
        return JSONResponse({"detail": str(exc), "errors": exc.messages}, status_code=400)

    @app.exception_handler(PersistenceError)
    async def persistence_failed(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=500)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    storage = init_storage(settings)

    app = FastAPI(
        title="formdesk",
        openapi_tags=[
            {"name": "public", "description": "Published forms (HTML)"},
            {"name": "api/forms", "description": "REST API: forms"},
            {"name": "api/submissions", "description": "REST API: submissions"},
            {"name": "api/builder", "description": "REST API: builder sessions"},
            {"name": "api/viewer", "description": "REST API: database viewer"},
            {"name": "api/export", "description": "CSV export"},
            {"name": "system", "description": "System"},
        ],
    )

    app.state.storage = storage
    app.state.settings = settings
    app.state.sessions = SessionRegistry(
        storage,
        max_sessions=settings.builder_max_sessions,
        ttl_seconds=settings.builder_session_ttl,
    )

    templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
    templates.env.globals["render_field"] = render_field
    templates.env.globals["format_dt"] = format_dt
    app.state.templates = templates

    _register_error_handlers(app)

    app.include_router(public_router)
    app.include_router(api_router)
    app.include_router(builder_router)
    app.include_router(viewer_router)
    app.include_router(export_router)

    return app
