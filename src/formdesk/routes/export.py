from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from formdesk.csv_export import to_csv
from formdesk.export import ExportRequestError, build_export

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/export", tags=["api/export"])
async def export_csv(request: Request) -> PlainTextResponse:
    storage = request.app.state.storage
    params = request.query_params
    try:
        filename, rows = build_export(
            storage,
            params.get("type"),
            params.get("format"),
            params.get("form_id") or params.get("formId"),
        )
    except ExportRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if not rows:
        raise HTTPException(status_code=404, detail="No data to export")

    header_mode = "union" if params.get("header") == "union" else "first_row"
    content = to_csv(rows, bom=True, header_mode=header_mode)
    logger.info("Exported %d rows as %s.csv", len(rows), filename)
    return PlainTextResponse(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
    )
