from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request


async def read_json(request: Request, default: Any = None) -> Any:
    """Decode the request body, treating an empty body as ``default``."""
    body = await request.body()
    if not body:
        if default is None:
            raise HTTPException(status_code=400, detail="Request body is required")
        return default
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON")


def require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload
