from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from .core.gametree import TreeStructureError
from .services.layout_service import LayoutService


router = APIRouter()
logger = logging.getLogger(__name__)


def _layout_service(request: Request) -> LayoutService:
    return request.app.state.layout


async def _read_json_object(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="body must be JSON") from None
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="body must be a JSON object")
    return data


@router.get("/healthz")
async def healthz(request: Request):
    return {"ok": True, "settings": _layout_service(request).status_wire()}


@router.post("/api/layout")
async def layout_tree(request: Request, format: str = Query(default="json")):
    data = await _read_json_object(request)
    fmt = (format or "json").lower()
    if fmt not in {"json", "text"}:
        raise HTTPException(status_code=400, detail="format must be json|text")
    try:
        result = _layout_service(request).layout(data)
    except TreeStructureError as exc:
        logger.warning("rejected tree: %s", exc)
        raise HTTPException(status_code=400, detail=f"Invalid tree: {exc}") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if fmt == "text":
        return PlainTextResponse(result.transcript() + "\n", media_type="text/plain; charset=utf-8")
    return result.to_wire()
