from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ..logs import search_logs

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    entity_type: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
):
    try:
        total, items = search_logs(query, action, ts_from, ts_to, page, size, entity_type=entity_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": total, "items": items}
