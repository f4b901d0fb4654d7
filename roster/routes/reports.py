from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ..domain.errors import MaterializeError
from ..logs import LogContext
from ..services.report_svc import REPORTS, list_reports, run_report
from ..services.schema_svc import init_db

router = APIRouter()


@router.get("/api/reports")
def api_reports():
    return {"items": list_reports()}


@router.get("/api/reports/{name}")
def api_report(name: str, strict: Optional[bool] = Query(None)):
    if name not in REPORTS:
        raise HTTPException(status_code=404, detail="report_not_found")
    log = LogContext("REPORT_RUN")
    log.set_payload({"name": name, "strict": strict})
    try:
        out = run_report(name, strict, log)
        log.write("OK")
        return out
    except MaterializeError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=422, detail=str(e))


class InitBody(BaseModel):
    reset: bool = False
    seeds_dir: str | None = None


@router.post("/api/admin/init")
def api_admin_init(body: InitBody):
    log = LogContext("INIT_DB")
    log.set_payload(body.model_dump())
    try:
        res = init_db(log, seeds_dir=body.seeds_dir, reset=body.reset)
        log.write("OK")
        return {"message": "ok", **res}
    except (OSError, ValueError) as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=400, detail=str(e))
