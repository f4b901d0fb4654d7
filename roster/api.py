"""
FastAPI app entry point aggregating the routers under roster/routes.
Run with `uvicorn roster.api:app`.
"""
from __future__ import annotations


from fastapi import FastAPI

from .services.schema_svc import ensure_schema


app = FastAPI(title="classroom-roster-api", version="0.1.0")


@app.on_event("startup")
def on_startup():
    ensure_schema()


from .routes import base as base_routes
from .routes import reports as reports_routes
from .routes import settings as settings_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(reports_routes.router)
app.include_router(settings_routes.router)
app.include_router(logs_routes.router)
