"""
Union Reports API - Main application entry point.

Run with: py -m uvicorn api.main:app --reload --port 8001
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import ALLOWED_ORIGINS, SOURCE_LABEL
from .middleware.logging import LoggingMiddleware
from .routers import (
    health,
    reports,
)

_log = logging.getLogger("union_reports")

app = FastAPI(
    title="Union Reports API",
    version="1.0",
    description="Read-only reporting over union members, executives, CBAs, assemblies and OSH incidents",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type"],
)
app.add_middleware(LoggingMiddleware)


# ---------- Routers ----------
app.include_router(health.router)
app.include_router(reports.router)

_log.info(f"Union Reports API reading from {SOURCE_LABEL}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
