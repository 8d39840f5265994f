"""FastAPI application and uvicorn startup for the Redmine reporting API."""

from __future__ import annotations

import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import RedmineReportingError
from .logging_setup import setup_logging_from_env
from .updates import find_todays_updates
from .users import fetch_staff_profiles

logger = logging.getLogger(__name__)

app = FastAPI(title="Redmine Reporting", version="0.1.0")
# the dashboard frontend runs on its own dev server
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])


@app.exception_handler(RedmineReportingError)
async def _reporting_error(request: Request, exc: RedmineReportingError) -> JSONResponse:
    logger.error("Request failed: %s", exc, extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/issues")
async def issues(user_id: int, project_id: Optional[int] = None):
    settings = Settings.from_env()
    found = await find_todays_updates(settings, user_id, project_id)
    return [i.to_dict() for i in found]


@app.get("/api/users")
async def users():
    settings = Settings.from_env()
    profiles = await fetch_staff_profiles(settings)
    return [p.to_dict() for p in profiles]


def main() -> None:  # pragma: no cover
    setup_logging_from_env()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    logger.info("API server starting", extra={"host": host, "port": port})
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
