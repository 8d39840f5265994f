"""
AWS Lambda handler (API Gateway / Function URL event).

GET .../users                          -> staff profiles
GET ...?user_id=7[&project_id=3]       -> issues user 7 updated today
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any

from .config import Settings
from .updates import find_todays_updates
from .users import fetch_staff_profiles

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)
    root = logging.getLogger()
    if root.level and root.level > level:
        root.setLevel(level)


def _response(status: int, body: Any) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False),
    }


def _path(event: dict[str, Any]) -> str:
    return (event.get("rawPath") or event.get("path") or "").rstrip("/")


def _int_param(qs: dict[str, Any], name: str, default: int | None = None) -> int | None:
    raw = qs.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def handle_users() -> dict[str, Any]:
    settings = Settings.from_env()
    profiles = asyncio.run(fetch_staff_profiles(settings))
    return _response(200, [p.to_dict() for p in profiles])


def handle_issues(qs: dict[str, Any]) -> dict[str, Any]:
    try:
        user_id = _int_param(qs, "user_id", default=0)
        project_id = _int_param(qs, "project_id")
    except ValueError as e:
        return _response(400, {"error": str(e)})

    settings = Settings.from_env()
    issues = asyncio.run(find_todays_updates(settings, user_id, project_id))
    return _response(200, [i.to_dict() for i in issues])


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    _configure_logging()
    event = event or {}
    qs = event.get("queryStringParameters") or {}
    try:
        if _path(event).endswith("/users"):
            return handle_users()
        return handle_issues(qs)
    except Exception as e:
        logger.exception("Request failed", extra={"path": _path(event)})
        return _response(500, {"error": str(e)})
