# mealfinder/events.py
"""
Event logging for the meal finder.

Every user-facing action (search, recipe view, favorite save, registration)
is recorded as one event: {ts, event, session_id, payload}. Events always go
to a JSONL file and, when DATABASE_URL is set, also to the events table.

Recording is best effort. A failing sink is logged and skipped; callers are
never interrupted by analytics.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from .db import db_is_enabled, db_log_event

logger = logging.getLogger(__name__)

# JSONL file with one event per line
EVENT_LOG_FILE = Path(os.getenv("EVENT_LOG_FILE", "events.log"))


def _append_jsonl(record: Dict[str, Any]) -> None:
    line = json.dumps(record, ensure_ascii=False, default=str)
    try:
        EVENT_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with EVENT_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as exc:
        logger.warning("Could not append event %s to %s: %s", record["event"], EVENT_LOG_FILE, exc)


def log_event(event: str, session_id: Optional[str], payload: Optional[Dict[str, Any]] = None) -> None:
    """Record one event in the events table (if enabled) and the JSONL log."""
    payload = dict(payload or {})

    if db_is_enabled():
        try:
            db_log_event(event_type=event, session_id=session_id, payload=payload)
        except SQLAlchemyError as exc:
            logger.warning("Event %s not stored in database: %s", event, exc)

    _append_jsonl({
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "session_id": session_id,
        "payload": payload,
    })


# ---------------------------------------------------------------------------
# Helper functions for common event types
# ---------------------------------------------------------------------------

def log_search_performed(
    session_id: Optional[str],
    query: str,
    result_count: int,
    sources_status: Dict[str, str],
) -> None:
    """
    Log a search_performed event.

    payload:
    {
        "query": "...",
        "result_count": 12,
        "sources_status": {"name": "ok", "ingredient": "ok"}
    }
    """
    log_event(
        "search_performed",
        session_id=session_id,
        payload={
            "query": query,
            "result_count": int(result_count),
            "sources_status": dict(sources_status),
        },
    )


def log_recipe_viewed(session_id: Optional[str], recipe_id: str, found: bool) -> None:
    log_event(
        "recipe_viewed",
        session_id=session_id,
        payload={"recipe_id": recipe_id, "found": bool(found)},
    )


def log_favorite_saved(session_id: Optional[str], recipe_id: str, status: str) -> None:
    """Log a favorite_saved event; status is "saved", "already_saved" or "error"."""
    log_event(
        "favorite_saved",
        session_id=session_id,
        payload={"recipe_id": recipe_id, "status": status},
    )


def log_user_registered(session_id: Optional[str], username: str) -> None:
    log_event(
        "user_registered",
        session_id=session_id,
        payload={"username": username},
    )
