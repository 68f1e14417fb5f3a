"""
Audit trail scope only. Do not implement beyond this file's responsibilities.
Data access for review events with typed results.
"""

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Union

from util.logging import logger

from .db import get_db


@dataclass
class ReviewEvent:
    id: int
    ts: datetime
    session_id: str
    actor: str
    action: str
    payload: Dict[str, Any]


def add_event(session_id: str, actor: str, action: str, payload: Dict[str, Any]) -> Union[bool, Exception]:
    """Add a review event scoped to a session."""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO review_events (session_id, actor, action, payload) VALUES (?, ?, ?, ?)",
                (session_id, actor, action, json.dumps(payload, default=str))
            )
            conn.commit()
            return True
    except sqlite3.Error as e:
        logger.error(f"Database error during add_event operation for session '{session_id}': {e}")
        return e


def list_events(session_id: str, limit: int = 100) -> List[ReviewEvent]:
    """List recent events for a session, newest first."""
    if limit <= 0 or not session_id or not session_id.strip():
        return []

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            SELECT id, ts, session_id, actor, action, payload
            FROM review_events
            WHERE session_id = ?
            ORDER BY ts DESC, id DESC
            LIMIT ?
        ''', (session_id.strip(), limit))
        rows = cursor.fetchall()

    events = []
    for event_id, ts, sid, actor, action, payload in rows:
        try:
            parsed = json.loads(payload) if payload else {}
        except json.JSONDecodeError:
            parsed = {"raw": payload}
        events.append(ReviewEvent(
            id=event_id,
            ts=datetime.fromisoformat(ts) if isinstance(ts, str) else ts,
            session_id=sid,
            actor=actor,
            action=action,
            payload=parsed
        ))
    return events


def count_events(session_id: str) -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM review_events WHERE session_id = ?", (session_id,))
        return cursor.fetchone()[0]
