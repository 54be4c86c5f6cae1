# app/services/ai_log_repo.py
from __future__ import annotations

import logging
from typing import Any, Optional

from app.core import config
from app.services import common

log = logging.getLogger("recipe_bridge.ai_log")


def record(*, user_id: str, prompt: str, response: Any) -> Optional[str]:
    """
    Store one AI call. The row id doubles as the batch id of a generation.
    A failed write is logged and returns None; the AI result itself is still usable.
    """
    entry_id = common.new_id()
    try:
        with common.recipes_db() as conn:
            conn.execute(
                """
                INSERT INTO ai_generated (id, user_id, prompt, response_json, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entry_id, user_id, prompt, common.dumps(response), common.now_iso()),
            )
            conn.commit()
    except Exception:
        log.exception("ai_log_write_failed", extra={"user_id": user_id})
        return None
    return entry_id


def count_for_user(user_id: str) -> int:
    with common.recipes_db() as conn:
        row = conn.execute("SELECT COUNT(*) FROM ai_generated WHERE user_id = ?", (user_id,)).fetchone()
    return int(row[0])


def reached_limit(user_id: str) -> bool:
    return count_for_user(user_id) >= config.API_REQUEST_LIMIT
