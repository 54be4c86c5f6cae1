# app/services/health.py
from __future__ import annotations

import sqlite3
import time
from typing import Any, Dict, Optional

from app.clients.ollama import ollama
from app.core import config


def _ms_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _check_result(status: str, latency_ms: int, error: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"status": status, "latency_ms": latency_ms}
    if error:
        out["error"] = error
    return out


def check_db() -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        conn = sqlite3.connect(str(config.RECIPES_DB), timeout=2)
        try:
            conn.execute("SELECT 1 FROM recipes LIMIT 1;")
        finally:
            conn.close()
        return _check_result("ok", _ms_since(start))
    except Exception as e:
        return _check_result("fail", _ms_since(start), str(e))


async def check_ollama() -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        await ollama.ping()
        return _check_result("ok", _ms_since(start))
    except Exception as e:
        # degraded: browsing and likes still work, generation and validation don't
        return _check_result("degraded", _ms_since(start), str(e))


def version_payload() -> Dict[str, Any]:
    return {
        "version": config.APP_VERSION,
        "git_sha": config.GIT_SHA,
        "build_date": config.BUILD_DATE,
    }


def check_media() -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        config.MEDIA_DIR.mkdir(parents=True, exist_ok=True)
        marker = config.MEDIA_DIR / ".writable"
        marker.write_bytes(b"")
        marker.unlink()
        return _check_result("ok", _ms_since(start))
    except OSError as e:
        # saved recipes fall back to FALLBACK_IMAGE
        return _check_result("degraded", _ms_since(start), str(e))
