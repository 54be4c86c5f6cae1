import json
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core import config


def recipes_db() -> sqlite3.Connection:
    config.RECIPES_DB.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(config.RECIPES_DB))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    # 32 hex chars, no dashes: "-" separates batch id and index in prompt ids
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != 32:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


def dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def init_db() -> None:
    with recipes_db() as conn:
        conn.execute("""
        CREATE TABLE IF NOT EXISTS users (
          id TEXT PRIMARY KEY,
          name TEXT,
          email TEXT UNIQUE,
          image TEXT,
          created_at TEXT NOT NULL
        )
        """)

        conn.execute("""
        CREATE TABLE IF NOT EXISTS sessions (
          token TEXT PRIMARY KEY,
          user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
          created_at TEXT NOT NULL
        )
        """)

        # Catalog; name_key is the lowercase singular form and carries uniqueness
        conn.execute("""
        CREATE TABLE IF NOT EXISTS ingredients (
          id TEXT PRIMARY KEY,
          name TEXT NOT NULL,
          name_key TEXT NOT NULL UNIQUE,
          created_by TEXT REFERENCES users(id) ON DELETE SET NULL,
          created_at TEXT NOT NULL
        )
        """)

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recipes (
          id TEXT PRIMARY KEY,
          owner_id TEXT NOT NULL REFERENCES users(id),
          name TEXT NOT NULL,
          ingredients_json TEXT NOT NULL,
          instructions_json TEXT NOT NULL,
          dietary_json TEXT NOT NULL,
          additional_json TEXT NOT NULL,
          img_link TEXT NOT NULL,
          openai_prompt_id TEXT NOT NULL,
          created_at TEXT NOT NULL,
          updated_at TEXT NOT NULL
        )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_recipes_owner ON recipes(owner_id)")

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recipe_likes (
          recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
          user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
          created_at TEXT NOT NULL,
          PRIMARY KEY (recipe_id, user_id)
        )
        """)

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recipe_comments (
          id TEXT PRIMARY KEY,
          recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
          user_id TEXT REFERENCES users(id) ON DELETE SET NULL,
          comment TEXT NOT NULL,
          created_at TEXT NOT NULL
        )
        """)

        conn.execute("""
        CREATE TABLE IF NOT EXISTS recipe_tags (
          id TEXT PRIMARY KEY,
          recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
          tag TEXT NOT NULL
        )
        """)

        # Audit trail of every AI call; the per-user count drives the usage limit
        conn.execute("""
        CREATE TABLE IF NOT EXISTS ai_generated (
          id TEXT PRIMARY KEY,
          user_id TEXT NOT NULL,
          prompt TEXT NOT NULL,
          response_json TEXT NOT NULL,
          created_at TEXT NOT NULL
        )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_ai_generated_user ON ai_generated(user_id)")

        conn.commit()
