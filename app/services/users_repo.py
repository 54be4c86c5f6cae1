# app/services/users_repo.py
from __future__ import annotations

import secrets
from typing import Optional

from app.models.recipe import UserRecord
from app.services import common


def _row_to_user(row) -> UserRecord:
    return UserRecord(_id=row["id"], name=row["name"], email=row["email"], image=row["image"], created_at=row["created_at"])


def upsert_user(*, name: Optional[str], email: str, image: Optional[str] = None) -> UserRecord:
    """Called by whatever sits in front as identity provider; email is the stable key."""
    with common.recipes_db() as conn:
        row = conn.execute("SELECT id FROM users WHERE email = ?", (email.strip().lower(),)).fetchone()
        if row:
            conn.execute(
                "UPDATE users SET name = ?, image = ? WHERE id = ?",
                (name, image, row["id"]),
            )
            user_id = row["id"]
        else:
            user_id = common.new_id()
            conn.execute(
                "INSERT INTO users (id, name, email, image, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, name, email.strip().lower(), image, common.now_iso()),
            )
        conn.commit()
        out = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return _row_to_user(out)


def create_session(user_id: str) -> str:
    token = secrets.token_urlsafe(32)
    with common.recipes_db() as conn:
        conn.execute(
            "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
            (token, user_id, common.now_iso()),
        )
        conn.commit()
    return token


def user_for_token(token: str) -> Optional[UserRecord]:
    with common.recipes_db() as conn:
        row = conn.execute(
            """
            SELECT u.* FROM sessions s
            JOIN users u ON u.id = s.user_id
            WHERE s.token = ?
            """,
            (token,),
        ).fetchone()
    return _row_to_user(row) if row else None


def delete_session(token: str) -> None:
    with common.recipes_db() as conn:
        conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
        conn.commit()
