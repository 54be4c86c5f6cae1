# app/services/recipes_repo.py
from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from app.core.errors import PersistenceFailure
from app.models.recipe import Comment, GeneratedRecipe, RecipeRecord, Tag, UserRecord, UserRef
from app.services import common

log = logging.getLogger("recipe_bridge.recipes_repo")


def _users_by_id(conn: sqlite3.Connection, ids: set[str]) -> Dict[str, UserRecord]:
    if not ids:
        return {}
    marks = ",".join("?" for _ in ids)
    rows = conn.execute(f"SELECT * FROM users WHERE id IN ({marks})", tuple(ids)).fetchall()
    return {
        r["id"]: UserRecord(_id=r["id"], name=r["name"], email=r["email"], image=r["image"], created_at=r["created_at"])
        for r in rows
    }


def _hydrate(conn: sqlite3.Connection, rows: Sequence[sqlite3.Row]) -> List[RecipeRecord]:
    """Populate owner, likedBy, comments and tags for a batch of recipe rows."""
    if not rows:
        return []

    recipe_ids = [r["id"] for r in rows]
    marks = ",".join("?" for _ in recipe_ids)

    likes = conn.execute(
        f"SELECT recipe_id, user_id FROM recipe_likes WHERE recipe_id IN ({marks}) ORDER BY created_at",
        recipe_ids,
    ).fetchall()
    comments = conn.execute(
        f"SELECT * FROM recipe_comments WHERE recipe_id IN ({marks}) ORDER BY created_at",
        recipe_ids,
    ).fetchall()
    tags = conn.execute(
        f"SELECT * FROM recipe_tags WHERE recipe_id IN ({marks})",
        recipe_ids,
    ).fetchall()

    user_ids = {r["owner_id"] for r in rows}
    user_ids |= {l["user_id"] for l in likes}
    user_ids |= {c["user_id"] for c in comments if c["user_id"]}
    users = _users_by_id(conn, user_ids)

    liked_by: Dict[str, List[UserRecord]] = {}
    for l in likes:
        if l["user_id"] in users:
            liked_by.setdefault(l["recipe_id"], []).append(users[l["user_id"]])

    comments_by: Dict[str, List[Comment]] = {}
    for c in comments:
        author = users.get(c["user_id"]) if c["user_id"] else None
        comments_by.setdefault(c["recipe_id"], []).append(
            Comment(
                _id=c["id"],
                user=UserRef(_id=author.id, name=author.name, image=author.image) if author else None,
                comment=c["comment"],
                created_at=c["created_at"],
            )
        )

    tags_by: Dict[str, List[Tag]] = {}
    for t in tags:
        tags_by.setdefault(t["recipe_id"], []).append(Tag(_id=t["id"], tag=t["tag"]))

    out: List[RecipeRecord] = []
    for r in rows:
        owner = users.get(r["owner_id"]) or UserRecord(_id=r["owner_id"])
        out.append(
            RecipeRecord(
                _id=r["id"],
                name=r["name"],
                ingredients=json.loads(r["ingredients_json"]),
                instructions=json.loads(r["instructions_json"]),
                dietary_preference=json.loads(r["dietary_json"]),
                additional_information=json.loads(r["additional_json"]),
                openai_prompt_id=r["openai_prompt_id"],
                owner=owner,
                img_link=r["img_link"],
                liked_by=liked_by.get(r["id"], []),
                comments=comments_by.get(r["id"], []),
                tags=tags_by.get(r["id"], []),
                created_at=r["created_at"],
                updated_at=r["updated_at"],
            )
        )
    return out


def insert_recipes(*, owner_id: str, recipes: Sequence[GeneratedRecipe], img_links: Sequence[str]) -> List[str]:
    """
    Insert a whole batch in one transaction: either every recipe lands or none.
    """
    now = common.now_iso()
    ids: List[str] = []
    rows: List[tuple[Any, ...]] = []
    for recipe, img_link in zip(recipes, img_links):
        rid = common.new_id()
        ids.append(rid)
        data = recipe.model_dump(by_alias=True)
        rows.append(
            (
                rid,
                owner_id,
                recipe.name,
                common.dumps(data["ingredients"]),
                common.dumps(data["instructions"]),
                common.dumps(data["dietaryPreference"]),
                common.dumps(data["additionalInformation"]),
                img_link,
                recipe.openai_prompt_id,
                now,
                now,
            )
        )

    try:
        with common.recipes_db() as conn:
            conn.executemany(
                """
                INSERT INTO recipes
                  (id, owner_id, name, ingredients_json, instructions_json, dietary_json,
                   additional_json, img_link, openai_prompt_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            conn.commit()
    except sqlite3.Error as e:
        log.exception("recipe_insert_failed", extra={"owner_id": owner_id, "count": len(rows)})
        raise PersistenceFailure("Failed to save recipes", reason="database_error") from e

    return ids


def list_all() -> List[RecipeRecord]:
    with common.recipes_db() as conn:
        rows = conn.execute("SELECT * FROM recipes ORDER BY rowid").fetchall()
        return _hydrate(conn, rows)


def list_for_user(user_id: str) -> List[RecipeRecord]:
    """Recipes the user owns or has liked."""
    with common.recipes_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM recipes
            WHERE owner_id = ?
               OR id IN (SELECT recipe_id FROM recipe_likes WHERE user_id = ?)
            ORDER BY rowid
            """,
            (user_id, user_id),
        ).fetchall()
        return _hydrate(conn, rows)


def get_recipe(recipe_id: str) -> Optional[RecipeRecord]:
    with common.recipes_db() as conn:
        row = conn.execute("SELECT * FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
        if not row:
            return None
        return _hydrate(conn, [row])[0]


def get_owner_id(recipe_id: str) -> Optional[str]:
    with common.recipes_db() as conn:
        row = conn.execute("SELECT owner_id FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
    return row["owner_id"] if row else None


def delete_recipe(recipe_id: str) -> bool:
    with common.recipes_db() as conn:
        cur = conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
        conn.commit()
    return cur.rowcount > 0


def toggle_like(recipe_id: str, user_id: str) -> bool:
    """
    Add the user to likedBy, or remove them if already there.
    Membership changes are single statements on the (recipe_id, user_id) key,
    so concurrent toggles from different users never overwrite each other.
    Returns True when the recipe is now liked by the user.
    """
    with common.recipes_db() as conn:
        cur = conn.execute(
            "INSERT OR IGNORE INTO recipe_likes (recipe_id, user_id, created_at) VALUES (?, ?, ?)",
            (recipe_id, user_id, common.now_iso()),
        )
        liked = cur.rowcount == 1
        if not liked:
            conn.execute(
                "DELETE FROM recipe_likes WHERE recipe_id = ? AND user_id = ?",
                (recipe_id, user_id),
            )
        conn.execute("UPDATE recipes SET updated_at = ? WHERE id = ?", (common.now_iso(), recipe_id))
        conn.commit()
    return liked