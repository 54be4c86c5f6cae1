# app/services/ingredients_repo.py
from __future__ import annotations

import json
import logging
import sqlite3
from typing import Iterable, List, Optional

from app.core import config
from app.core.text import format_ingredient_name
from app.models.ingredient import IngredientCatalogEntry
from app.services import common
from app.services.ingredient_gate import canonical_key

log = logging.getLogger("recipe_bridge.ingredients")

DEFAULT_INGREDIENTS = [
    "Apple", "Avocado", "Bacon", "Banana", "Basil", "Beef", "Bell pepper", "Black beans",
    "Broccoli", "Butter", "Carrot", "Cheddar", "Chicken", "Chickpea", "Cilantro", "Cinnamon",
    "Coconut milk", "Corn", "Cucumber", "Egg", "Eggplant", "Flour", "Garlic", "Ginger",
    "Honey", "Kale", "Lemon", "Lentil", "Lime", "Milk", "Mushroom", "Oat", "Olive oil",
    "Onion", "Parmesan", "Pasta", "Pork", "Potato", "Quinoa", "Rice", "Salmon", "Shrimp",
    "Soy sauce", "Spinach", "Sugar", "Sweet potato", "Tofu", "Tomato", "Yogurt", "Zucchini",
]


def _row_to_entry(row) -> IngredientCatalogEntry:
    return IngredientCatalogEntry(
        _id=row["id"],
        name=row["name"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


def list_ingredients() -> List[IngredientCatalogEntry]:
    with common.recipes_db() as conn:
        rows = conn.execute(
            "SELECT id, name, created_by, created_at FROM ingredients ORDER BY name COLLATE NOCASE"
        ).fetchall()
    return [_row_to_entry(r) for r in rows]


def list_names() -> List[str]:
    return [e.name for e in list_ingredients()]


def find_by_name(name: str) -> Optional[IngredientCatalogEntry]:
    with common.recipes_db() as conn:
        row = conn.execute(
            "SELECT id, name, created_by, created_at FROM ingredients WHERE name_key = ?",
            (canonical_key(name),),
        ).fetchone()
    return _row_to_entry(row) if row else None


def create_ingredient(name: str, created_by: Optional[str]) -> Optional[IngredientCatalogEntry]:
    """
    Insert a catalog entry named like "Tomato".
    Returns None when an entry with the same canonical key already exists.
    """
    entry_id = common.new_id()
    formatted = format_ingredient_name(name)
    now = common.now_iso()
    try:
        with common.recipes_db() as conn:
            conn.execute(
                """
                INSERT INTO ingredients (id, name, name_key, created_by, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entry_id, formatted, canonical_key(formatted), created_by, now),
            )
            conn.commit()
    except sqlite3.IntegrityError:
        return None
    return IngredientCatalogEntry(_id=entry_id, name=formatted, created_by=created_by, created_at=now)


def seed_catalog(names: Optional[Iterable[str]] = None) -> int:
    """Load predefined ingredients (created_by NULL). Existing names are skipped."""
    if names is None:
        names = DEFAULT_INGREDIENTS
        if config.SEED_INGREDIENTS_PATH.exists():
            with open(str(config.SEED_INGREDIENTS_PATH), "r", encoding="utf-8") as f:
                names = json.load(f)

    added = 0
    now = common.now_iso()
    with common.recipes_db() as conn:
        for name in names:
            formatted = format_ingredient_name(name)
            if not formatted:
                continue
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO ingredients (id, name, name_key, created_by, created_at)
                VALUES (?, ?, ?, NULL, ?)
                """,
                (common.new_id(), formatted, canonical_key(formatted), now),
            )
            added += cur.rowcount
        conn.commit()

    if added:
        log.info("ingredient_catalog_seeded", extra={"added": added})
    return added
