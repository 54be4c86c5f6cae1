# app/services/ingredient_gate.py
from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional

import inflect

from app.core import config
from app.core.errors import ValidationFailed
from app.models.ingredient import GateRejection


@lru_cache(maxsize=1)
def _engine() -> inflect.engine:
    return inflect.engine()


def normalize(name: str) -> str:
    return " ".join((name or "").strip().lower().split())


def pluralize(name: str) -> str:
    return _engine().plural_noun(name) or name


def singularize(name: str) -> str:
    # singular_noun() returns False when the word is already singular
    return _engine().singular_noun(name) or name


def canonical_key(name: str) -> str:
    """Catalog uniqueness key: lowercase, singular. "Tomatoes" and "tomato" collide."""
    n = normalize(name)
    return singularize(n) if n else n


def forms(name: str) -> set[str]:
    n = normalize(name)
    return {n, pluralize(n), singularize(n)}


def check_candidate(candidate: str, catalog_names: Iterable[str]) -> Optional[GateRejection]:
    """
    Gate run before the external validator is ever called.
    Returns a rejection, or None when the candidate may be proposed.
    """
    name = (candidate or "").strip()
    if not name:
        raise ValidationFailed("Ingredient name is required", reason="empty_name")

    if len(name) > config.MAX_INGREDIENT_NAME_LENGTH:
        return GateRejection(status="too_long", message="This ingredient name is too long!")

    available = {normalize(n) for n in catalog_names}
    if forms(name) & available:
        return GateRejection(status="duplicate", message="This ingredient is already available")

    return None
