# app/services/search.py
from __future__ import annotations

from typing import List, Optional, Sequence

from app.models.recipe import RecipeView


def _matches(recipe: RecipeView, q: str) -> bool:
    if q in recipe.name.lower():
        return True
    if any(q in ing.name.lower() for ing in recipe.ingredients):
        return True
    return any(q in diet.lower() for diet in recipe.dietary_preference)


def filter_by_query(recipes: Sequence[RecipeView], query: Optional[str]) -> Sequence[RecipeView]:
    if not query:
        return recipes
    q = query.lower()
    out: List[RecipeView] = [r for r in recipes if _matches(r, q)]
    return out
