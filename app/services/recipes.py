# app/services/recipes.py
from __future__ import annotations

import logging
from typing import List, Optional

from app.core.errors import Forbidden, NotFound, ValidationFailed
from app.models.recipe import RecipeView
from app.services import common, recipes_repo
from app.services.search import filter_by_query
from app.services.shaping import project_for_user

log = logging.getLogger("recipe_bridge.recipes")


def _check_id(recipe_id: str) -> None:
    if not common.is_valid_id(recipe_id):
        raise ValidationFailed("Invalid recipe ID", reason="invalid_id")


def list_all(user_id: str, search: Optional[str] = None) -> List[RecipeView]:
    views = project_for_user(recipes_repo.list_all(), user_id)
    return list(filter_by_query(views, search))


def list_for_user(user_id: str, search: Optional[str] = None) -> List[RecipeView]:
    views = project_for_user(recipes_repo.list_for_user(user_id), user_id)
    return list(filter_by_query(views, search))


def get_view(recipe_id: str, user_id: str) -> RecipeView:
    _check_id(recipe_id)
    record = recipes_repo.get_recipe(recipe_id)
    if not record:
        raise NotFound("Recipe not found", reason="recipe_not_found")
    return project_for_user([record], user_id)[0]


def toggle_like(recipe_id: str, user_id: str) -> RecipeView:
    _check_id(recipe_id)
    if not recipes_repo.get_owner_id(recipe_id):
        raise NotFound("Recipe not found", reason="recipe_not_found")

    liked = recipes_repo.toggle_like(recipe_id, user_id)
    log.info("recipe_like_toggled", extra={"recipe_id": recipe_id, "user_id": user_id, "liked": liked})
    return get_view(recipe_id, user_id)


def delete_recipe(recipe_id: str, user_id: str) -> None:
    _check_id(recipe_id)
    owner_id = recipes_repo.get_owner_id(recipe_id)
    if not owner_id:
        raise NotFound("Recipe not found", reason="recipe_not_found")
    if owner_id != user_id:
        log.warning("recipe_delete_forbidden", extra={"recipe_id": recipe_id, "user_id": user_id})
        raise Forbidden("Only the owner can delete this recipe", reason="not_owner")

    recipes_repo.delete_recipe(recipe_id)
    log.info("recipe_deleted", extra={"recipe_id": recipe_id, "user_id": user_id})


def ingredient_names(recipe_id: str) -> List[str]:
    """Names used to prefill a new creation workflow from an existing recipe."""
    _check_id(recipe_id)
    record = recipes_repo.get_recipe(recipe_id)
    if not record:
        raise NotFound("Recipe not found", reason="recipe_not_found")
    return [i.name for i in record.ingredients]
