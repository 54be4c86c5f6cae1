# app/services/ingredients.py
from __future__ import annotations

import logging
from typing import Any

from app.core import config
from app.core.errors import UpstreamFailure
from app.models.ingredient import IngredientsResponse, IngredientValidation
from app.services import ai_log_repo, generation, ingredients_repo
from app.services.ingredient_gate import check_candidate

log = logging.getLogger("recipe_bridge.ingredients")


def catalog_for(user_id: str) -> IngredientsResponse:
    if ai_log_repo.reached_limit(user_id):
        return IngredientsResponse(reached_limit=True, ingredient_list=[])
    return IngredientsResponse(reached_limit=False, ingredient_list=ingredients_repo.list_ingredients())


async def propose_ingredient(ingredient_name: str, user_id: str, ollama_client: Any) -> IngredientValidation:
    """
    Gate, then validator, then catalog insert.
    Duplicates (plural/singular aware) and over-long names never reach the validator.
    """
    rejection = check_candidate(ingredient_name, ingredients_repo.list_names())
    if rejection:
        return IngredientValidation(status=rejection.status, message=rejection.message)

    name = ingredient_name.strip()
    log.info("validating_ingredient", extra={"user_id": user_id, "ingredient": name})
    verdict = await generation.validate_ingredient(name, user_id, ollama_client)
    if verdict is None:
        raise UpstreamFailure("Failed to add ingredient", reason="malformed_validation")

    if not verdict.is_valid:
        suggested = [s.strip() for s in verdict.possible_variations if s.strip()][: config.MAX_SUGGESTIONS]
        hint = f" Try the following suggestions: {', '.join(suggested)}" if suggested else ""
        return IngredientValidation(status="invalid", message=f"{name} is invalid.{hint}", suggested=suggested)

    entry = ingredients_repo.create_ingredient(name, created_by=user_id)
    if entry is None:
        return IngredientValidation(status="exists", message="This ingredient already exists")

    log.info("ingredient_created", extra={"user_id": user_id, "ingredient": entry.name})
    return IngredientValidation(status="valid", message=f"Successfully added: {entry.name}", new_ingredient=entry)
