# app/services/wizards.py
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from app.clients.images import images, media
from app.clients.ollama import ollama
from app.core.errors import LimitReached
from app.models.recipe import GeneratedRecipe, GenerateRecipesResponse, Ingredient
from app.services import ai_log_repo, generation, ingredients_repo
from app.services.workflow import RecipeWorkflow

log = logging.getLogger("recipe_bridge.workflow")


async def _generate(ingredients: List[Ingredient], preferences: List[str], user_id: str) -> GenerateRecipesResponse:
    if ai_log_repo.reached_limit(user_id):
        raise LimitReached(reason="usage_limit")
    return await generation.generate_recipes(
        ingredients=ingredients,
        preferences=preferences,
        user_id=user_id,
        ollama_client=ollama,
    )


async def _save(recipes: List[GeneratedRecipe], user_id: str) -> List[str]:
    return await generation.save_recipes(recipes=recipes, user_id=user_id, image_client=images, media=media)


def _lookup(name: str) -> Optional[str]:
    entry = ingredients_repo.find_by_name(name)
    return entry.name if entry else None


def build_workflow(user_id: str) -> RecipeWorkflow:
    return RecipeWorkflow(
        user_id=user_id,
        generate=_generate,
        save=_save,
        lookup=_lookup,
        limit_reached=ai_log_repo.reached_limit(user_id),
    )


class WorkflowRegistry:
    """One live workflow per user, kept in process memory."""

    def __init__(self, factory: Callable[[str], RecipeWorkflow] = build_workflow):
        self._factory = factory
        self._by_user: Dict[str, RecipeWorkflow] = {}

    def get(self, user_id: str) -> RecipeWorkflow:
        wf = self._by_user.get(user_id)
        if wf is None:
            wf = self.start(user_id)
        return wf

    def start(self, user_id: str, prefill: Optional[Iterable[str]] = None) -> RecipeWorkflow:
        self.close(user_id)
        wf = self._factory(user_id)
        if prefill and not wf.limit_reached:
            wf.prefill(prefill)
        self._by_user[user_id] = wf
        log.info("workflow_started", extra={"user_id": user_id, "prefilled": len(wf.ingredients)})
        return wf

    def close(self, user_id: str) -> None:
        wf = self._by_user.pop(user_id, None)
        if wf is not None:
            wf.close()
            log.info("workflow_closed", extra={"user_id": user_id})

    def close_all(self) -> None:
        for user_id in list(self._by_user):
            self.close(user_id)


registry = WorkflowRegistry()
