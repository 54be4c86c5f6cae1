# app/routers/recipes.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from app.clients.images import images, media
from app.clients.ollama import ollama
from app.core.auth import current_user
from app.core.errors import LimitReached
from app.models.recipe import (
    GenerateRecipesRequest,
    GenerateRecipesResponse,
    RecipeView,
    SaveRecipesRequest,
    SaveRecipesResponse,
    StatusResponse,
    UserRecord,
)
from app.services import ai_log_repo, generation, recipes

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("", response_model=List[RecipeView])
def recipe_list(search: Optional[str] = None, user: UserRecord = Depends(current_user)) -> List[RecipeView]:
    return recipes.list_all(user.id, search)


@router.get("/mine", response_model=List[RecipeView])
def recipe_list_mine(search: Optional[str] = None, user: UserRecord = Depends(current_user)) -> List[RecipeView]:
    return recipes.list_for_user(user.id, search)


@router.post("/generate", response_model=GenerateRecipesResponse)
async def recipe_generate(req: GenerateRecipesRequest, user: UserRecord = Depends(current_user)) -> GenerateRecipesResponse:
    if ai_log_repo.reached_limit(user.id):
        raise LimitReached(reason="usage_limit")
    return await generation.generate_recipes(
        ingredients=req.ingredients,
        preferences=req.dietary_preferences,
        user_id=user.id,
        ollama_client=ollama,
    )


@router.post("/save", response_model=SaveRecipesResponse)
async def recipe_save(req: SaveRecipesRequest, user: UserRecord = Depends(current_user)) -> SaveRecipesResponse:
    ids = await generation.save_recipes(recipes=req.recipes, user_id=user.id, image_client=images, media=media)
    return SaveRecipesResponse(status="Recipes saved successfully", recipe_ids=ids)


@router.get("/{recipe_id}", response_model=RecipeView)
def recipe_get(recipe_id: str, user: UserRecord = Depends(current_user)) -> RecipeView:
    return recipes.get_view(recipe_id, user.id)


@router.put("/{recipe_id}/like", response_model=RecipeView)
def recipe_like(recipe_id: str, user: UserRecord = Depends(current_user)) -> RecipeView:
    return recipes.toggle_like(recipe_id, user.id)


@router.delete("/{recipe_id}", response_model=StatusResponse)
def recipe_delete(recipe_id: str, user: UserRecord = Depends(current_user)) -> StatusResponse:
    recipes.delete_recipe(recipe_id, user.id)
    return StatusResponse(status="Recipe deleted successfully")
