# app/routers/ingredients.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.clients.ollama import ollama
from app.core.auth import current_user
from app.models.ingredient import IngredientsResponse, IngredientValidation, ValidateIngredientRequest
from app.models.recipe import UserRecord
from app.services import ingredients

router = APIRouter(prefix="/ingredients", tags=["ingredients"])


@router.get("", response_model=IngredientsResponse)
def ingredient_list(user: UserRecord = Depends(current_user)) -> IngredientsResponse:
    return ingredients.catalog_for(user.id)


@router.post("/validate", response_model=IngredientValidation)
async def ingredient_validate(req: ValidateIngredientRequest, user: UserRecord = Depends(current_user)) -> IngredientValidation:
    return await ingredients.propose_ingredient(req.ingredient_name, user.id, ollama)
