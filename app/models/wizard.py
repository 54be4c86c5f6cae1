# app/models/wizard.py
from __future__ import annotations

from typing import List, Optional
from pydantic import Field

from app.models.recipe import CamelModel, DietaryPreference, GeneratedRecipe, Ingredient


class WizardState(CamelModel):
    step: int
    step_name: str
    steps: List[str]
    limit_reached: bool
    busy: bool
    ingredients: List[Ingredient]
    preferences: List[str]
    generated_recipes: List[GeneratedRecipe]
    selected_recipe_ids: List[str]
    can_edit_inputs: bool
    can_advance: bool
    can_go_back: bool
    can_generate: bool
    can_save: bool


class WizardStartRequest(CamelModel):
    from_recipe_id: Optional[str] = None
    ingredient_names: List[str] = Field(default_factory=list)


class AddIngredientRequest(CamelModel):
    name: str
    quantity: Optional[float] = None


class PreferenceRequest(CamelModel):
    preference: DietaryPreference


class WizardSaveResponse(CamelModel):
    status: str
    recipe_ids: List[str]
    state: WizardState
