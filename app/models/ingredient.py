# app/models/ingredient.py
from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from app.models.recipe import CamelModel


class IngredientCatalogEntry(CamelModel):
    id: str = Field(alias="_id")
    name: str
    created_by: Optional[str] = None
    created_at: str


class IngredientsResponse(CamelModel):
    reached_limit: bool
    ingredient_list: List[IngredientCatalogEntry]


class ValidateIngredientRequest(CamelModel):
    ingredient_name: str


class ValidatorVerdict(CamelModel):
    """Strict shape of the validator model's JSON answer."""

    is_valid: bool
    possible_variations: List[str] = Field(default_factory=list)


ValidationStatus = Literal["valid", "invalid", "duplicate", "too_long", "exists"]


class IngredientValidation(CamelModel):
    status: ValidationStatus
    message: str
    new_ingredient: Optional[IngredientCatalogEntry] = None
    suggested: List[str] = Field(default_factory=list)


class GateRejection(BaseModel):
    status: Literal["duplicate", "too_long"]
    message: str
