# app/models/recipe.py
from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DietaryPreference = Literal["Vegetarian", "Vegan", "Gluten-Free", "Keto", "Paleo"]


class CamelModel(BaseModel):
    # Wire format is camelCase ("imgLink", "likedBy", "_id"); Python side is snake_case.
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class RecipeIngredient(CamelModel):
    name: str
    quantity: str


class AdditionalInformation(CamelModel):
    tips: str
    variations: str
    serving_suggestions: str
    nutritional_information: str


class GeneratedRecipe(CamelModel):
    name: str
    ingredients: List[RecipeIngredient] = Field(min_length=1)
    instructions: List[str] = Field(min_length=1)
    dietary_preference: List[str] = Field(default_factory=list)
    additional_information: AdditionalInformation
    openai_prompt_id: str = ""


class UserRef(CamelModel):
    id: str = Field(alias="_id")
    name: Optional[str] = None
    image: Optional[str] = None


class UserRecord(UserRef):
    email: Optional[str] = None
    created_at: Optional[str] = None


class Comment(CamelModel):
    id: str = Field(alias="_id")
    user: Optional[UserRef] = None
    comment: str
    created_at: str


class Tag(CamelModel):
    id: str = Field(alias="_id")
    tag: str


class RecipeRecord(GeneratedRecipe):
    """A stored recipe with owner and likes populated from the users table."""

    id: str = Field(alias="_id")
    owner: UserRecord
    img_link: str
    liked_by: List[UserRecord] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    created_at: str
    updated_at: str


class RecipeView(GeneratedRecipe):
    """RecipeRecord as seen by one user: trimmed references plus owns/liked flags."""

    id: str = Field(alias="_id")
    owner: UserRef
    img_link: str
    liked_by: List[UserRef] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    created_at: str
    updated_at: str
    owns: bool
    liked: bool


class Ingredient(CamelModel):
    """An ingredient picked into the creation workflow."""

    id: str
    name: str
    quantity: Optional[float] = None


class GenerateRecipesRequest(CamelModel):
    ingredients: List[Ingredient]
    dietary_preferences: List[DietaryPreference] = Field(default_factory=list)


class GenerateRecipesResponse(CamelModel):
    recipes: str
    openai_prompt_id: str


class SaveRecipesRequest(CamelModel):
    recipes: List[GeneratedRecipe]


class StatusResponse(BaseModel):
    status: str


class ImageResult(CamelModel):
    img_link: str
    name: str


class SaveRecipesResponse(CamelModel):
    status: str
    recipe_ids: List[str]
