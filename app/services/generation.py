# app/services/generation.py
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from app.clients.images import image_url
from app.core import config
from app.core.errors import UpstreamFailure, ValidationFailed
from app.core.text import extract_json, extract_json_array
from app.models.ingredient import ValidatorVerdict
from app.models.recipe import GeneratedRecipe, GenerateRecipesResponse, ImageResult, Ingredient, RecipeIngredient
from app.services import ai_log_repo, common, recipes_repo
from ollama_client import message_content

log = logging.getLogger("recipe_bridge.generation")

# "<32 hex batch id>-<index>", as built by candidate_id()
CANDIDATE_ID = re.compile(r"[0-9a-f]{32}-\d+")


def recipe_prompt(ingredients: Sequence[Ingredient], preferences: Sequence[str]) -> str:
    items = json.dumps([i.model_dump(exclude={"id"}) for i in ingredients], ensure_ascii=False)
    diets = f" and dietary preferences: {', '.join(preferences)}" if preferences else ""
    return (
        f"I have the following ingredients: {items}{diets}.\n"
        f"Please provide me with {config.RECIPES_PER_BATCH} different delicious recipes.\n"
        "Make the recipes diverse, use the ingredients listed and follow the dietary preferences provided."
    )


def image_prompt(name: str, ingredients: Sequence[RecipeIngredient]) -> str:
    listed = ", ".join(i.name for i in ingredients)
    return (
        f"Create an image of a delicious {name} made of these ingredients: {listed}. "
        "The image should be visually appealing and showcase the dish in an appetizing manner."
    )


def validation_prompt(ingredient_name: str) -> str:
    return f"Ingredient name: {ingredient_name}"


def candidate_id(batch_id: str, index: int) -> str:
    return f"{batch_id}-{index}"


def strip_batch_index(prompt_id: str) -> str:
    # "<batch>-<index>" -> "<batch>"; anything else is returned as is
    head, sep, tail = prompt_id.rpartition("-")
    return head if sep and tail.isdigit() else prompt_id


def media_key(prompt_id: str) -> str:
    """Storage key for a recipe image: its candidate id, or a fresh id when it has none."""
    if not prompt_id:
        return common.new_id()
    if not CANDIDATE_ID.fullmatch(prompt_id):
        raise ValidationFailed("Invalid recipe ID", reason="invalid_prompt_id")
    return prompt_id


async def generate_recipes(
    *,
    ingredients: Sequence[Ingredient],
    preferences: Sequence[str],
    user_id: str,
    ollama_client: Any,
) -> GenerateRecipesResponse:
    """
    One generation call. The returned recipes text is untrusted model output;
    run it through parse_candidates() before using it.
    """
    if not ingredients:
        raise ValidationFailed("Ingredients are required", reason="no_ingredients")

    prompt = recipe_prompt(ingredients, preferences)
    log.info("generating_recipes", extra={"user_id": user_id, "ingredients": len(ingredients)})
    try:
        data = await ollama_client.chat(
            [{"role": "system", "content": config.SYSTEM_RECIPES}, {"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=1500,
        )
    except Exception as e:
        log.exception("recipe_generation_failed", extra={"user_id": user_id})
        raise UpstreamFailure("Failed to generate recipes", reason="generation_failed") from e

    batch_id = ai_log_repo.record(user_id=user_id, prompt=prompt, response=data) or common.new_id()
    return GenerateRecipesResponse(recipes=message_content(data), openai_prompt_id=batch_id)


def parse_candidates(recipes_text: str, batch_id: str) -> List[GeneratedRecipe]:
    """
    Strict parse of a generation batch. Anything but a non-empty JSON array of
    complete recipes fails the whole batch.
    Each candidate is tagged "<batch>-<index>".
    """
    try:
        payload = json.loads(extract_json_array(recipes_text))
        if not isinstance(payload, list) or not payload:
            raise ValueError("expected a non-empty list of recipes")
        parsed = [GeneratedRecipe.model_validate(item) for item in payload]
    except (ValueError, ValidationError) as e:
        log.warning("malformed_generation", extra={"batch_id": batch_id, "error": str(e)})
        raise UpstreamFailure("Failed to generate recipes", reason="malformed_response") from e

    return [
        r.model_copy(update={"openai_prompt_id": candidate_id(batch_id, idx)})
        for idx, r in enumerate(parsed)
    ]


async def generate_images(recipes: Sequence[GeneratedRecipe], user_id: str, image_client: Any) -> List[ImageResult]:
    """
    All images are requested concurrently; a single failure fails the whole batch.
    """
    try:
        responses = await asyncio.gather(
            *(image_client.generate(image_prompt(r.name, r.ingredients)) for r in recipes)
        )
    except Exception as e:
        log.exception("image_generation_failed", extra={"user_id": user_id, "count": len(recipes)})
        raise UpstreamFailure("Failed to generate image", reason="image_generation_failed") from e

    ai_log_repo.record(
        user_id=user_id,
        prompt=f"Image generation for recipe names {', '.join(r.name for r in recipes)} (note: not exact prompt)",
        response=list(responses),
    )

    results: List[ImageResult] = []
    for recipe, data in zip(recipes, responses):
        url = image_url(data)
        if not url:
            raise UpstreamFailure("Failed to generate image", reason="malformed_image_response")
        results.append(ImageResult(img_link=url, name=recipe.name))
    return results


async def store_images(results: Sequence[ImageResult], keys: Sequence[str], media: Any) -> List[str]:
    """Copy every image into the media store; a failed copy falls back to FALLBACK_IMAGE."""

    async def _one(result: ImageResult, key: str) -> str:
        try:
            stored = await media.store(source_url=result.img_link, key=key)
        except Exception:
            log.exception("image_store_failed", extra={"key": key, "source": result.img_link[:50]})
            stored = False
        return media.link_for(key) if stored else config.FALLBACK_IMAGE

    return list(await asyncio.gather(*(_one(r, k) for r, k in zip(results, keys))))


async def save_recipes(
    *,
    recipes: Sequence[GeneratedRecipe],
    user_id: str,
    image_client: Any,
    media: Any,
) -> List[str]:
    """
    Images for the batch, then one insert for all recipes.
    Stored openaiPromptId is the batch id, the within-batch index is dropped.
    """
    if not recipes:
        raise ValidationFailed("Recipes are required", reason="no_recipes")
    keys = [media_key(r.openai_prompt_id) for r in recipes]

    log.info("generating_images", extra={"user_id": user_id, "count": len(recipes)})
    images = await generate_images(recipes, user_id, image_client)

    links = await store_images(images, keys, media)

    to_store = [
        r.model_copy(update={"openai_prompt_id": strip_batch_index(key)}) for r, key in zip(recipes, keys)
    ]
    ids = recipes_repo.insert_recipes(owner_id=user_id, recipes=to_store, img_links=links)
    log.info("recipes_saved", extra={"user_id": user_id, "count": len(ids)})
    return ids


async def validate_ingredient(ingredient_name: str, user_id: str, ollama_client: Any) -> Optional[ValidatorVerdict]:
    """
    Ask the validator model about one name.
    Returns None when the answer cannot be parsed; transport errors raise UpstreamFailure.
    """
    prompt = validation_prompt(ingredient_name)
    try:
        data = await ollama_client.chat(
            [{"role": "system", "content": config.SYSTEM_INGREDIENT_VALIDATION}, {"role": "user", "content": prompt}],
            temperature=0.0,
            model=config.OLLAMA_VALIDATOR_MODEL,
            max_tokens=800,
        )
    except Exception as e:
        log.exception("ingredient_validation_failed", extra={"user_id": user_id})
        raise UpstreamFailure("Failed to validate ingredient", reason="validator_error") from e

    ai_log_repo.record(user_id=user_id, prompt=prompt, response=data)

    try:
        return ValidatorVerdict.model_validate(json.loads(extract_json(message_content(data))))
    except (ValueError, ValidationError):
        log.warning("malformed_validation", extra={"user_id": user_id})
        return None
