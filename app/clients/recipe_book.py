# app/clients/recipe_book.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.models.ingredient import IngredientCatalogEntry, IngredientsResponse, IngredientValidation
from app.models.recipe import RecipeView
from app.services.ingredient_gate import check_candidate
from app.services.search import filter_by_query
from app.services.shaping import reconcile

log = logging.getLogger("recipe_bridge.client")


class RecipeBookError(Exception):
    """Non-2xx answer from the API; carries the {"error", "reason"} detail."""

    def __init__(self, status_code: int, error: str, reason: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.reason = reason


class RecipeBookClient:
    """
    Client-side recipe list and ingredient catalog.

    The list fetched from the server is kept locally; likes and deletes are
    merged back with reconcile() instead of refetching, and search runs over
    the local copy. Ingredient proposals are gated against the cached catalog
    before any request is sent.
    """

    def __init__(self, base_url: str, token: str, *, timeout_s: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_s = timeout_s
        self.transport = transport

        self.recipes: List[RecipeView] = []
        self.catalog: List[IngredientCatalogEntry] = []
        self.reached_limit = False

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.token}"},
        ) as client:
            r = await client.request(method, path, json=json, params=params)

        if r.is_error:
            try:
                detail = r.json().get("detail")
            except ValueError:
                detail = None
            if isinstance(detail, dict):
                raise RecipeBookError(r.status_code, detail.get("error") or r.reason_phrase, detail.get("reason"))
            raise RecipeBookError(r.status_code, str(detail or r.reason_phrase))
        return r.json()

    # --- recipes ---

    async def load(self, *, mine: bool = False) -> List[RecipeView]:
        data = await self._request("GET", "/recipes/mine" if mine else "/recipes")
        self.recipes = [RecipeView.model_validate(item) for item in data]
        return self.recipes

    def visible(self, query: Optional[str] = None) -> Sequence[RecipeView]:
        return filter_by_query(self.recipes, query)

    async def toggle_like(self, recipe_id: str) -> RecipeView:
        updated = RecipeView.model_validate(await self._request("PUT", f"/recipes/{recipe_id}/like"))
        self.recipes = reconcile(self.recipes, updated)
        return updated

    async def delete(self, recipe_id: str) -> None:
        await self._request("DELETE", f"/recipes/{recipe_id}")
        self.recipes = reconcile(self.recipes, None, delete_id=recipe_id)

    # --- ingredients ---

    async def load_catalog(self) -> IngredientsResponse:
        resp = IngredientsResponse.model_validate(await self._request("GET", "/ingredients"))
        self.catalog = list(resp.ingredient_list)
        self.reached_limit = resp.reached_limit
        return resp

    async def propose_ingredient(self, name: str) -> IngredientValidation:
        rejection = check_candidate(name, [e.name for e in self.catalog])
        if rejection:
            log.info("ingredient_rejected_locally", extra={"ingredient": name, "status": rejection.status})
            return IngredientValidation(status=rejection.status, message=rejection.message)

        result = IngredientValidation.model_validate(
            await self._request("POST", "/ingredients/validate", json={"ingredientName": name})
        )
        if result.new_ingredient is not None:
            self.catalog = sorted([*self.catalog, result.new_ingredient], key=lambda e: e.name.lower())
        return result
