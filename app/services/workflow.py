# app/services/workflow.py
from __future__ import annotations

import asyncio
import logging
import uuid
from enum import IntEnum
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from app.core import config
from app.core.errors import LimitReached, NotFound, ValidationFailed, WorkflowBusy, WorkflowClosed
from app.models.recipe import GeneratedRecipe, GenerateRecipesResponse, Ingredient
from app.models.wizard import WizardState
from app.services.generation import parse_candidates

log = logging.getLogger("recipe_bridge.workflow")


class Step(IntEnum):
    COLLECT_INGREDIENTS = 0
    COLLECT_PREFERENCES = 1
    REVIEW_INPUTS = 2
    SELECT_GENERATED = 3
    REVIEW_SELECTED = 4


STEP_TITLES = {
    Step.COLLECT_INGREDIENTS: "Choose Ingredients",
    Step.COLLECT_PREFERENCES: "Choose Diet",
    Step.REVIEW_INPUTS: "Review and Create Recipes",
    Step.SELECT_GENERATED: "Select Recipes",
    Step.REVIEW_SELECTED: "Review and Save Recipes",
}

GenerateFn = Callable[[List[Ingredient], List[str], str], Awaitable[GenerateRecipesResponse]]
SaveFn = Callable[[List[GeneratedRecipe], str], Awaitable[Any]]
LookupFn = Callable[[str], Optional[str]]


class RecipeWorkflow:
    """
    The five-step recipe creation wizard for one user.

    Inputs (ingredients, preferences) are editable until a candidate batch exists.
    Generation and saving are the only external calls; each runs as a tracked
    task so close() can drop it. Local state changes only after a call succeeds.
    """

    def __init__(
        self,
        *,
        user_id: str,
        generate: GenerateFn,
        save: SaveFn,
        lookup: Optional[LookupFn] = None,
        limit_reached: bool = False,
    ) -> None:
        self.user_id = user_id
        self.limit_reached = limit_reached
        self._generate = generate
        self._save = save
        self._lookup = lookup

        self.step = Step.COLLECT_INGREDIENTS
        self.ingredients: List[Ingredient] = []
        self.preferences: List[str] = []
        self.candidates: List[GeneratedRecipe] = []
        self.selected: List[str] = []

        self.busy = False
        self.closed = False
        self._inflight: Optional[asyncio.Future] = None

    # --- guards ---

    def _guard(self) -> None:
        if self.closed:
            raise WorkflowClosed(reason="closed")
        if self.limit_reached:
            raise LimitReached(reason="usage_limit")
        if self.busy:
            raise WorkflowBusy(reason="busy")

    def _guard_inputs(self) -> None:
        self._guard()
        if self.candidates:
            raise ValidationFailed(
                "Discard the generated recipes before editing ingredients or preferences",
                reason="inputs_locked",
            )

    # --- ingredients & preferences ---

    def add_ingredient(self, name: str, quantity: Optional[float] = None) -> Ingredient:
        self._guard_inputs()
        name = (name or "").strip()
        if not name:
            raise ValidationFailed("Ingredient name is required", reason="empty_name")

        if self._lookup is not None:
            known = self._lookup(name)
            if known is None:
                raise ValidationFailed("Pick an ingredient from the list", reason="unknown_ingredient")
            name = known

        for existing in self.ingredients:
            if existing.name == name:
                return existing

        ingredient = Ingredient(id=uuid.uuid4().hex, name=name, quantity=quantity)
        self.ingredients.append(ingredient)
        return ingredient

    def prefill(self, names: Iterable[str]) -> None:
        """Start from the ingredients of an existing recipe; no catalog check."""
        self._guard_inputs()
        for raw in names:
            name = (raw or "").strip()
            if name and all(i.name != name for i in self.ingredients):
                self.ingredients.append(Ingredient(id=uuid.uuid4().hex, name=name))

    def remove_ingredient(self, ingredient_id: str) -> None:
        self._guard_inputs()
        remaining = [i for i in self.ingredients if i.id != ingredient_id]
        if len(remaining) == len(self.ingredients):
            raise NotFound("Ingredient not found", reason="ingredient_not_found")
        self.ingredients = remaining

    def toggle_preference(self, preference: str) -> None:
        self._guard_inputs()
        if preference not in config.DIETARY_PREFERENCES:
            raise ValidationFailed("Unknown dietary preference", reason="unknown_preference")
        if preference in self.preferences:
            self.preferences = [p for p in self.preferences if p != preference]
        else:
            self.preferences = [*self.preferences, preference]

    def clear_preferences(self) -> None:
        self._guard_inputs()
        self.preferences = []

    # --- navigation ---

    def advance(self) -> None:
        self._guard()
        if self.step == Step.REVIEW_SELECTED:
            raise ValidationFailed("Already at the last step", reason="last_step")
        if self.step == Step.REVIEW_INPUTS and not self.candidates:
            raise ValidationFailed("Create recipes before moving on", reason="no_candidates")
        self.step = Step(self.step + 1)

    def back(self) -> None:
        self._guard()
        if self.step == Step.COLLECT_INGREDIENTS:
            raise ValidationFailed("Already at the first step", reason="first_step")
        self.step = Step(self.step - 1)

    def discard(self) -> None:
        """Drop the candidate batch and go back to editing the inputs."""
        self._guard()
        self.candidates = []
        self.selected = []
        self.step = Step.COLLECT_INGREDIENTS

    # --- generation ---

    def can_generate(self) -> bool:
        return (
            self.step == Step.REVIEW_INPUTS
            and not self.candidates
            and len(self.ingredients) >= config.MIN_INGREDIENTS
        )

    async def generate(self) -> List[GeneratedRecipe]:
        self._guard()
        if self.step != Step.REVIEW_INPUTS:
            raise ValidationFailed("Recipes are created from the review step", reason="wrong_step")
        if self.candidates:
            raise ValidationFailed("Recipes were already created", reason="already_generated")
        if len(self.ingredients) < config.MIN_INGREDIENTS:
            raise ValidationFailed(
                f"At least {config.MIN_INGREDIENTS} ingredients are required",
                reason="too_few_ingredients",
            )

        try:
            response = await self._run(self._generate(list(self.ingredients), list(self.preferences), self.user_id))
        except LimitReached:
            self.limit_reached = True
            raise

        candidates = parse_candidates(response.recipes, response.openai_prompt_id)
        self.candidates = candidates
        self.selected = []
        self.step = Step.SELECT_GENERATED
        log.info("candidates_generated", extra={"user_id": self.user_id, "count": len(candidates)})
        return candidates

    # --- selection ---

    def _candidate_ids(self) -> List[str]:
        return [c.openai_prompt_id for c in self.candidates]

    def toggle_selection(self, candidate_id: str) -> None:
        self._guard()
        if candidate_id not in self._candidate_ids():
            raise NotFound("Recipe not found in this batch", reason="candidate_not_found")
        if candidate_id in self.selected:
            self.selected = [s for s in self.selected if s != candidate_id]
        else:
            self.selected = [*self.selected, candidate_id]

    def select_all(self) -> None:
        self._guard()
        self.selected = self._candidate_ids()

    def select_none(self) -> None:
        self._guard()
        self.selected = []

    def selected_recipes(self) -> List[GeneratedRecipe]:
        return [c for c in self.candidates if c.openai_prompt_id in self.selected]

    # --- saving ---

    async def save(self) -> Any:
        self._guard()
        if self.step != Step.REVIEW_SELECTED:
            raise ValidationFailed("Recipes are saved from the final review step", reason="wrong_step")
        chosen = self.selected_recipes()
        if not chosen:
            raise ValidationFailed(
                "No recipes selected for submission. Please select at least one recipe.",
                reason="empty_selection",
            )

        result = await self._run(self._save(chosen, self.user_id))
        log.info("workflow_saved", extra={"user_id": self.user_id, "count": len(chosen)})
        self._reset()
        return result

    def _reset(self) -> None:
        self.step = Step.COLLECT_INGREDIENTS
        self.ingredients = []
        self.preferences = []
        self.candidates = []
        self.selected = []

    # --- lifetime ---

    async def _run(self, call: Awaitable[Any]) -> Any:
        self.busy = True
        task = asyncio.ensure_future(call)
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self.closed:
                raise WorkflowClosed(reason="abandoned")
            raise
        finally:
            self.busy = False
            self._inflight = None

        if self.closed:
            raise WorkflowClosed(reason="abandoned")
        return result

    def close(self) -> None:
        """Navigate away: pending external calls are cancelled and their results dropped."""
        self.closed = True
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    def state(self) -> WizardState:
        return WizardState(
            step=int(self.step),
            step_name=STEP_TITLES[self.step],
            steps=[STEP_TITLES[s] for s in Step],
            limit_reached=self.limit_reached,
            busy=self.busy,
            ingredients=list(self.ingredients),
            preferences=list(self.preferences),
            generated_recipes=list(self.candidates),
            selected_recipe_ids=list(self.selected),
            can_edit_inputs=not self.candidates and not self.busy,
            can_advance=(
                self.step < Step.REVIEW_SELECTED
                and not (self.step == Step.REVIEW_INPUTS and not self.candidates)
            ),
            can_go_back=self.step > Step.COLLECT_INGREDIENTS,
            can_generate=self.can_generate() and not self.busy,
            can_save=self.step == Step.REVIEW_SELECTED and bool(self.selected) and not self.busy,
        )

