# app/routers/wizard.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends

from app.core.auth import current_user
from app.models.recipe import StatusResponse, UserRecord
from app.models.wizard import (
    AddIngredientRequest,
    PreferenceRequest,
    WizardSaveResponse,
    WizardStartRequest,
    WizardState,
)
from app.services import recipes
from app.services.wizards import registry

router = APIRouter(prefix="/wizard", tags=["wizard"])

# all handlers are async: workflow state and task cancellation stay on the event loop


@router.get("", response_model=WizardState)
async def wizard_get(user: UserRecord = Depends(current_user)) -> WizardState:
    return registry.get(user.id).state()


@router.delete("", response_model=StatusResponse)
async def wizard_close(user: UserRecord = Depends(current_user)) -> StatusResponse:
    registry.close(user.id)
    return StatusResponse(status="closed")


@router.post("/start", response_model=WizardState)
async def wizard_start(
    req: Optional[WizardStartRequest] = Body(default=None),
    user: UserRecord = Depends(current_user),
) -> WizardState:
    req = req or WizardStartRequest()
    names = list(req.ingredient_names)
    if req.from_recipe_id:
        names = recipes.ingredient_names(req.from_recipe_id) + names
    return registry.start(user.id, prefill=names).state()


# --- inputs ---

@router.post("/ingredients", response_model=WizardState)
async def wizard_add_ingredient(req: AddIngredientRequest, user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.add_ingredient(req.name, req.quantity)
    return wf.state()


@router.delete("/ingredients/{ingredient_id}", response_model=WizardState)
async def wizard_remove_ingredient(ingredient_id: str, user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.remove_ingredient(ingredient_id)
    return wf.state()


@router.post("/preferences", response_model=WizardState)
async def wizard_toggle_preference(req: PreferenceRequest, user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.toggle_preference(req.preference)
    return wf.state()


@router.delete("/preferences", response_model=WizardState)
async def wizard_clear_preferences(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.clear_preferences()
    return wf.state()


# --- navigation ---

@router.post("/advance", response_model=WizardState)
async def wizard_advance(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.advance()
    return wf.state()


@router.post("/back", response_model=WizardState)
async def wizard_back(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.back()
    return wf.state()


# --- actions ---

@router.post("/generate", response_model=WizardState)
async def wizard_generate(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    await wf.generate()
    return wf.state()


@router.post("/discard", response_model=WizardState)
async def wizard_discard(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.discard()
    return wf.state()


@router.post("/save", response_model=WizardSaveResponse)
async def wizard_save(user: UserRecord = Depends(current_user)) -> WizardSaveResponse:
    wf = registry.get(user.id)
    ids = await wf.save()
    return WizardSaveResponse(status="Recipes saved successfully", recipe_ids=ids, state=wf.state())


# --- selection ---

@router.post("/selection/all", response_model=WizardState)
async def wizard_select_all(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.select_all()
    return wf.state()


@router.delete("/selection", response_model=WizardState)
async def wizard_select_none(user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.select_none()
    return wf.state()


@router.post("/selection/{candidate_id}", response_model=WizardState)
async def wizard_toggle_selection(candidate_id: str, user: UserRecord = Depends(current_user)) -> WizardState:
    wf = registry.get(user.id)
    wf.toggle_selection(candidate_id)
    return wf.state()
