from __future__ import annotations

import inspect
import json

import pytest

import app.routers.wizard as wizard_router
import app.services.wizards as wizards
from app.services import recipes_repo

from factories import auth_headers, make_recipe, recipe_json
from fakes import FakeImages, FakeMedia, FakeOllama


@pytest.fixture
def fresh_registry(monkeypatch: pytest.MonkeyPatch):
    registry = wizards.WorkflowRegistry()
    monkeypatch.setattr(wizard_router, "registry", registry)
    return registry


@pytest.fixture
def fake_ai(monkeypatch: pytest.MonkeyPatch):
    ollama = FakeOllama(json.dumps([recipe_json("A"), recipe_json("B"), recipe_json("C")]))
    monkeypatch.setattr(wizards, "ollama", ollama)
    monkeypatch.setattr(wizards, "images", FakeImages())
    monkeypatch.setattr(wizards, "media", FakeMedia())
    return ollama


def _fill(client, headers, *names):
    for n in names:
        r = client.post("/wizard/ingredients", json={"name": n}, headers=headers)
        assert r.status_code == 200, r.json()
    return r.json()


def test_full_creation_flow(client, alice, fresh_registry, fake_ai):
    headers = auth_headers(alice)

    state = _fill(client, headers, "egg", "Milk", "Flour")
    assert [i["name"] for i in state["ingredients"]] == ["Egg", "Milk", "Flour"]

    client.post("/wizard/advance", headers=headers)
    client.post("/wizard/preferences", json={"preference": "Vegetarian"}, headers=headers)
    state = client.post("/wizard/advance", headers=headers).json()
    assert state["stepName"] == "Review and Create Recipes"
    assert state["canGenerate"] is True

    state = client.post("/wizard/generate", headers=headers).json()
    assert state["step"] == 3
    ids = [r["openaiPromptId"] for r in state["generatedRecipes"]]
    assert len(ids) == 3

    client.post(f"/wizard/selection/{ids[0]}", headers=headers)
    client.post(f"/wizard/selection/{ids[2]}", headers=headers)
    state = client.post("/wizard/advance", headers=headers).json()
    assert state["canSave"] is True

    r = client.post("/wizard/save", headers=headers)

    assert r.status_code == 200
    body = r.json()
    assert body["state"]["step"] == 0
    assert body["state"]["ingredients"] == []
    stored = [recipes_repo.get_recipe(i) for i in body["recipeIds"]]
    assert [s.name for s in stored] == ["A", "C"]
    assert {s.openai_prompt_id for s in stored} == {ids[0].rsplit("-", 1)[0]}


def test_unknown_ingredient_is_rejected(client, alice, fresh_registry):
    r = client.post("/wizard/ingredients", json={"name": "Unobtainium"}, headers=auth_headers(alice))

    assert r.status_code == 400
    assert r.json()["detail"]["reason"] == "unknown_ingredient"


def test_generate_with_two_ingredients_is_400(client, alice, fresh_registry, fake_ai):
    headers = auth_headers(alice)
    _fill(client, headers, "Egg", "Milk")
    client.post("/wizard/advance", headers=headers)
    client.post("/wizard/advance", headers=headers)

    r = client.post("/wizard/generate", headers=headers)

    assert r.status_code == 400
    assert fake_ai.calls == []


def test_start_prefills_from_recipe(client, alice, fresh_registry):
    [rid] = recipes_repo.insert_recipes(
        owner_id=alice.id,
        recipes=[make_recipe("Stew", ["Beef", "Carrot", "Onion"])],
        img_links=["/logo.svg"],
    )

    r = client.post("/wizard/start", json={"fromRecipeId": rid}, headers=auth_headers(alice))

    assert [i["name"] for i in r.json()["ingredients"]] == ["Beef", "Carrot", "Onion"]


def test_close_then_get_starts_over(client, alice, fresh_registry):
    headers = auth_headers(alice)
    _fill(client, headers, "Egg")

    assert client.delete("/wizard", headers=headers).json() == {"status": "closed"}
    assert client.get("/wizard", headers=headers).json()["ingredients"] == []


def test_wizard_requires_login(client, fresh_registry):
    assert client.get("/wizard").status_code == 401


def test_wizard_handlers_run_on_the_event_loop():
    endpoints = [r.endpoint for r in wizard_router.router.routes]

    assert endpoints
    assert all(inspect.iscoroutinefunction(e) for e in endpoints)
