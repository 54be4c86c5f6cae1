from __future__ import annotations

import httpx
import pytest

import app.routers.ingredients as ingredients_router
from app.clients.recipe_book import RecipeBookClient, RecipeBookError
from app.main import create_app
from app.services import recipes_repo, users_repo

from factories import make_recipe
from fakes import FakeOllama


@pytest.fixture
def book(db, alice):
    transport = httpx.ASGITransport(app=create_app())
    return RecipeBookClient("http://testserver", users_repo.create_session(alice.id), transport=transport)


def _seed(owner, *names):
    return recipes_repo.insert_recipes(
        owner_id=owner.id,
        recipes=[make_recipe(n, diets=["Vegan"] if n == "Salad" else []) for n in names],
        img_links=["/logo.svg" for _ in names],
    )


@pytest.mark.asyncio
async def test_like_is_merged_into_local_list(book, alice, bob):
    ids = _seed(bob, "Soup", "Salad", "Stew")
    await book.load()

    updated = await book.toggle_like(ids[1])

    assert updated.liked is True
    assert [r.id for r in book.recipes] == ids
    assert [r.liked for r in book.recipes] == [False, True, False]


@pytest.mark.asyncio
async def test_delete_drops_local_entry(book, alice):
    ids = _seed(alice, "Soup", "Salad", "Stew")
    await book.load(mine=True)

    await book.delete(ids[0])

    assert [r.id for r in book.recipes] == ids[1:]


@pytest.mark.asyncio
async def test_delete_of_foreign_recipe_raises_with_reason(book, bob):
    [rid] = _seed(bob, "Soup")
    await book.load()

    with pytest.raises(RecipeBookError) as exc:
        await book.delete(rid)

    assert exc.value.status_code == 403
    assert exc.value.reason == "not_owner"
    assert [r.id for r in book.recipes] == [rid]


@pytest.mark.asyncio
async def test_visible_filters_local_copy(book, alice):
    _seed(alice, "Soup", "Salad", "Stew")
    await book.load()

    assert [r.name for r in book.visible("vegan")] == ["Salad"]
    assert len(book.visible("")) == 3


@pytest.mark.asyncio
async def test_propose_duplicate_is_gated_locally(book, monkeypatch: pytest.MonkeyPatch):
    ollama = FakeOllama()
    monkeypatch.setattr(ingredients_router, "ollama", ollama)
    await book.load_catalog()

    result = await book.propose_ingredient("tomatoes")

    assert result.status == "duplicate"
    assert ollama.calls == []


@pytest.mark.asyncio
async def test_propose_new_ingredient_updates_catalog(book, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(ingredients_router, "ollama", FakeOllama({"isValid": True, "possibleVariations": []}))
    await book.load_catalog()

    result = await book.propose_ingredient("saffron")

    assert result.status == "valid"
    assert "Saffron" in [e.name for e in book.catalog]
