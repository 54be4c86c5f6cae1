from __future__ import annotations

import json

import httpx
import pytest

from app.core import config
from app.clients.images import ImageClient, MediaStore, image_url
from app.core.errors import UpstreamFailure, ValidationFailed
from app.models.recipe import Ingredient
from app.services import ai_log_repo, generation, recipes_repo

from factories import make_recipe, recipe_json
from fakes import FakeImages, FakeMedia, FakeOllama

INGREDIENTS = [Ingredient(id="1", name="Egg"), Ingredient(id="2", name="Milk"), Ingredient(id="3", name="Flour")]
BATCH = "0123456789abcdef0123456789abcdef"


def test_parse_candidates_tags_each_recipe_with_batch_and_index():
    text = json.dumps([recipe_json("A"), recipe_json("B"), recipe_json("C")])

    candidates = generation.parse_candidates(text, "batch1")

    assert [c.openai_prompt_id for c in candidates] == ["batch1-0", "batch1-1", "batch1-2"]
    assert [c.name for c in candidates] == ["A", "B", "C"]


def test_parse_candidates_accepts_array_wrapped_in_prose():
    text = "Here you go:\n```json\n" + json.dumps([recipe_json("A")]) + "\n```"

    assert generation.parse_candidates(text, "b")[0].name == "A"


@pytest.mark.parametrize(
    "text",
    [
        "no json here",
        "[]",
        json.dumps([{"name": "Half a recipe"}]),
        json.dumps([{**recipe_json("A"), "ingredients": []}]),
    ],
)
def test_parse_candidates_rejects_the_whole_batch(text):
    with pytest.raises(UpstreamFailure) as exc:
        generation.parse_candidates(text, "batch1")
    assert exc.value.detail["reason"] == "malformed_response"


def test_strip_batch_index():
    assert generation.strip_batch_index("batch1-2") == "batch1"
    assert generation.strip_batch_index("batch1") == "batch1"
    assert generation.strip_batch_index("batch-final") == "batch-final"


@pytest.mark.asyncio
async def test_generate_recipes_uses_audit_row_as_batch_id(db):
    ollama = FakeOllama(json.dumps([recipe_json("A")]))

    resp = await generation.generate_recipes(
        ingredients=INGREDIENTS, preferences=["Vegan"], user_id="u1", ollama_client=ollama
    )

    assert len(resp.openai_prompt_id) == 32
    assert json.loads(resp.recipes)[0]["name"] == "A"
    assert ai_log_repo.count_for_user("u1") == 1
    user_prompt = ollama.calls[0]["messages"][1]["content"]
    assert "Vegan" in user_prompt and "Flour" in user_prompt


@pytest.mark.asyncio
async def test_generate_recipes_requires_ingredients(db):
    with pytest.raises(ValidationFailed):
        await generation.generate_recipes(ingredients=[], preferences=[], user_id="u1", ollama_client=FakeOllama())


@pytest.mark.asyncio
async def test_generate_recipes_wraps_transport_errors(db):
    ollama = FakeOllama(RuntimeError("boom"))

    with pytest.raises(UpstreamFailure) as exc:
        await generation.generate_recipes(ingredients=INGREDIENTS, preferences=[], user_id="u1", ollama_client=ollama)
    assert exc.value.detail == {"error": "Failed to generate recipes", "reason": "generation_failed"}


@pytest.mark.asyncio
async def test_generate_images_fails_whole_batch(db):
    recipes = [make_recipe("Soup"), make_recipe("Cake")]

    with pytest.raises(UpstreamFailure):
        await generation.generate_images(recipes, "u1", FakeImages(fail_on="Cake"))


@pytest.mark.asyncio
async def test_save_recipes_strips_index_and_stores_images(db, alice):
    recipes = [make_recipe("Soup", prompt_id=f"{BATCH}-0"), make_recipe("Cake", prompt_id=f"{BATCH}-2")]
    media = FakeMedia()

    ids = await generation.save_recipes(recipes=recipes, user_id=alice.id, image_client=FakeImages(), media=media)

    stored = [recipes_repo.get_recipe(i) for i in ids]
    assert [r.name for r in stored] == ["Soup", "Cake"]
    assert {r.openai_prompt_id for r in stored} == {BATCH}
    assert [r.img_link for r in stored] == [f"/media/{BATCH}-0.png", f"/media/{BATCH}-2.png"]
    assert all(r.owner.id == alice.id for r in stored)


@pytest.mark.asyncio
async def test_failed_image_copy_falls_back_per_recipe(db, alice):
    recipes = [make_recipe("Soup", prompt_id=f"{BATCH}-0"), make_recipe("Cake", prompt_id=f"{BATCH}-1")]

    ids = await generation.save_recipes(
        recipes=recipes, user_id=alice.id, image_client=FakeImages(), media=FakeMedia(fail_keys={f"{BATCH}-1"})
    )

    links = [recipes_repo.get_recipe(i).img_link for i in ids]
    assert links == [f"/media/{BATCH}-0.png", config.FALLBACK_IMAGE]


@pytest.mark.asyncio
async def test_image_failure_saves_nothing(db, alice):
    recipes = [make_recipe("Soup", prompt_id=f"{BATCH}-0"), make_recipe("Cake", prompt_id=f"{BATCH}-1")]

    with pytest.raises(UpstreamFailure):
        await generation.save_recipes(
            recipes=recipes, user_id=alice.id, image_client=FakeImages(fail_on="Soup"), media=FakeMedia()
        )
    assert recipes_repo.list_all() == []


def _image_service(requests: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "POST":
            return httpx.Response(200, json={"data": [{"url": f"https://images.example/{len(requests)}.png"}]})
        return httpx.Response(200, content=b"\x89PNG")

    return httpx.MockTransport(handler)


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"data": [{"url": "https://x/1.png"}]}, "https://x/1.png"),
        ({"data": []}, None),
        ({"data": ["https://x/1.png"]}, None),
        ({}, None),
    ],
)
def test_image_url(data, expected):
    assert image_url(data) == expected


@pytest.mark.asyncio
async def test_image_client_posts_prompt_with_key():
    requests: list = []
    client = ImageClient("https://images.example/v1/images/generations", api_key="k", transport=_image_service(requests))

    data = await client.generate("a cake")

    assert image_url(data) == "https://images.example/1.png"
    sent = json.loads(requests[0].content)
    assert sent == {"model": "dall-e-3", "prompt": "a cake", "n": 1, "size": "1024x1024"}
    assert requests[0].headers["Authorization"] == "Bearer k"


@pytest.mark.asyncio
async def test_media_store_writes_under_root(tmp_path):
    store = MediaStore(root=tmp_path / "media", base_url="/media/", transport=_image_service([]))

    assert await store.store(source_url="https://images.example/1.png", key=f"{BATCH}-0") is True
    assert (tmp_path / "media" / f"{BATCH}-0.png").read_bytes() == b"\x89PNG"
    assert store.link_for(f"{BATCH}-0") == f"/media/{BATCH}-0.png"
    assert await store.store(source_url=None, key=f"{BATCH}-1") is False


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["../outside-0", "nested/inner-0", "/tmp/abs-0"])
async def test_media_store_refuses_keys_leaving_root(tmp_path, key):
    requests: list = []
    store = MediaStore(root=tmp_path / "media", base_url="/media", transport=_image_service(requests))

    with pytest.raises(ValueError):
        await store.store(source_url="https://images.example/1.png", key=key)

    assert requests == []
    assert list(tmp_path.rglob("*.png")) == []


@pytest.mark.asyncio
async def test_save_with_real_media_store(db, alice):
    requests: list = []
    transport = _image_service(requests)
    store = MediaStore(root=db / "media", base_url="/media", transport=transport)
    client = ImageClient("https://images.example/v1/images/generations", transport=transport)

    [rid] = await generation.save_recipes(
        recipes=[make_recipe("Soup", prompt_id=f"{BATCH}-3")], user_id=alice.id, image_client=client, media=store
    )

    assert recipes_repo.get_recipe(rid).img_link == f"/media/{BATCH}-3.png"
    assert (db / "media" / f"{BATCH}-3.png").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt_id", ["../outside-0", f"{BATCH}-x", f"{BATCH}", "batch1-0"])
async def test_save_rejects_malformed_prompt_ids_before_any_call(db, alice, prompt_id):
    requests: list = []
    transport = _image_service(requests)
    store = MediaStore(root=db / "media", base_url="/media", transport=transport)
    client = ImageClient("https://images.example/v1/images/generations", transport=transport)

    with pytest.raises(ValidationFailed) as exc:
        await generation.save_recipes(
            recipes=[make_recipe("Soup", prompt_id=prompt_id)], user_id=alice.id, image_client=client, media=store
        )

    assert exc.value.detail["reason"] == "invalid_prompt_id"
    assert requests == []
    assert list(db.rglob("*.png")) == []
    assert recipes_repo.list_all() == []


@pytest.mark.asyncio
async def test_save_without_prompt_id_gets_fresh_key(db, alice):
    media = FakeMedia()

    [rid] = await generation.save_recipes(
        recipes=[make_recipe("Soup")], user_id=alice.id, image_client=FakeImages(), media=media
    )

    [key] = media.stored
    assert len(key) == 32
    assert recipes_repo.get_recipe(rid).openai_prompt_id == key
