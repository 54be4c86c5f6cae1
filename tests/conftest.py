from __future__ import annotations

import pytest

from app.core import config
from app.services import common, ingredients_repo, users_repo

CATALOG = ["Egg", "Tomato", "Flour", "Milk", "Cheese", "Basil"]


@pytest.fixture
def db(tmp_path, monkeypatch: pytest.MonkeyPatch):
    # every test gets its own SQLite file; config paths are read at call time
    monkeypatch.setattr(config, "RECIPES_DB", tmp_path / "recipes.sqlite3")
    monkeypatch.setattr(config, "SEED_INGREDIENTS_PATH", tmp_path / "no_seed.json")
    monkeypatch.setattr(config, "MEDIA_DIR", tmp_path / "media")
    common.init_db()
    ingredients_repo.seed_catalog(CATALOG)
    return tmp_path


@pytest.fixture
def alice(db):
    return users_repo.upsert_user(name="Alice", email="alice@example.com", image="/a.png")


@pytest.fixture
def bob(db):
    return users_repo.upsert_user(name="Bob", email="bob@example.com")


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from app.main import create_app

    with TestClient(create_app()) as c:
        yield c
