from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.core import config
from app.core.logging import setup_logging
from app.core.middleware import RequestLoggingMiddleware
from app.routers import auth, health, ingredients, recipes, wizard
from app.services import common, ingredients_repo
from app.services.wizards import registry

log = logging.getLogger("recipe_bridge.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    common.init_db()
    seeded = ingredients_repo.seed_catalog()
    log.info("startup", extra={"db": str(config.RECIPES_DB), "seeded_ingredients": seeded})
    yield
    registry.close_all()


def create_app() -> FastAPI:
    app = FastAPI(title="Recipe Bridge", version=config.APP_VERSION, lifespan=lifespan)
    app.include_router(auth.router)
    app.include_router(recipes.router)
    app.include_router(ingredients.router)
    app.include_router(wizard.router)
    app.include_router(health.router)

    config.MEDIA_DIR.mkdir(parents=True, exist_ok=True)
    app.mount(config.MEDIA_BASE_URL, StaticFiles(directory=str(config.MEDIA_DIR)), name="media")

    setup_logging()

    app.add_middleware(RequestLoggingMiddleware)

    return app

app = create_app()
