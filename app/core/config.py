import os
from pathlib import Path

# Project root = ~/recipe-bridge
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
RECIPES_DB = Path(os.getenv("RECIPES_DB", str(DATA_DIR / "recipes.sqlite3")))
SEED_INGREDIENTS_PATH = DATA_DIR / "ingredients_seed.json"

# Generated images are copied here and served from MEDIA_BASE_URL
MEDIA_DIR = Path(os.getenv("MEDIA_DIR", str(DATA_DIR / "media")))
MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "/media")
FALLBACK_IMAGE = os.getenv("FALLBACK_IMAGE", "/logo.svg")

# --- Version / build metadata (override via systemd env) ---
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
GIT_SHA = os.getenv("GIT_SHA", "unknown")
BUILD_DATE = os.getenv("BUILD_DATE", "unknown")

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "qwen2.5:14b")
OLLAMA_VALIDATOR_MODEL = os.getenv("OLLAMA_VALIDATOR_MODEL", OLLAMA_MODEL)
OLLAMA_TIMEOUT_S = int(os.getenv("OLLAMA_TIMEOUT_S", "180"))

# Any OpenAI-compatible images endpoint (POST {prompt, n, size} -> {data: [{url}]})
IMAGE_API_URL = os.getenv("IMAGE_API_URL", "http://127.0.0.1:8188/v1/images/generations")
IMAGE_API_KEY = os.getenv("IMAGE_API_KEY", "")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "dall-e-3")
IMAGE_SIZE = os.getenv("IMAGE_SIZE", "1024x1024")
IMAGE_TIMEOUT_S = int(os.getenv("IMAGE_TIMEOUT_S", "120"))

# Cumulative AI calls a single user may make before the workflow locks
API_REQUEST_LIMIT = int(os.getenv("API_REQUEST_LIMIT", "50"))

MIN_INGREDIENTS = 3
MAX_INGREDIENT_NAME_LENGTH = 20
MAX_SUGGESTIONS = 3
RECIPES_PER_BATCH = int(os.getenv("RECIPES_PER_BATCH", "3"))

DIETARY_PREFERENCES = ("Vegetarian", "Vegan", "Gluten-Free", "Keto", "Paleo")

# Issues session tokens without an identity provider. Never enable in production.
ENABLE_DEV_LOGIN = os.getenv("ENABLE_DEV_LOGIN", "false").lower() in ("true", "1", "yes")

SYSTEM_RECIPES = """You are a recipe generator.

RULES:
- Output ONLY a valid JSON array.
- Do NOT include markdown, comments, or explanations.
- Do NOT include text outside the JSON array.
- Instructions are ordered but do NOT include step numbers.

Each element MUST match:
{
  "name": "Recipe Name",
  "ingredients": [{"name": "Ingredient", "quantity": "quantity and unit"}],
  "instructions": ["Step", "Step"],
  "dietaryPreference": ["Preference"],
  "additionalInformation": {
    "tips": "string",
    "variations": "string",
    "servingSuggestions": "string",
    "nutritionalInformation": "string"
  }
}
"""

SYSTEM_INGREDIENT_VALIDATION = """You are a food ingredient validation assistant.

Return ONLY valid JSON. No markdown, no code blocks.

Schema:
{ "isValid": true | false, "possibleVariations": ["string"] }

Rules:
- "isValid" is true if the ingredient is commonly used in recipes.
- "possibleVariations" holds 2 or 3 real, commonly used variations or related
  ingredients, or an empty list if there are none.
"""
