from ollama_client import OllamaClient

from app.core import config

ollama = OllamaClient(
    base_url=config.OLLAMA_BASE_URL,
    model=config.OLLAMA_MODEL,
    timeout_s=config.OLLAMA_TIMEOUT_S,
)
