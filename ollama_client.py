import httpx
from typing import Any, Dict, List, Optional

class OllamaClient:
    def __init__(self, base_url: str = "http://127.0.0.1:11434", model: str = "qwen2.5:14b", timeout_s: int = 180):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.2,
        timeout_s: Optional[int] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Returns the raw Ollama response; the caller keeps it for the audit log."""
        options: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
            "options": options,
        }

        async with httpx.AsyncClient(timeout=timeout_s or self.timeout_s) as client:
            r = await client.post(f"{self.base_url}/api/chat", json=payload)
            r.raise_for_status()
            return r.json()

    async def ping(self, timeout_s: float = 2.0) -> None:
        # /api/tags is a cheap health-ish endpoint for Ollama
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            r = await client.get(f"{self.base_url}/api/tags")
            r.raise_for_status()


def message_content(data: Dict[str, Any]) -> str:
    # Ollama returns: {"message": {"role": "...", "content": "..."}, ...}
    return (data.get("message") or {}).get("content") or ""
