# app/clients/images.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from app.core import config


class ImageClient:
    """Text-to-image over an OpenAI-compatible /images/generations endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        model: str = "dall-e-3",
        size: str = "1024x1024",
        timeout_s: int = 120,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.model = model
        self.size = size
        self.timeout_s = timeout_s
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

    async def generate(self, prompt: str) -> Dict[str, Any]:
        payload = {"model": self.model, "prompt": prompt, "n": 1, "size": self.size}
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
            r = await client.post(self.url, json=payload, headers=self._headers())
            r.raise_for_status()
            return r.json()


def image_url(data: Dict[str, Any]) -> Optional[str]:
    items = data.get("data") or []
    if not items or not isinstance(items[0], dict):
        return None
    return items[0].get("url")


class MediaStore:
    """
    Copies generated images (their URLs expire) into MEDIA_DIR.
    Served under MEDIA_BASE_URL by the app.
    """

    def __init__(self, root: Path, base_url: str, timeout_s: int = 30, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.transport = transport

    def link_for(self, key: str) -> str:
        return f"{self.base_url}/{key}.png"

    def path_for(self, key: str) -> Path:
        root = self.root.resolve()
        target = (root / f"{key}.png").resolve()
        if target.parent != root:
            raise ValueError(f"media key escapes the media directory: {key!r}")
        return target

    async def store(self, *, source_url: Optional[str], key: str) -> bool:
        if not source_url:
            return False
        target = self.path_for(key)
        async with httpx.AsyncClient(timeout=self.timeout_s, follow_redirects=True, transport=self.transport) as client:
            r = await client.get(source_url)
            r.raise_for_status()
            body = r.content
        self.root.mkdir(parents=True, exist_ok=True)
        target.write_bytes(body)
        return True


images = ImageClient(
    url=config.IMAGE_API_URL,
    api_key=config.IMAGE_API_KEY,
    model=config.IMAGE_MODEL,
    size=config.IMAGE_SIZE,
    timeout_s=config.IMAGE_TIMEOUT_S,
)

media = MediaStore(root=config.MEDIA_DIR, base_url=config.MEDIA_BASE_URL)
