# app/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Response, status

from app.services.health import check_db, check_media, check_ollama, version_payload

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    # Liveness only
    return {"status": "ok", **version_payload()}


@router.get("/health/ready")
async def ready(response: Response):
    checks = {"db": check_db(), "ollama": await check_ollama(), "media": check_media()}

    overall = "ok"
    http_status = status.HTTP_200_OK

    # recipes DB is required; model server and media store only degrade
    if checks["db"]["status"] != "ok":
        overall = "fail"
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    elif any(c["status"] != "ok" for c in checks.values()):
        overall = "degraded"

    response.status_code = http_status
    return {"status": overall, "checks": checks, **version_payload()}


@router.get("/version")
def version():
    return version_payload()
