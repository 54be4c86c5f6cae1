# app/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials

from app.core import config
from app.core.auth import bearer, current_user
from app.core.errors import NotFound, ValidationFailed
from app.models.auth import SessionRequest, SessionResponse
from app.models.recipe import StatusResponse, UserRecord
from app.services import users_repo

log = logging.getLogger("recipe_bridge.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/session", response_model=SessionResponse)
def create_session(req: SessionRequest) -> SessionResponse:
    # Stand-in for the external identity provider; off unless ENABLE_DEV_LOGIN is set
    if not config.ENABLE_DEV_LOGIN:
        raise NotFound(reason="dev_login_disabled")
    if "@" not in req.email:
        raise ValidationFailed("A valid email is required", reason="invalid_email")

    user = users_repo.upsert_user(name=req.name, email=req.email, image=req.image)
    token = users_repo.create_session(user.id)
    log.info("session_created", extra={"user_id": user.id})
    return SessionResponse(token=token, user=user)


@router.get("/me", response_model=UserRecord)
def me(user: UserRecord = Depends(current_user)) -> UserRecord:
    return user


@router.delete("/session", response_model=StatusResponse)
def end_session(
    user: UserRecord = Depends(current_user),
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
) -> StatusResponse:
    users_repo.delete_session(credentials.credentials)
    log.info("session_deleted", extra={"user_id": user.id})
    return StatusResponse(status="ok")
