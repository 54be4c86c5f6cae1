# app/core/auth.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import Unauthenticated
from app.core.request_context import set_user_id
from app.models.recipe import UserRecord
from app.services import users_repo

bearer = HTTPBearer(auto_error=False)


async def current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> UserRecord:
    """Every recipe, ingredient and workflow route runs as the session's user."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated(reason="missing_token")
    user = users_repo.user_for_token(credentials.credentials)
    if user is None:
        raise Unauthenticated(reason="invalid_token")
    set_user_id(user.id)
    return user
