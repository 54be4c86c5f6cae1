# app/models/auth.py
from __future__ import annotations

from typing import Optional

from app.models.recipe import CamelModel, UserRecord


class SessionRequest(CamelModel):
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


class SessionResponse(CamelModel):
    token: str
    user: UserRecord
