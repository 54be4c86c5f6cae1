# app/core/request_context.py
from __future__ import annotations

import contextvars
from typing import Optional

request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
user_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("user_id", default=None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def set_request_id(value: Optional[str]) -> contextvars.Token:
    return request_id_ctx.set(value)


def get_user_id() -> Optional[str]:
    return user_id_ctx.get()


def set_user_id(value: Optional[str]) -> contextvars.Token:
    # set by the auth dependency once the bearer token resolves
    return user_id_ctx.set(value)
