# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import HTTPException, Request

from postboard.auth.session import COOKIE_NAME, SessionData, load_session


@dataclass(frozen=True)
class CurrentUser:
    id: str
    username: str
    email: str
    avatar: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snap: Dict[str, Any]) -> "CurrentUser":
        return cls(
            id=str(snap.get("id") or ""),
            username=str(snap.get("username") or ""),
            email=str(snap.get("email") or ""),
            avatar=snap.get("avatar") or None,
        )


def load_session_from_request(request: Request) -> Optional[SessionData]:
    token = request.cookies.get(COOKIE_NAME, "")
    return load_session(token)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    sess = getattr(request.state, "session", None)
    if sess is None:
        return None
    return CurrentUser.from_snapshot(sess.current_user)


def require_user(request: Request) -> CurrentUser:
    """Route guard: anonymous clients are sent to the login page."""
    u = current_user_optional(request)
    if u:
        return u
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    loc = f"/login?next={quote(next_url, safe='/')}"
    raise HTTPException(status_code=303, headers={"Location": loc})


def cookie_settings() -> dict:
    secure = os.getenv("POSTBOARD_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
