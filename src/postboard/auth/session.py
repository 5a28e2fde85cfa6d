# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-side sessions.

The browser only holds a signed session id. The session document itself
(with the `currentUser` snapshot) lives in the `sessions` collection, so
destroying a session removes every piece of state at once.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from postboard.core.models import SESSION_MAX_AGE_SECONDS, SESSIONS, public_user
from postboard.infra.document_store import get_db

COOKIE_NAME = os.getenv("POSTBOARD_COOKIE_NAME", "postboard_session")
DEFAULT_MAX_AGE_SECONDS = SESSION_MAX_AGE_SECONDS


def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("SECRET_KEY") or os.getenv("POSTBOARD_SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY (or POSTBOARD_SECRET_KEY) is not set")
    salt = os.getenv("POSTBOARD_SESSION_SALT", "postboard.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


@dataclass(frozen=True)
class SessionData:
    session_id: str
    current_user: Dict[str, Any]


def sign_session(session_id: str) -> str:
    s = _serializer()
    return s.dumps({"sid": session_id})


def verify_session(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[str]:
    """Return the session id carried by a cookie token, or None if it is forged or expired."""
    if not token:
        return None
    s = _serializer()
    try:
        data = s.loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    sid = str((data or {}).get("sid") or "").strip() if isinstance(data, dict) else ""
    return sid or None


def create_session(user_doc: Dict[str, Any]) -> SessionData:
    sid = secrets.token_urlsafe(32)
    current_user = public_user(user_doc)
    get_db()[SESSIONS].insert_one(
        {
            "_id": sid,
            "currentUser": current_user,
            "createdAt": datetime.now(timezone.utc),
        }
    )
    return SessionData(session_id=sid, current_user=current_user)


def load_session(token: str) -> Optional[SessionData]:
    sid = verify_session(token)
    if not sid:
        return None
    doc = get_db()[SESSIONS].find_one({"_id": sid})
    if not doc or not doc.get("currentUser"):
        return None
    return SessionData(session_id=sid, current_user=doc["currentUser"])


def destroy_session(session_id: str) -> None:
    if session_id:
        get_db()[SESSIONS].delete_one({"_id": session_id})
