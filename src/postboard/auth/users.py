# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from postboard.auth.passwords import hash_password, verify_password
from postboard.core.errors import AuthenticationError
from postboard.core.models import USERS, User
from postboard.infra.document_store import create_document, find_by_id, find_one

logger = logging.getLogger(__name__)

EMAIL_NOT_REGISTERED = "Email is not registered. Try with other email."
INCORRECT_PASSWORD = "Incorrect password."
DUPLICATE_USER = "Username and email need to be unique. Either username or email is already used."


def register_user(username: str, email: str, password: str, *, avatar: Optional[str] = None) -> Dict[str, Any]:
    """Hash the password and insert a new user.

    Raises DocumentValidationError or UniqueConstraintError from the store.
    """
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        avatar=avatar,
    )
    doc = create_document(user)
    logger.info("Newly created user: %s (%s)", doc["username"], doc["_id"])
    return doc


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    e = (email or "").strip().lower()
    if not e:
        return None
    return find_one(USERS, {"email": e})


def get_user(user_id: Any) -> Optional[Dict[str, Any]]:
    return find_by_id(USERS, user_id)


def authenticate(email: str, password: str) -> Dict[str, Any]:
    """Return the user document for valid credentials, else raise AuthenticationError."""
    u = get_user_by_email(email)
    if not u:
        raise AuthenticationError(EMAIL_NOT_REGISTERED)
    if not verify_password(u.get("passwordHash", ""), password):
        raise AuthenticationError(INCORRECT_PASSWORD)
    return u
