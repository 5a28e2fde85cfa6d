# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed request bodies.

Every handler builds one of these from its form fields and calls `validate()`
before any store or hasher call. Required/optional fields are declared here,
not discovered from the raw request body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from postboard.auth.passwords import is_strong_password
from postboard.core.errors import FormError

MISSING_SIGNUP_FIELDS = (
    "All fields are mandatory. Please provide your username, email, avatar and password."
)
WEAK_PASSWORD = (
    "Password needs to have at least 6 chars and must contain at least one number, "
    "one lowercase and one uppercase letter."
)
MISSING_LOGIN_FIELDS = "Please enter both, email and password to login."


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


@dataclass
class SignupForm:
    username: str
    email: str
    password: str
    avatar: Optional[UploadFile] = None

    def validate(self) -> None:
        if not _clean(self.username) or not _clean(self.email) or not self.password:
            raise FormError(MISSING_SIGNUP_FIELDS)
        if not is_strong_password(self.password):
            raise FormError(WEAK_PASSWORD)

    @property
    def has_avatar(self) -> bool:
        return _has_file(self.avatar)


@dataclass
class LoginForm:
    email: str
    password: str
    next: str = ""

    def validate(self) -> None:
        if not _clean(self.email) or not self.password:
            raise FormError(MISSING_LOGIN_FIELDS)

    def safe_next(self, default: str) -> str:
        """Only local absolute paths are accepted as a post-login target."""
        n = _clean(self.next)
        if n.startswith("/") and not n.startswith("//") and "\\" not in n:
            return n
        return default


@dataclass
class PostForm:
    content: str
    pic_name: str = ""
    pic_path: Optional[UploadFile] = None

    @property
    def has_picture(self) -> bool:
        return _has_file(self.pic_path)


@dataclass
class CommentForm:
    content: str
    image_name: str = ""
    image_path: Optional[UploadFile] = None

    @property
    def has_image(self) -> bool:
        return _has_file(self.image_path)
