# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Document models for the three stored collections.

Each model knows its collection name, how to validate itself before an insert
and how to turn itself into the document written to the store. Reads come back
from the store as plain dicts; `public_user` and `view_document` shape them for
templates and for the session snapshot.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId

from postboard.core.errors import DocumentValidationError

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")

USERS = "users"
POSTS = "posts"
COMMENTS = "comments"
SESSIONS = "sessions"

# Signed cookies and stored sessions share one lifetime; the store drops older sessions.
SESSION_MAX_AGE_SECONDS = int(os.getenv("POSTBOARD_SESSION_MAX_AGE", "86400"))  # 24 hours


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class User:
    username: str
    email: str
    password_hash: str
    avatar: Optional[str] = None

    collection = USERS

    def __post_init__(self) -> None:
        self.username = (self.username or "").strip()
        self.email = (self.email or "").strip().lower()

    def validate(self) -> None:
        errors: Dict[str, str] = {}
        if _blank(self.username):
            errors["username"] = "Username is required."
        if _blank(self.email):
            errors["email"] = "Email is required."
        elif not EMAIL_RE.match(self.email):
            errors["email"] = "Please use a valid email address."
        if _blank(self.password_hash):
            errors["passwordHash"] = "Password is required."
        if errors:
            raise DocumentValidationError("User", errors)

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "username": self.username,
            "email": self.email,
            "passwordHash": self.password_hash,
        }
        if self.avatar:
            doc["avatar"] = self.avatar
        return doc


@dataclass
class Post:
    content: str
    creator_id: Optional[ObjectId]
    pic_name: Optional[str] = None
    pic_path: Optional[str] = None
    comments: List[ObjectId] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    collection = POSTS

    def validate(self) -> None:
        errors: Dict[str, str] = {}
        if _blank(self.content):
            errors["content"] = "Content is required."
        if not isinstance(self.creator_id, ObjectId):
            errors["creatorId"] = "Creator is required."
        if errors:
            raise DocumentValidationError("Post", errors)

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "content": self.content.strip(),
            "creatorId": self.creator_id,
            "comments": list(self.comments),
            "createdAt": self.created_at,
        }
        if self.pic_name:
            doc["picName"] = self.pic_name
        if self.pic_path:
            doc["picPath"] = self.pic_path
        return doc


@dataclass
class Comment:
    content: str
    post_id: Optional[ObjectId]
    author_id: Optional[ObjectId]
    image_name: Optional[str] = None
    image_path: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    collection = COMMENTS

    def validate(self) -> None:
        errors: Dict[str, str] = {}
        if _blank(self.content):
            errors["content"] = "Content is required."
        if not isinstance(self.post_id, ObjectId):
            errors["postId"] = "Post is required."
        if not isinstance(self.author_id, ObjectId):
            errors["authorId"] = "Author is required."
        if errors:
            raise DocumentValidationError("Comment", errors)

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "content": self.content.strip(),
            "postId": self.post_id,
            "authorId": self.author_id,
            "createdAt": self.created_at,
        }
        if self.image_name:
            doc["imageName"] = self.image_name
        if self.image_path:
            doc["imagePath"] = self.image_path
        return doc


def public_user(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """User document without its password hash, ids as strings."""
    if not doc:
        return None
    out = {k: v for k, v in doc.items() if k != "passwordHash"}
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out


def view_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Shallow copy with `_id` exposed as the string `id`."""
    if not doc:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out
