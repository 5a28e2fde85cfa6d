# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from postboard.core.errors import NotFoundError
from postboard.core.models import COMMENTS, POSTS, USERS, Post, public_user, view_document
from postboard.infra.document_store import (
    create_document,
    find_by_id,
    find_many,
    populate,
    populate_many,
    to_object_id,
)

logger = logging.getLogger(__name__)

INDEX_LIMIT = 50


def _build_post(content: str, creator_id: Any, pic_name: str = "", pic_path: Optional[str] = None) -> Post:
    return Post(
        content=content or "",
        creator_id=to_object_id(creator_id),
        pic_name=(pic_name or "").strip() or None,
        pic_path=pic_path,
    )


def check_post(*, content: str, creator_id: Any) -> None:
    """Raise DocumentValidationError for a post that would be rejected, before any upload is stored."""
    _build_post(content, creator_id).validate()


def create_post(*, content: str, creator_id: Any, pic_name: str = "", pic_path: Optional[str] = None) -> Dict[str, Any]:
    doc = create_document(_build_post(content, creator_id, pic_name, pic_path))
    logger.info("Newly created post %s by %s", doc["_id"], creator_id)
    return doc


def get_post_detail(post_id: Any) -> Dict[str, Any]:
    """Fetch a post with its creator, its comments and each comment's author expanded.

    Raises NotFoundError for malformed ids and missing posts.
    """
    post = find_by_id(POSTS, post_id)
    if post is None:
        raise NotFoundError(f"Post '{post_id}' not found.")

    populate(post, "creatorId", USERS)
    populate(post, "comments", COMMENTS)
    populate_many(post["comments"], "authorId", USERS)

    out = view_document(post)
    out["creatorId"] = public_user(out.get("creatorId"))
    comments = []
    for c in out.get("comments") or []:
        cv = view_document(c)
        cv["authorId"] = public_user(cv.get("authorId"))
        cv["postId"] = str(cv.get("postId", ""))
        comments.append(cv)
    out["comments"] = comments
    return out


def list_recent_posts(limit: int = INDEX_LIMIT) -> List[Dict[str, Any]]:
    """Newest posts first, creators expanded."""
    posts = find_many(POSTS, {}, sort=[("createdAt", DESCENDING)], limit=limit)
    populate_many(posts, "creatorId", USERS)
    out = []
    for p in posts:
        pv = view_document(p)
        pv["creatorId"] = public_user(pv.get("creatorId"))
        pv["comment_count"] = len(pv.get("comments") or [])
        out.append(pv)
    return out
