# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from postboard.core.errors import NotFoundError
from postboard.core.models import COMMENTS, POSTS, Comment
from postboard.infra.document_store import create_document, delete_by_id, find_by_id, push_and_return, to_object_id

logger = logging.getLogger(__name__)


def check_comment(*, post_id: Any, author_id: Any, content: str) -> None:
    """Fail early, before an attached image is stored.

    Raises NotFoundError for a malformed or missing post and
    DocumentValidationError for a comment the store would reject.
    """
    post_oid = to_object_id(post_id)
    if post_oid is None or find_by_id(POSTS, post_oid) is None:
        raise NotFoundError(f"Post '{post_id}' not found.")
    Comment(content=content or "", post_id=post_oid, author_id=to_object_id(author_id)).validate()


def add_comment(
    *,
    post_id: Any,
    author_id: Any,
    content: str,
    image_name: str = "",
    image_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a comment and append its id to the post's comment list.

    The two writes touch two documents. If the append does not happen (missing
    post or store error), the new comment is deleted again so no orphan is left
    behind. Returns the updated post document.
    """
    post_oid = to_object_id(post_id)
    if post_oid is None:
        raise NotFoundError(f"Post '{post_id}' not found.")

    comment = Comment(
        content=content or "",
        post_id=post_oid,
        author_id=to_object_id(author_id),
        image_name=(image_name or "").strip() or None,
        image_path=image_path,
    )
    doc = create_document(comment)

    try:
        post = push_and_return(POSTS, post_oid, "comments", doc["_id"])
    except PyMongoError:
        _discard(doc["_id"])
        raise
    if post is None:
        _discard(doc["_id"])
        raise NotFoundError(f"Post '{post_id}' not found.")

    logger.info("Newly created comment %s on post %s (%d comments)", doc["_id"], post_oid, len(post["comments"]))
    return post


def _discard(comment_id: Any) -> None:
    try:
        delete_by_id(COMMENTS, comment_id)
        logger.warning("Removed comment %s: append to post failed", comment_id)
    except PyMongoError:
        logger.exception("Could not remove orphaned comment %s", comment_id)
