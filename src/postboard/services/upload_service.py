# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import re
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

logger = logging.getLogger(__name__)

UPLOAD_DIR = Path(os.getenv("POSTBOARD_UPLOAD_DIR", "public/avatar")).resolve()

# Uploaded files are served from this URL prefix (see the /avatar mount in app.py).
PUBLIC_PREFIX = "/avatar"

_SUFFIX_RE = re.compile(r"^\.[A-Za-z0-9]{1,8}$")


@dataclass(frozen=True)
class StoredFile:
    name: str
    path: Path

    @property
    def public_url(self) -> str:
        return f"{PUBLIC_PREFIX}/{self.name}"


def _generated_name(original: str) -> str:
    suffix = Path(original or "").suffix.lower()
    if not _SUFFIX_RE.match(suffix):
        suffix = ""
    return secrets.token_hex(16) + suffix


async def store_upload(upload: Optional[UploadFile], *, upload_dir: Optional[Path] = None) -> Optional[StoredFile]:
    """Write a single uploaded file to the upload directory under a generated name.

    Returns None when no file was sent (an empty file input still arrives as a
    part with an empty filename).
    """
    if upload is None or not upload.filename:
        return None

    target_dir = Path(upload_dir or UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    name = _generated_name(upload.filename)
    out_path = target_dir / name

    content = await upload.read()
    out_path.write_bytes(content)
    logger.info("Stored upload %r as %s (%d bytes)", upload.filename, out_path, len(content))
    return StoredFile(name=name, path=out_path)
