# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception types shared by forms, the document store and the routes."""

from __future__ import annotations

from typing import Dict


class FormError(ValueError):
    """Submitted form data is missing or does not satisfy an input rule."""


class DocumentValidationError(ValueError):
    """A document failed its model validation before being written."""

    def __init__(self, model: str, errors: Dict[str, str]):
        self.model = model
        self.errors = dict(errors)
        details = ", ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"{model} validation failed: {details}")


class UniqueConstraintError(ValueError):
    """A unique index rejected the document (duplicate key)."""


class NotFoundError(LookupError):
    """A referenced document does not exist."""


class AuthenticationError(ValueError):
    """Login rejected: unknown e-mail or wrong password."""
