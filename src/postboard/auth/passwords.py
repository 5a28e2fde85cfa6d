# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Fixed work factor: 10 passes over memory per hash.
HASH_ROUNDS = 10

_PH = PasswordHasher(time_cost=HASH_ROUNDS)

# At least 6 chars with one digit, one lowercase and one uppercase letter.
STRONG_PASSWORD_RE = re.compile(r"(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{6,}", re.ASCII)


def is_strong_password(plain: str) -> bool:
    return bool(STRONG_PASSWORD_RE.search(plain or ""))


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False
