# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification and the password strength rule (argon2)
- Signup and login against the users collection
- Server-side sessions referenced by a signed cookie (itsdangerous)
"""
