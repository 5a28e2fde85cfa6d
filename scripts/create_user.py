#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from postboard.auth.passwords import is_strong_password
from postboard.auth.users import DUPLICATE_USER, register_user
from postboard.core.errors import DocumentValidationError, UniqueConstraintError
from postboard.core.forms import WEAK_PASSWORD
from postboard.infra.document_store import DB_NAME, MONGO_URL


def main() -> None:
    username = input("Username: ").strip()
    email = input("Email: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not is_strong_password(pw1):
        raise SystemExit(WEAK_PASSWORD)

    try:
        doc = register_user(username, email, pw1)
    except DocumentValidationError as e:
        raise SystemExit(str(e))
    except UniqueConstraintError:
        raise SystemExit(DUPLICATE_USER)

    print(f"OK -> {doc['_id']} in {MONGO_URL}/{DB_NAME}")


if __name__ == "__main__":
    main()
