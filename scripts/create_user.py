#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from folio.app import build_sessions, build_store
from folio.config import Settings, configure_logging
from folio.errors import FolioError


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    username = input("Username: ").strip()
    if not username:
        raise SystemExit("Username is required")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not pw1:
        raise SystemExit("Password is required")

    store = build_store(settings)
    sessions = build_sessions(settings, store)
    try:
        result = sessions.signup(username, pw1)
    except FolioError as e:
        raise SystemExit(e.message)

    print(f"OK -> {result.account.username} ({result.account.id}) in {store.path or 'memory'}")


if __name__ == "__main__":
    main()
