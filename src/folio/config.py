# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime configuration.

Everything the service needs from the environment is read once, here, and handed
to ``create_app`` as a ``Settings`` instance.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

# Anchor the default store path to the project root (works well with editable installs).
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_STORE_PATH = BASE_DIR / "data" / "folio.yml"
MEMORY_STORE = ":memory:"

TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    store_path: Optional[Path] = DEFAULT_STORE_PATH
    host: str = "0.0.0.0"
    port: int = 3002
    reload: bool = False
    token_ttl_seconds: int = TOKEN_TTL_SECONDS
    token_salt: str = "folio.session.v1"
    hash_time_cost: int = 3
    hash_memory_cost: int = 65536
    hash_parallelism: int = 4
    cors_origins: Tuple[str, ...] = field(default=("*",))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        secret = env.get("FOLIO_SECRET_KEY") or env.get("JWT_SECRET")
        if not secret:
            raise RuntimeError("Missing FOLIO_SECRET_KEY (or JWT_SECRET) in environment")

        raw_store = (env.get("FOLIO_STORE_PATH") or "").strip()
        if raw_store == MEMORY_STORE:
            store_path = None
        elif raw_store:
            store_path = Path(raw_store).resolve()
        else:
            store_path = DEFAULT_STORE_PATH

        origins = tuple(
            o.strip() for o in (env.get("FOLIO_CORS_ORIGINS") or "*").split(",") if o.strip()
        )

        return cls(
            secret_key=secret,
            store_path=store_path,
            host=env.get("FOLIO_HOST", "0.0.0.0"),
            port=int(env.get("FOLIO_PORT") or env.get("PORT") or "3002"),
            reload=_truthy(env.get("FOLIO_RELOAD")),
            token_ttl_seconds=int(env.get("FOLIO_TOKEN_TTL", str(TOKEN_TTL_SECONDS))),
            token_salt=env.get("FOLIO_TOKEN_SALT", "folio.session.v1"),
            hash_time_cost=int(env.get("FOLIO_HASH_TIME_COST", "3")),
            hash_memory_cost=int(env.get("FOLIO_HASH_MEMORY_COST", "65536")),
            hash_parallelism=int(env.get("FOLIO_HASH_PARALLELISM", "4")),
            cors_origins=origins or ("*",),
            log_level=(env.get("FOLIO_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
