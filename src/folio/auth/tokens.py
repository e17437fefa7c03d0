# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Signed, time-limited bearer tokens.

A token is an itsdangerous URL-safe timed payload ``{"sub", "iat", "exp", "jti"}``.
Validity depends only on the signature and the expiry: nothing is stored server-side,
so there is no revocation.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

DEFAULT_SALT = "folio.session.v1"


class TokenError(Exception):
    """Token is malformed, tampered with or signed with another key."""


class TokenExpired(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: int
    expires_at: int


def _serializer(secret: str, salt: str) -> URLSafeTimedSerializer:
    if not secret:
        raise RuntimeError("Token signing secret is empty")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


def sign_token(
    secret: str,
    subject: str,
    *,
    ttl_seconds: int,
    salt: str = DEFAULT_SALT,
    now: Optional[float] = None,
) -> str:
    issued_at = int(time.time() if now is None else now)
    payload = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + int(ttl_seconds),
        # two tokens for the same subject within one second must still differ
        "jti": secrets.token_hex(8),
    }
    return _serializer(secret, salt).dumps(payload)


def verify_token(
    secret: str,
    token: str,
    *,
    ttl_seconds: int,
    salt: str = DEFAULT_SALT,
    now: Optional[float] = None,
) -> TokenClaims:
    if not token:
        raise TokenError("Empty token")
    s = _serializer(secret, salt)
    try:
        data = s.loads(token, max_age=ttl_seconds)
    except SignatureExpired as e:
        raise TokenExpired(str(e)) from e
    except BadData as e:
        raise TokenError(str(e)) from e

    if not isinstance(data, dict):
        raise TokenError("Unexpected token payload")
    subject = str(data.get("sub") or "").strip()
    if not subject:
        raise TokenError("Token has no subject")
    try:
        issued_at = int(data["iat"])
        expires_at = int(data["exp"])
    except (KeyError, TypeError, ValueError) as e:
        raise TokenError("Token has no validity window") from e

    current = time.time() if now is None else now
    if current >= expires_at:
        raise TokenExpired(f"Token expired at {expires_at}")
    return TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at)
