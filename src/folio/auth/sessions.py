# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from argon2 import PasswordHasher
from fastapi.security.utils import get_authorization_scheme_param

from folio.auth.passwords import hash_password, make_hasher, verify_password
from folio.auth.tokens import DEFAULT_SALT, TokenClaims, TokenError, sign_token, verify_token
from folio.config import TOKEN_TTL_SECONDS
from folio.errors import AccountNotFound, DuplicateAccount, InternalError, InvalidCredential
from folio.infra.store import DocumentStore, DuplicateKeyError, StoreError

logger = logging.getLogger("folio.sessions")
security_logger = logging.getLogger("folio.security")

ACCOUNTS = "accounts"


@dataclass(frozen=True)
class AccountSummary:
    id: str
    username: str


@dataclass(frozen=True)
class SessionResult:
    account: AccountSummary
    token: str


@dataclass(frozen=True)
class TokenStatus:
    valid: bool
    user_id: Optional[str] = None
    message: str = ""


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token of ``Bearer <token>`` (scheme is case-insensitive), else None.

    Splits the header the same way ``HTTPBearer`` does, so /verifyToken and the
    enforcing gate agree on what counts as a bearer token.
    """
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token:
        return None
    return token


class SessionManager:
    """Signup, signin and token inspection over an account collection."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        secret_key: str,
        token_ttl_seconds: int = TOKEN_TTL_SECONDS,
        token_salt: str = DEFAULT_SALT,
        hasher: Optional[PasswordHasher] = None,
    ) -> None:
        if not secret_key:
            raise RuntimeError("SessionManager needs a signing secret")
        self.store = store
        self.secret_key = secret_key
        self.token_ttl_seconds = token_ttl_seconds
        self.token_salt = token_salt
        self.hasher = hasher or make_hasher()

    def issue_token(self, account_id: str, *, now: Optional[float] = None) -> str:
        return sign_token(
            self.secret_key,
            account_id,
            ttl_seconds=self.token_ttl_seconds,
            salt=self.token_salt,
            now=now,
        )

    def decode(self, token: str, *, now: Optional[float] = None) -> TokenClaims:
        """Verify signature and expiry. Raises TokenError / TokenExpired."""
        return verify_token(
            self.secret_key,
            token,
            ttl_seconds=self.token_ttl_seconds,
            salt=self.token_salt,
            now=now,
        )

    def _find_account(self, username: str) -> Optional[dict]:
        try:
            return self.store.find_one(ACCOUNTS, username=username)
        except StoreError as e:
            raise InternalError(f"Account lookup failed: {e}") from e

    def signup(self, username: str, password: str) -> SessionResult:
        if self._find_account(username) is not None:
            raise DuplicateAccount()

        hashed = hash_password(password, hasher=self.hasher)
        try:
            saved = self.store.insert_one(ACCOUNTS, {"username": username, "password": hashed})
        except DuplicateKeyError as e:
            # another signup for the same username won between the check and the insert
            raise DuplicateAccount() from e
        except StoreError as e:
            raise InternalError(f"Account insert failed: {e}") from e

        account = AccountSummary(id=saved["_id"], username=saved["username"])
        logger.info("Account created: %s (%s)", account.username, account.id)
        return SessionResult(account=account, token=self.issue_token(account.id))

    def signin(self, username: str, password: str) -> SessionResult:
        doc = self._find_account(username)
        if doc is None:
            raise AccountNotFound()
        if not verify_password(doc.get("password") or "", password, hasher=self.hasher):
            security_logger.warning("Wrong password for %s", username)
            raise InvalidCredential()

        account = AccountSummary(id=doc["_id"], username=doc["username"])
        logger.info("Login successful for %s", account.username)
        return SessionResult(account=account, token=self.issue_token(account.id))

    def verify_token(self, authorization: Optional[str], *, now: Optional[float] = None) -> TokenStatus:
        """Report on the token in an Authorization header. Never raises for bad input."""
        if not authorization:
            return TokenStatus(valid=False, message="No token provided")
        token = extract_bearer(authorization)
        if not token:
            return TokenStatus(valid=False, message="Token missing")
        try:
            claims = self.decode(token, now=now)
        except TokenError as e:
            security_logger.warning("Token invalid or expired: %s", e)
            return TokenStatus(valid=False, message="Invalid or expired token")
        return TokenStatus(valid=True, user_id=claims.subject)
