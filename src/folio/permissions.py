# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from folio.auth.sessions import SessionManager
from folio.auth.tokens import TokenError
from folio.errors import Forbidden, Unauthenticated

security_logger = logging.getLogger("folio.security")

# Bearer token scheme; None when the header is missing, empty or not "Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentAccount:
    account_id: str


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentAccount:
    """Gate for protected routes: 401 without a bearer token, 403 with a bad or expired one."""
    if credentials is None:
        raise Unauthenticated()

    try:
        claims = get_sessions(request).decode(credentials.credentials)
    except TokenError as e:
        security_logger.warning("Token verification failed on %s: %s", request.url.path, e)
        raise Forbidden() from e

    account = CurrentAccount(account_id=claims.subject)
    request.state.account = account
    return account
