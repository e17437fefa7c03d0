# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy. Each error carries the HTTP status it maps to at the request boundary."""

from __future__ import annotations


class FolioError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = "") -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateAccount(FolioError):
    status_code = 400
    default_message = "User already exists"


class AccountNotFound(FolioError):
    status_code = 400
    default_message = "User does not exist"


class InvalidCredential(FolioError):
    status_code = 400
    default_message = "Password is incorrect"


class MissingFields(FolioError):
    status_code = 400
    default_message = "All fields are required"


class Unauthenticated(FolioError):
    status_code = 401
    default_message = "No token provided"


class Forbidden(FolioError):
    status_code = 403
    default_message = "Invalid or expired token"


class InternalError(FolioError):
    """Unexpected store/runtime failure. The message is never sent to clients."""

    status_code = 500
