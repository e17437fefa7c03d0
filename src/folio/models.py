# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pydantic request/response bodies.

Field names follow the JSON the web client already sends (``isLoss``, ``userId``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST MODELS
# =============================================================================

class Credentials(BaseModel):
    """Body of /signup and /signin."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class HoldingCreate(BaseModel):
    name: Optional[str] = None
    qty: Optional[float] = None
    avg: Optional[float] = None
    price: Optional[float] = None
    net: Optional[float] = None
    day: Optional[str] = None


class PositionCreate(BaseModel):
    product: Optional[str] = None
    name: Optional[str] = None
    qty: Optional[float] = None
    avg: Optional[float] = None
    price: Optional[float] = None
    net: Optional[str] = None
    day: Optional[str] = None
    isLoss: Optional[bool] = None


class OrderCreate(BaseModel):
    # all four are required; presence is checked by record_service (MissingFields)
    name: Optional[str] = None
    qty: Optional[float] = None
    price: Optional[float] = None
    mode: Optional[str] = None


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class AccountOut(BaseModel):
    id: str
    username: str


class AuthResponse(BaseModel):
    message: str
    user: AccountOut
    token: str


class MessageResponse(BaseModel):
    message: str


class TokenStatusResponse(BaseModel):
    valid: bool
    userId: Optional[str] = None
    message: Optional[str] = None


class RecordResponse(BaseModel):
    message: str
    data: Dict[str, Any]


class RecordListResponse(BaseModel):
    message: str
    data: List[Dict[str, Any]]
