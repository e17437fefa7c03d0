# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError


def make_hasher(time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> PasswordHasher:
    return PasswordHasher(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)


_PH = make_hasher()


def hash_password(plain: str, *, hasher: PasswordHasher = _PH) -> str:
    if not plain:
        raise ValueError("Empty password")
    return hasher.hash(plain)


def verify_password(hash_value: str, plain: str, *, hasher: PasswordHasher = _PH) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return hasher.verify(hash_value, plain)
    except (VerifyMismatchError, InvalidHashError):
        return False
