# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- Signed, time-limited bearer tokens (itsdangerous)
- Signup/signin and token inspection over the account store
"""
