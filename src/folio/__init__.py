# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Folio: authenticated REST backend for a personal portfolio tracker."""

__version__ = "0.1.0"
