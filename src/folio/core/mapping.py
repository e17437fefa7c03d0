# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Mapping between resource kinds and store collections.

Centralising this avoids duplicating knowledge across routes/services and keeps the
create/list operations kind-agnostic.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

OWNER_FIELD = "userId"

# --- Resource mapping (kind -> collection + fields) ---
RESOURCES: Dict[str, Dict[str, Any]] = {
    "holdings": {
        "collection": "holdings",
        "label": "Holding",
        "fields": ("name", "qty", "avg", "price", "net", "day"),
        "required": (),
    },
    "positions": {
        "collection": "positions",
        "label": "Position",
        "fields": ("product", "name", "qty", "avg", "price", "net", "day", "isLoss"),
        "required": (),
    },
    "orders": {
        "collection": "orders",
        "label": "Order",
        "fields": ("name", "qty", "price", "mode"),
        "required": ("name", "qty", "price", "mode"),
    },
}


def meta_for_kind(kind: str) -> Optional[Dict[str, Any]]:
    """Return metadata for a resource kind (e.g. 'orders')."""
    return RESOURCES.get(str(kind or "").strip().lower())
