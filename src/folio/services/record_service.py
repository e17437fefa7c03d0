# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from folio.core.mapping import OWNER_FIELD, meta_for_kind
from folio.errors import InternalError, MissingFields
from folio.infra.store import DocumentStore, StoreError

logger = logging.getLogger("folio.records")


def _require_meta(kind: str) -> Dict[str, Any]:
    meta = meta_for_kind(kind)
    if not meta:
        raise ValueError(f"Unknown resource kind '{kind}'. Use holdings, positions or orders.")
    return meta


def create_record(
    store: DocumentStore, *, kind: str, owner_id: str, fields: Mapping[str, Any]
) -> Dict[str, Any]:
    """Create a record of the given kind owned by owner_id.

    - Only the kind's declared fields are written; anything else is dropped.
    - Required fields must be present and truthy (a qty of 0 counts as missing).
    - The owner always comes from the caller's identity, never from ``fields``.
    """
    meta = _require_meta(kind)

    missing = [f for f in meta["required"] if not fields.get(f)]
    if missing:
        raise MissingFields()

    row = {f: fields.get(f) for f in meta["fields"]}
    row[OWNER_FIELD] = owner_id

    try:
        saved = store.insert_one(meta["collection"], row)
    except StoreError as e:
        raise InternalError(f"Insert into '{meta['collection']}' failed: {e}") from e

    logger.info("%s %s added for %s", meta["label"], saved["_id"], owner_id)
    return saved


def list_records(store: DocumentStore, *, kind: str, owner_id: str) -> List[Dict[str, Any]]:
    """List the owner's records of the given kind, in insertion order."""
    meta = _require_meta(kind)
    try:
        return store.find(meta["collection"], **{OWNER_FIELD: owner_id})
    except StoreError as e:
        raise InternalError(f"Read from '{meta['collection']}' failed: {e}") from e
