# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Document store backed by a single YAML file.

Layout on disk::

    version: 1
    collections:
      accounts:
        - _id: 65f0c1...
          username: alice
          password: $argon2id$...

The file is rewritten after every insert (temp file + replace), so a write is either
fully on disk or not at all. Before every read and every insert the file's
(inode, mtime, size) is compared with the last one seen, and the file is reloaded when
another process (``scripts/create_user.py``) has changed it. Two processes
inserting at the same instant can still overwrite each other: there is no file lock.

Every insert re-serialises every collection while holding the one store lock, so
write cost grows with the store size and all inserts queue behind each other. That is
fine for one user's portfolio; a larger deployment needs a real database.

With ``path=None`` nothing touches disk.
"""

from __future__ import annotations

import logging
import os
import secrets
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

logger = logging.getLogger("folio.store")

STORE_VERSION = 1


class StoreError(Exception):
    """The backing file could not be read or written."""


class DuplicateKeyError(StoreError):
    def __init__(self, collection: str, field: str, value: Any) -> None:
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for '{collection}.{field}': {value!r}")


def new_id() -> str:
    """24 hex chars, same shape as a Mongo ObjectId."""
    return secrets.token_hex(12)


class DocumentStore:
    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        unique: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.path = Path(path).resolve() if path else None
        self.unique: Dict[str, tuple] = {c: tuple(fields) for c, fields in (unique or {}).items()}
        self._lock = threading.RLock()
        self._collections: Dict[str, List[Dict[str, Any]]] = {}
        # (inode, mtime_ns, size) of the file as last loaded or written; None = no file
        self._seen: Optional[Tuple[int, int, int]] = None
        with self._lock:
            self._refresh()

    def _signature(self) -> Optional[Tuple[int, int, int]]:
        try:
            st = self.path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise StoreError(f"Cannot stat store file {self.path}: {e}") from e
        # every write replaces the file, so the inode changes even within one mtime tick
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def _refresh(self) -> None:
        """Reload the file if it changed since we last loaded or wrote it. Call with _lock held."""
        if self.path is None:
            return
        current = self._signature()
        if current == self._seen:
            return
        self._collections = self._load()
        self._seen = current

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot read store file {self.path}: {e}") from e

        collections = (raw.get("collections") or {}) if isinstance(raw, dict) else {}
        out: Dict[str, List[Dict[str, Any]]] = {}
        for name, docs in collections.items():
            if not isinstance(docs, list):
                continue
            out[str(name)] = [dict(d) for d in docs if isinstance(d, dict)]
        logger.info("Loaded %d collection(s) from %s", len(out), self.path)
        return out

    def _flush(self) -> None:
        if self.path is None:
            return
        payload = {"version": STORE_VERSION, "collections": self._collections}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True), encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot write store file {self.path}: {e}") from e
        self._seen = self._signature()

    def ping(self) -> bool:
        """Check the backing file can be written. Memory-only stores always pass."""
        if self.path is None:
            return True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self.path.parent}: {e}") from e
        target = self.path if self.path.exists() else self.path.parent
        if not os.access(target, os.W_OK):
            raise StoreError(f"Store path is not writable: {target}")
        return True

    def insert_one(self, collection: str, doc: Mapping[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._refresh()
            docs = self._collections.setdefault(collection, [])
            for field in self.unique.get(collection, ()):
                if field in doc and any(d.get(field) == doc[field] for d in docs):
                    raise DuplicateKeyError(collection, field, doc[field])

            stored = {"_id": new_id()}
            stored.update({k: v for k, v in doc.items() if k != "_id"})
            docs.append(stored)
            try:
                self._flush()
            except StoreError:
                docs.pop()
                raise
            return dict(stored)

    def find(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        with self._lock:
            self._refresh()
            docs = self._collections.get(collection, [])
            return [
                dict(d) for d in docs if all(d.get(k) == v for k, v in filters.items())
            ]

    def find_one(self, collection: str, **filters: Any) -> Optional[Dict[str, Any]]:
        with self._lock:
            self._refresh()
            for d in self._collections.get(collection, []):
                if all(d.get(k) == v for k, v in filters.items()):
                    return dict(d)
        return None
