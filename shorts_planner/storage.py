from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

# collection -> field that points at the owning record
PARENT_KEYS: dict[str, str] = {
    "profiles": "user_id",
    "projects": "profile_id",
    "topics": "project_id",
    "scripts": "topic_id",
    "batch_plans": "project_id",
}

_MANAGED_FIELDS = ("id", "created_at", "updated_at")


class RecordStore(Protocol):
    def create(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        ...

    def create_many(self, collection: str, records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        ...

    def find_by_id(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        ...

    def find_by_parent_id(self, collection: str, parent_id: str) -> list[dict[str, Any]]:
        ...

    def update(self, collection: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        ...

    def delete(self, collection: str, record_id: str) -> None:
        ...


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonFileStore:
    """Local-only store: one JSON array per collection under `root`.

    Not safe for concurrent writers; meant for a single CLI user.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, collection: str) -> Path:
        if collection not in PARENT_KEYS:
            raise ValueError(f"Unknown collection {collection!r}; expected one of {sorted(PARENT_KEYS)}")
        return self.root / f"{collection}.json"

    def _read(self, collection: str) -> list[dict[str, Any]]:
        path = self._path(collection)
        if not path.exists():
            return []
        data = json.loads(path.read_text(encoding="utf-8") or "[]")
        if not isinstance(data, list):
            raise ValueError(f"Collection file must hold a JSON array: {path}")
        return data

    def _write(self, collection: str, records: list[dict[str, Any]]) -> None:
        path = self._path(collection)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, path)

    def _new_record(self, record: dict[str, Any]) -> dict[str, Any]:
        now = _timestamp()
        out = {k: v for k, v in record.items() if k not in _MANAGED_FIELDS}
        out["id"] = uuid.uuid4().hex
        out["created_at"] = now
        out["updated_at"] = now
        return out

    def create(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        return self.create_many(collection, [record])[0]

    def create_many(self, collection: str, records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        existing = self._read(collection)
        created = [self._new_record(r) for r in records]
        if created:
            self._write(collection, existing + created)
            logger.debug("Stored %d %s", len(created), collection)
        return created

    def find_by_id(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        return next((r for r in self._read(collection) if r.get("id") == record_id), None)

    def find_by_parent_id(self, collection: str, parent_id: str) -> list[dict[str, Any]]:
        records = self._read(collection)
        key = PARENT_KEYS[collection]
        return [r for r in records if r.get(key) == parent_id]

    def update(self, collection: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        records = self._read(collection)
        for i, rec in enumerate(records):
            if rec.get("id") == record_id:
                merged = {**rec, **{k: v for k, v in changes.items() if k not in _MANAGED_FIELDS}}
                merged["updated_at"] = _timestamp()
                records[i] = merged
                self._write(collection, records)
                return merged
        raise KeyError(f"{collection} record not found: {record_id}")

    def delete(self, collection: str, record_id: str) -> None:
        records = self._read(collection)
        kept = [r for r in records if r.get("id") != record_id]
        if len(kept) != len(records):
            self._write(collection, kept)
