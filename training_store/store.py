# -*- coding: utf-8 -*-
"""
In-memory record store for requirements, modules and agendas.

Records are plain dicts keyed by an assigned `id`. Every returned record is a
copy, so callers never alias stored state.
"""
from __future__ import annotations

import copy
import typing as t
import uuid
from datetime import datetime, timezone

from loguru import logger

from agenda_builder.errors import PersistenceError
from training_store.models import TABLES


Record = dict[str, t.Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordStore:
    """Create/read/update/delete/list over named tables."""

    def __init__(self, tables: t.Iterable[str] = TABLES) -> None:
        self._tables: dict[str, dict[str, Record]] = {name: {} for name in tables}

    @property
    def tables(self) -> list[str]:
        return sorted(self._tables)

    def _table(self, table: str) -> dict[str, Record]:
        try:
            return self._tables[table]
        except KeyError:
            raise PersistenceError(f"Unknown table: {table}", status_code=404)

    def create(self, table: str, record: t.Mapping[str, t.Any]) -> Record:
        """Insert a record and return it with its id and timestamps."""
        rows = self._table(table)
        stored = copy.deepcopy(dict(record))
        stored["id"] = stored.get("id") or str(uuid.uuid4())
        if stored["id"] in rows:
            raise PersistenceError(f"Duplicate id in {table}: {stored['id']}", status_code=409)
        stored["created_at"] = stored["updated_at"] = _now()
        rows[stored["id"]] = stored
        logger.debug("Created record", table=table, record_id=stored["id"])
        return copy.deepcopy(stored)

    def read(self, table: str, record_id: str) -> t.Optional[Record]:
        """Return the record, or None if there is none with that id."""
        record = self._table(table).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def update(self, table: str, record_id: str, patch: t.Mapping[str, t.Any]) -> Record:
        """Merge `patch` into a stored record. `id` and `created_at` are kept."""
        rows = self._table(table)
        if record_id not in rows:
            raise PersistenceError(f"No record {record_id} in {table}", status_code=404)
        changes = {k: v for k, v in copy.deepcopy(dict(patch)).items() if k not in ("id", "created_at")}
        rows[record_id].update(changes)
        rows[record_id]["updated_at"] = _now()
        logger.debug("Updated record", table=table, record_id=record_id, fields=sorted(changes))
        return copy.deepcopy(rows[record_id])

    def delete(self, table: str, record_id: str) -> None:
        rows = self._table(table)
        if rows.pop(record_id, None) is None:
            raise PersistenceError(f"No record {record_id} in {table}", status_code=404)
        logger.debug("Deleted record", table=table, record_id=record_id)

    def list(self, table: str, order_by: str = "created_at", descending: bool = True) -> list[Record]:
        """All records in a table, newest first by default."""
        rows = list(self._table(table).values())
        rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        return copy.deepcopy(rows)

    def find(self, table: str, **criteria: t.Any) -> t.Optional[Record]:
        """First record whose fields equal all of `criteria`."""
        for record in self._table(table).values():
            if all(record.get(k) == v for k, v in criteria.items()):
                return copy.deepcopy(record)
        return None


# Process-wide store used by the MCP tools and the training service.
# In a deployed system this would be replaced with a hosted database.
store = RecordStore()
