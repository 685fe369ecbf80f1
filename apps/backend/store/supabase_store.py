"""
Supabase Document Store (PostgREST Adapter)
===========================================

Purpose:
- Production backend of the document store contract, on top of the
  supabase-py async client.

Expected tables (one per collection, same shape):
    public.users / public.orders / public.redemptions /
    public.config / public.shops / public.queries
    - id      text primary key
    - data    jsonb not null default '{}'::jsonb
    - version bigint not null default 0

Recommended indexes:
    create index on public.orders      ((data->>'userEmail'));
    create index on public.orders      ((data->>'orderId'));
    create index on public.redemptions ((data->>'email'));

Notes:
- Filters run against `data->>field`, so values are compared as text.
- Every update is optimistic: the document is read with its `version`, merged,
  and written back with `version = observed + 1` only where the row still
  carries the observed version. A lost write re-reads and tries again, so a
  field written by someone else in between (e.g. a claim's `userEmail`) is
  never replaced by a stale copy.
- Conditional writes (expect=...) re-check the expectations on every attempt
  and also carry them as PostgREST filters on the UPDATE itself.
- merge=True on a missing key inserts with ON CONFLICT DO NOTHING; losing that
  insert falls back to the versioned update.
- Client/transport errors propagate unchanged.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from apps.backend.store.document_store import (
    DocumentStore,
    Filter,
    Row,
    StoreError,
    check_filters,
    check_update_args,
)

log = logging.getLogger("goldrewards.store.supabase")

MAX_WRITE_ATTEMPTS = 5




def _json_path(field: str) -> str:
    return f"data->>{field}"


def _text(value: Any) -> str:
    # jsonb ->> renders booleans and numbers the way json.dumps does
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _data(row: Dict[str, Any]) -> Dict[str, Any]:
    data = row.get("data")
    return dict(data) if isinstance(data, dict) else {}


def _apply_equals(q: Any, field: str, value: Any) -> Any:
    col = _json_path(field)
    if value is None:
        return q.is_(col, "null")
    return q.eq(col, _text(value))




class SupabaseDocumentStore(DocumentStore):
    def __init__(
        self,
        supabase_client: Any,
        *,
        table_prefix: str = "",
        max_write_attempts: int = MAX_WRITE_ATTEMPTS,
    ) -> None:
        self.sb = supabase_client
        self.table_prefix = table_prefix
        self.max_write_attempts = max_write_attempts

    def _table(self, collection: str) -> Any:
        return self.sb.table(f"{self.table_prefix}{collection}")

    async def _read(self, collection: str, key: str) -> Optional[Tuple[Dict[str, Any], int]]:
        r = await self._table(collection).select("id,data,version").eq("id", key).limit(1).execute()
        rows = getattr(r, "data", None) or []
        if not rows or not isinstance(rows[0], dict):
            return None
        return _data(rows[0]), int(rows[0].get("version") or 0)

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        observed = await self._read(collection, key)
        return observed[0] if observed is not None else None

    async def query(self, collection: str, filters: Sequence[Filter]) -> List[Row]:
        check_filters(filters)
        q = self._table(collection).select("id,data")
        for field, op, value in filters:
            if op == "==":
                q = _apply_equals(q, field, value)
            else:
                q = q.in_(_json_path(field), [_text(v) for v in value])
        r = await q.execute()
        return self._rows(r)

    async def list(self, collection: str) -> List[Row]:
        r = await self._table(collection).select("id,data").execute()
        return self._rows(r)

    async def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        key = str(uuid.uuid4())
        await self._table(collection).insert({"id": key, "data": dict(doc), "version": 0}).execute()
        return key

    async def update(
        self,
        collection: str,
        key: str,
        fields: Mapping[str, Any],
        *,
        merge: bool = False,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        check_update_args(merge, expect)

        for _ in range(self.max_write_attempts):
            observed = await self._read(collection, key)

            if observed is None:
                if not merge:
                    return False
                r = await (
                    self._table(collection)
                    .upsert(
                        {"id": key, "data": dict(fields), "version": 0},
                        on_conflict="id",
                        ignore_duplicates=True,
                    )
                    .execute()
                )
                if getattr(r, "data", None):
                    return True
                continue

            current, version = observed
            for field, expected in (expect or {}).items():
                if current.get(field) != expected:
                    return False

            merged = {**current, **dict(fields)}
            q = (
                self._table(collection)
                .update({"data": merged, "version": version + 1})
                .eq("id", key)
                .eq("version", version)
            )
            for field, expected in (expect or {}).items():
                q = _apply_equals(q, field, expected)
            r = await q.execute()
            if getattr(r, "data", None):
                return True
            log.info("write conflict on %s/%s at version %s, retrying", collection, key, version)

        raise StoreError(f"update of {collection}/{key} lost {self.max_write_attempts} write races in a row")

    async def delete(self, collection: str, key: str) -> None:
        await self._table(collection).delete().eq("id", key).execute()

    async def ping(self) -> None:
        await self._table("config").select("id").limit(1).execute()

    @staticmethod
    def _rows(r: Any) -> List[Row]:
        rows = getattr(r, "data", None) or []
        return [(str(row.get("id")), _data(row)) for row in rows if isinstance(row, dict)]
