"""
Document Store (Adapter Contract)
=================================

Purpose:
- Keyed collections of JSON documents, the only persistence the rewards
  services talk to.
- Backends: Supabase/PostgREST (production) and in-memory (tests, local runs).

Contract:
- get(collection, key)                      -> dict | None
- query(collection, filters)                -> List[(key, dict)]
- list(collection)                          -> List[(key, dict)]
- insert(collection, doc)                   -> generated key
- update(collection, key, fields, merge=, expect=) -> bool
- delete(collection, key)                   -> None
- ping()                                    -> None (raises when unreachable)

Guarantees:
- Per-document compare-and-set for update(..., expect=...): the write lands
  only if every expected field still holds its expected value.
- update() never writes back a stale copy: fields another writer set between
  the read and the write survive.
- No ordering, no cross-document transactions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

Filter = Tuple[str, str, Any]  # (field, op, value) with op in {"==", "in"}
Row = Tuple[str, Dict[str, Any]]

FILTER_OPS = ("==", "in")


class StoreError(Exception):
    pass


class DocumentStore(ABC):
    """
    Base class for store backends. A backend missing any method cannot be
    instantiated.

    update() semantics:
    - merge=True  -> set-with-merge: shallow-merge `fields` into the document,
                     creating it when absent. `expect` is not allowed.
    - merge=False -> update-existing: returns False when the document is
                     absent or when `expect` does not match; True otherwise.
    """

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    async def query(self, collection: str, filters: Sequence[Filter]) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    async def list(self, collection: str) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    async def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        collection: str,
        key: str,
        fields: Mapping[str, Any],
        *,
        merge: bool = False,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> None:
        raise NotImplementedError


def check_filters(filters: Sequence[Filter]) -> None:
    for f in filters:
        if len(f) != 3:
            raise StoreError(f"filter must be (field, op, value), got {f!r}")
        field, op, value = f
        if op not in FILTER_OPS:
            raise StoreError(f"unsupported filter op {op!r} on {field!r}")
        if op == "in" and not isinstance(value, (list, tuple, set, frozenset)):
            raise StoreError(f"'in' filter on {field!r} needs a sequence")


def check_update_args(merge: bool, expect: Optional[Mapping[str, Any]]) -> None:
    if merge and expect:
        raise StoreError("conditional update (expect) cannot be combined with merge=True")
