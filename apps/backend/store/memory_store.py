from __future__ import annotations

import asyncio
import copy
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence

from apps.backend.store.document_store import (
    DocumentStore,
    Filter,
    Row,
    check_filters,
    check_update_args,
)


def _matches(doc: Dict[str, Any], filters: Sequence[Filter]) -> bool:
    for field, op, value in filters:
        current = doc.get(field)
        if op == "==" and current != value:
            return False
        if op == "in" and current not in value:
            return False
    return True


class InMemoryDocumentStore(DocumentStore):
    """
    Process-local store. Every call yields to the event loop once before
    touching data (like a network round trip would), then reads or writes
    without yielding again, so a conditional update is atomic.

    Documents are deep-copied on the way in and out.
    """

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _col(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.get(collection, {})

    def _writable(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        doc = self._col(collection).get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(self, collection: str, filters: Sequence[Filter]) -> List[Row]:
        check_filters(filters)
        await asyncio.sleep(0)
        return [
            (key, copy.deepcopy(doc))
            for key, doc in self._col(collection).items()
            if _matches(doc, filters)
        ]

    async def list(self, collection: str) -> List[Row]:
        await asyncio.sleep(0)
        return [(key, copy.deepcopy(doc)) for key, doc in self._col(collection).items()]

    async def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        await asyncio.sleep(0)
        key = uuid.uuid4().hex[:20]
        self._writable(collection)[key] = copy.deepcopy(dict(doc))
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
        await asyncio.sleep(0)
        col = self._writable(collection)
        doc = col.get(key)

        if doc is None:
            if not merge:
                return False
            doc = {}
            col[key] = doc

        for field, expected in (expect or {}).items():
            if doc.get(field) != expected:
                return False

        doc.update(copy.deepcopy(dict(fields)))
        return True

    async def delete(self, collection: str, key: str) -> None:
        await asyncio.sleep(0)
        self._col(collection).pop(key, None)

    async def ping(self) -> None:
        await asyncio.sleep(0)
