"""
Rewards Repository (Document Store Adapter)
===========================================

Purpose:
- Collection-level access for the rewards services, on top of any
  DocumentStore backend.
- Maps untyped documents to typed records; keeps collection names in one place.

Services never talk to the store directly; routes never talk to this repo.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from apps.backend.services.rewards.models import (
    CONFIG,
    GOLD_PRICE_KEY,
    ORDERS,
    QUERIES,
    REDEMPTIONS,
    REDEMPTION_STATUSES,
    SHOPS,
    USERS,
    ContactQuery,
    OrderRecord,
    PriceRecord,
    RedemptionRecord,
    ShopRecord,
    UserRecord,
)
from apps.backend.store.document_store import DocumentStore, Filter


class RewardsRepository:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # -----------------------------
    # Users (key = email)
    # -----------------------------
    async def get_user(self, email: str) -> Optional[UserRecord]:
        data = await self.store.get(USERS, email)
        return None if data is None else UserRecord.from_doc(email, data)

    async def list_users(self) -> List[UserRecord]:
        rows = await self.store.list(USERS)
        return [UserRecord.from_doc(k, d) for k, d in rows]

    async def merge_user(self, email: str, fields: Mapping[str, Any]) -> None:
        await self.store.update(USERS, email, fields, merge=True)

    async def delete_user(self, email: str) -> None:
        await self.store.delete(USERS, email)

    # -----------------------------
    # Orders
    # -----------------------------
    async def insert_order(self, doc: Mapping[str, Any]) -> OrderRecord:
        key = await self.store.insert(ORDERS, doc)
        return OrderRecord.from_doc(key, doc)

    async def get_order(self, order_key: str) -> Optional[OrderRecord]:
        data = await self.store.get(ORDERS, order_key)
        return None if data is None else OrderRecord.from_doc(order_key, data)

    async def list_orders(self, filters: Sequence[Filter] = ()) -> List[OrderRecord]:
        rows = await self._rows(ORDERS, filters)
        return [OrderRecord.from_doc(k, d) for k, d in rows]

    async def update_order(
        self,
        order_key: str,
        fields: Mapping[str, Any],
        *,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return await self.store.update(ORDERS, order_key, fields, expect=expect)

    async def delete_order(self, order_key: str) -> None:
        await self.store.delete(ORDERS, order_key)

    # -----------------------------
    # Redemptions
    # -----------------------------
    async def insert_redemption(self, doc: Mapping[str, Any]) -> RedemptionRecord:
        key = await self.store.insert(REDEMPTIONS, doc)
        return RedemptionRecord.from_doc(key, doc)

    async def get_redemption(self, redemption_key: str) -> Optional[RedemptionRecord]:
        data = await self.store.get(REDEMPTIONS, redemption_key)
        return None if data is None else RedemptionRecord.from_doc(redemption_key, data)

    async def list_redemptions(self, filters: Sequence[Filter] = ()) -> List[RedemptionRecord]:
        rows = await self._rows(REDEMPTIONS, filters)
        return [RedemptionRecord.from_doc(k, d) for k, d in rows]

    async def list_outstanding_redemptions(self, email: str) -> List[RedemptionRecord]:
        return await self.list_redemptions(
            [("email", "==", email), ("status", "in", list(REDEMPTION_STATUSES))]
        )

    async def update_redemption(
        self,
        redemption_key: str,
        fields: Mapping[str, Any],
        *,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        return await self.store.update(REDEMPTIONS, redemption_key, fields, expect=expect)

    # -----------------------------
    # Price (singleton)
    # -----------------------------
    async def get_price_record(self) -> Optional[PriceRecord]:
        data = await self.store.get(CONFIG, GOLD_PRICE_KEY)
        return None if data is None else PriceRecord.from_doc(GOLD_PRICE_KEY, data)

    async def merge_price_record(self, fields: Mapping[str, Any]) -> None:
        await self.store.update(CONFIG, GOLD_PRICE_KEY, fields, merge=True)

    # -----------------------------
    # Shops
    # -----------------------------
    async def insert_shop(self, doc: Mapping[str, Any]) -> ShopRecord:
        key = await self.store.insert(SHOPS, doc)
        return ShopRecord.from_doc(key, doc)

    async def get_shop(self, shop_key: str) -> Optional[ShopRecord]:
        data = await self.store.get(SHOPS, shop_key)
        return None if data is None else ShopRecord.from_doc(shop_key, data)

    async def list_shops(self) -> List[ShopRecord]:
        rows = await self.store.list(SHOPS)
        return [ShopRecord.from_doc(k, d) for k, d in rows]

    async def update_shop(self, shop_key: str, fields: Mapping[str, Any]) -> bool:
        return await self.store.update(SHOPS, shop_key, fields)

    async def delete_shop(self, shop_key: str) -> None:
        await self.store.delete(SHOPS, shop_key)

    # -----------------------------
    # Contact queries
    # -----------------------------
    async def insert_query(self, doc: Mapping[str, Any]) -> ContactQuery:
        key = await self.store.insert(QUERIES, doc)
        return ContactQuery.from_doc(key, doc)

    async def list_queries(self) -> List[ContactQuery]:
        rows = await self.store.list(QUERIES)
        return [ContactQuery.from_doc(k, d) for k, d in rows]

    async def delete_query(self, query_key: str) -> None:
        await self.store.delete(QUERIES, query_key)

    # -----------------------------
    # Health
    # -----------------------------
    async def ping(self) -> Dict[str, Any]:
        await self.store.ping()
        return {"store": True}

    async def _rows(self, collection: str, filters: Sequence[Filter]):
        if filters:
            return await self.store.query(collection, filters)
        return await self.store.list(collection)
