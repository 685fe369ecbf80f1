"""
Shops and contact queries: plain CRUD, no rules beyond persistence.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from apps.backend.services.rewards.ids import generate_id
from apps.backend.services.rewards.models import ContactQuery, ShopRecord
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, to_iso, utcnow


class CatalogService:
    def __init__(self, repo: RewardsRepository, *, clock: Clock = utcnow) -> None:
        self.repo = repo
        self.clock = clock

    # -----------------------------
    # Shops
    # -----------------------------
    async def create_shop(self, data: Mapping[str, Any]) -> ShopRecord:
        doc = {k: v for k, v in (data or {}).items() if k != "id"}
        doc["createdAt"] = to_iso(self.clock())
        return await self.repo.insert_shop(doc)

    async def list_shops(self) -> List[ShopRecord]:
        return await self.repo.list_shops()

    async def get_shop(self, shop_key: str) -> Optional[ShopRecord]:
        return await self.repo.get_shop(shop_key)

    async def update_shop(self, shop_key: str, updates: Mapping[str, Any]) -> Optional[ShopRecord]:
        patch = {k: v for k, v in (updates or {}).items() if k not in ("id", "createdAt")}
        patch["updatedAt"] = to_iso(self.clock())
        if not await self.repo.update_shop(shop_key, patch):
            return None
        return await self.repo.get_shop(shop_key)

    async def delete_shop(self, shop_key: str) -> Dict[str, Any]:
        await self.repo.delete_shop(shop_key)
        return {"success": True}

    # -----------------------------
    # Contact queries
    # -----------------------------
    async def create_query(self, data: Mapping[str, Any]) -> ContactQuery:
        doc = {k: v for k, v in (data or {}).items() if k != "id"}
        if not doc.get("createdAt"):
            doc["createdAt"] = to_iso(self.clock())
        doc["_customId"] = generate_id()
        return await self.repo.insert_query(doc)

    async def list_queries(self) -> List[ContactQuery]:
        return await self.repo.list_queries()

    async def delete_query(self, query_key: str) -> Dict[str, Any]:
        await self.repo.delete_query(query_key)
        return {"success": True}
