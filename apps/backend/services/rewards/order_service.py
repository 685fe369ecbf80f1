"""
Order Ledger
============

Reward grants ("orders") and their attribution to a user.

- Orders may be created before the buyer has an account; `userEmail` is set
  later by claim_order.
- Attribution is first-write-wins per document: the write is a conditional
  update on the observed `userEmail`, so of two racing claims on the same
  unclaimed order exactly one lands and the other sees the winner's email.
- claim_order is not atomic across the match set (split shipments share an
  `orderId`). Attributions that already landed are not rolled back when a
  later document fails.
- delete_order does not cascade; redemptions referencing the order dangle.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.ids import generate_id
from apps.backend.services.rewards.models import OrderRecord, clean_email, to_number
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, to_iso, utcnow

log = logging.getLogger("goldrewards.orders")

# fields update_order never rewrites
IMMUTABLE_ORDER_FIELDS = ("id", "_customId")


class OrderService:
    def __init__(self, repo: RewardsRepository, *, clock: Clock = utcnow) -> None:
        self.repo = repo
        self.clock = clock

    async def create_order(self, data: Mapping[str, Any]) -> OrderRecord:
        doc = {k: v for k, v in (data or {}).items() if k != "id"}

        if doc.get("rewardGrams") is not None:
            grams = to_number(doc["rewardGrams"])
            if grams is None or grams < 0:
                raise ValidationError("rewardGrams must be a non-negative number")

        if "userEmail" in doc:
            doc["userEmail"] = clean_email(doc["userEmail"])
        if not doc.get("createdAt"):
            doc["createdAt"] = to_iso(self.clock())
        doc["_customId"] = generate_id()

        order = await self.repo.insert_order(doc)
        log.info("order created: id=%s orderId=%s grams=%s", order.id, order.order_id, order.reward_grams)
        return order

    async def list_orders(self, email: Optional[str] = None) -> List[OrderRecord]:
        email = clean_email(email)
        if email:
            return await self.repo.list_orders([("userEmail", "==", email)])
        return await self.repo.list_orders()

    async def get_order(self, order_key: str) -> Optional[OrderRecord]:
        return await self.repo.get_order(order_key)

    async def update_order(self, order_key: str, updates: Mapping[str, Any]) -> Optional[OrderRecord]:
        updates = {k: v for k, v in (updates or {}).items() if k not in IMMUTABLE_ORDER_FIELDS}
        if updates.get("rewardGrams") is not None:
            grams = to_number(updates["rewardGrams"])
            if grams is None or grams < 0:
                raise ValidationError("rewardGrams must be a non-negative number")
        if "userEmail" in updates:
            updates["userEmail"] = clean_email(updates["userEmail"])

        # a claim may land between the read and the write; the second pass
        # sees it and drops userEmail from the patch
        for _ in range(2):
            current = await self.repo.get_order(order_key)
            if current is None:
                return None

            patch = dict(updates)
            if current.is_claimed:
                # attribution goes through claim_order only
                patch.pop("userEmail", None)
            if not patch:
                return current

            expect = {"userEmail": current.user_email} if "userEmail" in patch else None
            if await self.repo.update_order(order_key, patch, expect=expect):
                return await self.repo.get_order(order_key)
            log.info("order update raced a claim: id=%s", order_key)

        return await self.repo.get_order(order_key)

    async def delete_order(self, order_key: str) -> Dict[str, Any]:
        await self.repo.delete_order(order_key)
        log.info("order deleted (no cascade): id=%s", order_key)
        return {"success": True}

    async def claim_order(self, order_id: Any, email: Any) -> Optional[OrderRecord]:
        email = clean_email(email)
        if not order_id or not email:
            raise ValidationError("orderId and email are required")

        matches = await self.repo.list_orders([("orderId", "==", order_id)])
        if not matches:
            return None

        claimed: Optional[OrderRecord] = None
        for order in matches:
            if not order.is_claimed:
                landed = await self.repo.update_order(
                    order.id,
                    {"userEmail": email},
                    expect={"userEmail": order.user_email},
                )
                if landed:
                    log.info("order claimed: id=%s orderId=%s email=%s", order.id, order_id, email)
                else:
                    log.info("order claim lost race: id=%s orderId=%s", order.id, order_id)
            elif order.user_email != email:
                log.info(
                    "order already attributed, claim ignored: id=%s orderId=%s", order.id, order_id
                )

            refreshed = await self.repo.get_order(order.id)
            if refreshed is not None:
                claimed = refreshed
        return claimed
