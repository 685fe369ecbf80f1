"""
Redemption Lifecycle
====================

    [pending]  --approve--> [approved]   (terminal)
    [approved] --approve--> [approved]   (no-op, approvedAt untouched)

A redemption created directly as approved (admin only) is stamped with
approvedAt at creation. There is no reject/cancel path. A redemption
reserves grams against the user's balance from the moment it is created
(see grams_ledger).
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.ids import generate_id
from apps.backend.services.rewards.models import (
    REDEMPTION_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
    RedemptionRecord,
    clean_email,
    to_number,
)
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, to_iso, utcnow

log = logging.getLogger("goldrewards.redemptions")


class RedemptionService:
    def __init__(self, repo: RewardsRepository, *, clock: Clock = utcnow) -> None:
        self.repo = repo
        self.clock = clock

    async def create_redemption(self, data: Mapping[str, Any]) -> RedemptionRecord:
        doc = {k: v for k, v in (data or {}).items() if k != "id"}

        email = clean_email(doc.get("email"))
        if email is None:
            raise ValidationError("email is required")
        doc["email"] = email
        grams = to_number(doc.get("grams"))
        if grams is None or grams <= 0:
            raise ValidationError("grams must be a positive number")

        status = doc.get("status") or STATUS_PENDING
        if status not in REDEMPTION_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(REDEMPTION_STATUSES)}")

        now = to_iso(self.clock())
        doc["status"] = status
        if not doc.get("createdAt"):
            doc["createdAt"] = now
        if status == STATUS_APPROVED and not doc.get("approvedAt"):
            doc["approvedAt"] = now
        doc["_customId"] = generate_id()

        redemption = await self.repo.insert_redemption(doc)
        log.info("redemption created: id=%s email=%s grams=%s", redemption.id, email, grams)
        return redemption

    async def list_redemptions(self, email: Optional[str] = None) -> List[RedemptionRecord]:
        email = clean_email(email)
        if email:
            return await self.repo.list_redemptions([("email", "==", email)])
        return await self.repo.list_redemptions()

    async def approve_redemption(self, redemption_key: str) -> Optional[RedemptionRecord]:
        current = await self.repo.get_redemption(redemption_key)
        if current is None:
            return None
        if current.is_approved:
            return current

        landed = await self.repo.update_redemption(
            redemption_key,
            {"status": STATUS_APPROVED, "approvedAt": to_iso(self.clock())},
            expect={"status": current.status},
        )
        if landed:
            log.info("redemption approved: id=%s email=%s", redemption_key, current.email)
        else:
            log.info("redemption approval already applied: id=%s", redemption_key)

        return await self.repo.get_redemption(redemption_key)
