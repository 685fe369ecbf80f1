"""
Identity & Price Registry
=========================

- Users are keyed by email and written with merge semantics: later writes
  never drop fields they do not name, and createdAt is set exactly once.
- The gold price is a singleton config document; absence falls back to the
  caller's default and is never an error.

Hazard: delete_user does not cascade. The user's orders and
redemptions stay behind, still carrying the email.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.models import UserRecord, clean_email, merge_fields, to_number
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, to_iso, utcnow

log = logging.getLogger("goldrewards.identity")

PROTECTED_USER_FIELDS = ("createdAt",)


def _require_email(email: Any) -> str:
    cleaned = clean_email(email)
    if cleaned is None:
        raise ValidationError("Email is required")
    return cleaned


class IdentityService:
    def __init__(self, repo: RewardsRepository, *, clock: Clock = utcnow) -> None:
        self.repo = repo
        self.clock = clock

    # -----------------------------
    # Users
    # -----------------------------
    async def upsert_user(self, data: Mapping[str, Any]) -> UserRecord:
        email = _require_email((data or {}).get("email"))
        rest = {k: v for k, v in data.items() if k not in ("email", "id")}
        now = to_iso(self.clock())

        existing = await self.repo.get_user(email)
        if existing is not None:
            current = existing.to_dict()
            current.pop("id", None)
            merged = merge_fields(current, rest, protected=PROTECTED_USER_FIELDS)
            merged["updatedAt"] = now
            await self.repo.merge_user(email, merged)
            log.info("user updated: %s", email)
        else:
            doc = {"email": email, **rest, "createdAt": now, "updatedAt": now}
            await self.repo.merge_user(email, doc)
            log.info("user created: %s", email)

        user = await self.repo.get_user(email)
        if user is None:
            # deleted between write and refresh
            return UserRecord.from_doc(email, {"email": email, **rest, "updatedAt": now})
        return user

    async def get_user(self, email: str) -> Optional[UserRecord]:
        email = clean_email(email)
        if email is None:
            return None
        return await self.repo.get_user(email)

    async def list_users(self) -> List[UserRecord]:
        return await self.repo.list_users()

    async def update_user(self, email: str, updates: Mapping[str, Any]) -> UserRecord:
        """
        Blind merge-write (no existence check). Prefer upsert_user when the
        record may not exist: this path never stamps createdAt.
        """
        email = _require_email(email)
        patch = {k: v for k, v in (updates or {}).items() if k not in PROTECTED_USER_FIELDS and k != "id"}
        patch["email"] = email
        patch["updatedAt"] = to_iso(self.clock())
        await self.repo.merge_user(email, patch)
        user = await self.repo.get_user(email)
        return user if user is not None else UserRecord.from_doc(email, patch)

    async def delete_user(self, email: str) -> Dict[str, Any]:
        email = _require_email(email)
        await self.repo.delete_user(email)
        log.info("user deleted (orders/redemptions not cascaded): %s", email)
        return {"success": True}

    # -----------------------------
    # Gold price
    # -----------------------------
    async def get_gold_price(self, default_price: float) -> float:
        record = await self.repo.get_price_record()
        if record is None:
            return default_price
        price = to_number(record.price)
        return default_price if price is None else price

    async def set_gold_price(self, price: Any) -> float:
        value = to_number(price)
        if value is None or value <= 0:
            raise ValidationError("Price must be a positive number")
        await self.repo.merge_price_record({"price": value, "updatedAt": to_iso(self.clock())})
        log.info("gold price set: %s", value)
        return value
