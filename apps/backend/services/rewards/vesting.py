from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from apps.backend.services.rewards.timeutil import parse_iso

# Earned grams become redeemable once this much time has passed (inclusive).
VESTING_WINDOW = timedelta(days=30)


def earned_at(created_at: Any, now: datetime) -> datetime:
    """Missing or unparseable createdAt counts as earned right now."""
    return parse_iso(created_at) or now


def is_vested(created_at: Any, now: datetime, window: timedelta = VESTING_WINDOW) -> bool:
    return now - earned_at(created_at, now) >= window
