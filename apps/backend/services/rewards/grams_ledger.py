"""
Grams Ledger (Aggregation Reducer)
==================================

Purpose:
- Deterministic balance math for one user's orders and redemptions.
- Pure domain logic: no DB, no HTTP. The dashboard service does the reads.

Rules:
- total grams      = sum(order.rewardGrams), missing/non-numeric -> 0
- total value      = total grams * current price, rounded half-up to cents
- vested grams     = grams of orders at least VESTING_WINDOW old
- outstanding      = grams of pending + approved redemptions (a redemption
                     reserves balance from creation, before approval)
- redeemable       = max(vested - outstanding, 0)
- progress         = total / ceil(total), milestone floored at 1
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable

from apps.backend.services.rewards.models import OrderRecord, RedemptionRecord
from apps.backend.services.rewards.vesting import VESTING_WINDOW, is_vested


def _q2(x: float) -> float:
    return float(Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Progress:
    current: float
    next_milestone: int
    progress_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "nextMilestone": self.next_milestone,
            "progressPercent": self.progress_percent,
        }


@dataclass(frozen=True)
class LedgerState:
    total_grams: float
    vested_grams: float
    outstanding_grams: float
    redeemable_grams: float
    total_value: float
    current_price: float
    progress: Progress


def milestone_progress(total_grams: float) -> Progress:
    next_milestone = math.ceil(total_grams) or 1
    return Progress(
        current=total_grams,
        next_milestone=next_milestone,
        progress_percent=total_grams / next_milestone,
    )


class GramsLedger:
    def __init__(self, *, vesting_window: timedelta = VESTING_WINDOW) -> None:
        self.vesting_window = vesting_window

    def reduce(
        self,
        orders: Iterable[OrderRecord],
        redemptions: Iterable[RedemptionRecord],
        *,
        current_price: float,
        now: datetime,
    ) -> LedgerState:
        total = 0.0
        value = 0.0
        vested = 0.0
        for order in orders:
            grams = order.grams
            total += grams
            value += grams * current_price
            if is_vested(order.created_at, now, self.vesting_window):
                vested += grams

        outstanding = sum((r.amount for r in redemptions if r.is_outstanding), 0.0)

        return LedgerState(
            total_grams=total,
            vested_grams=vested,
            outstanding_grams=outstanding,
            redeemable_grams=max(vested - outstanding, 0.0),
            total_value=_q2(value),
            current_price=current_price,
            progress=milestone_progress(total),
        )
