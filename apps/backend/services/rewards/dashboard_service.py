"""
Dashboard (Ledger Aggregation)
==============================

Read-only summary of one user's rewards. Reads price, orders, outstanding
redemptions and shops as four independent queries with no snapshot isolation:
a write landing in between can show a state that never existed at once.
Recomputing on the next call converges, so callers may poll freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.grams_ledger import GramsLedger, LedgerState
from apps.backend.services.rewards.identity_service import IdentityService
from apps.backend.services.rewards.models import OrderRecord, ShopRecord, clean_email
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, utcnow


@dataclass(frozen=True)
class DashboardSummary:
    email: str
    state: LedgerState
    orders: List[OrderRecord]
    shops: List[ShopRecord]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalGrams": self.state.total_grams,
            "totalValue": self.state.total_value,
            "redeemableGrams": self.state.redeemable_grams,
            "currentPrice": self.state.current_price,
            "orders": [o.to_dict() for o in self.orders],
            "shops": [s.to_dict() for s in self.shops],
            "progress": self.state.progress.to_dict(),
        }


class DashboardService:
    def __init__(
        self,
        repo: RewardsRepository,
        identity: IdentityService,
        *,
        ledger: GramsLedger | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.repo = repo
        self.identity = identity
        self.ledger = ledger or GramsLedger()
        self.clock = clock

    async def compute_dashboard(self, email: str, default_price: float) -> DashboardSummary:
        email = clean_email(email)
        if email is None:
            raise ValidationError("email is required")
        current_price = await self.identity.get_gold_price(default_price)
        orders = await self.repo.list_orders([("userEmail", "==", email)])
        redemptions = await self.repo.list_outstanding_redemptions(email)

        state = self.ledger.reduce(
            orders,
            redemptions,
            current_price=current_price,
            now=self.clock(),
        )

        shops = await self.repo.list_shops()
        return DashboardSummary(email=email, state=state, orders=orders, shops=shops)
