from __future__ import annotations

from dataclasses import dataclass

from apps.backend.services.rewards.catalog_service import CatalogService
from apps.backend.services.rewards.dashboard_service import DashboardService
from apps.backend.services.rewards.identity_service import IdentityService
from apps.backend.services.rewards.order_service import OrderService
from apps.backend.services.rewards.redemption_service import RedemptionService
from apps.backend.services.rewards.rewards_repository import RewardsRepository
from apps.backend.services.rewards.timeutil import Clock, utcnow
from apps.backend.store.document_store import DocumentStore


@dataclass(frozen=True)
class RewardsServices:
    repo: RewardsRepository
    identity: IdentityService
    orders: OrderService
    redemptions: RedemptionService
    dashboard: DashboardService
    catalog: CatalogService


def build_services(store: DocumentStore, *, clock: Clock = utcnow) -> RewardsServices:
    repo = RewardsRepository(store)
    identity = IdentityService(repo, clock=clock)
    return RewardsServices(
        repo=repo,
        identity=identity,
        orders=OrderService(repo, clock=clock),
        redemptions=RedemptionService(repo, clock=clock),
        dashboard=DashboardService(repo, identity, clock=clock),
        catalog=CatalogService(repo, clock=clock),
    )
