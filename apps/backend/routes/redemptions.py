from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import not_found, ok

router = APIRouter(tags=["redemptions"])

# set only by the approve flow or an admin create
ADMIN_ONLY_FIELDS = ("status", "approvedAt")


class RedemptionRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    grams: Optional[Any] = None


class AdminRedemptionRequest(RedemptionRequest):
    status: Optional[str] = None


@router.post("/redemptions")
async def create_redemption(inb: RedemptionRequest, services: RewardsServices = Depends(get_services)):
    payload = {k: v for k, v in inb.model_dump(exclude_none=True).items() if k not in ADMIN_ONLY_FIELDS}
    redemption = await services.redemptions.create_redemption(payload)
    return ok(redemption.to_dict(), status=201)


@router.post("/admin/redemptions")
async def admin_create_redemption(
    inb: AdminRedemptionRequest,
    services: RewardsServices = Depends(get_services),
):
    redemption = await services.redemptions.create_redemption(inb.model_dump(exclude_none=True))
    return ok(redemption.to_dict(), status=201)


@router.get("/redemptions")
async def list_redemptions(
    email: Optional[str] = Query(default=None),
    services: RewardsServices = Depends(get_services),
):
    redemptions = await services.redemptions.list_redemptions(email)
    return ok([r.to_dict() for r in redemptions], meta={"count": len(redemptions)})


@router.post("/admin/redemptions/{redemption_key}/approve")
async def approve_redemption(redemption_key: str, services: RewardsServices = Depends(get_services)):
    redemption = await services.redemptions.approve_redemption(redemption_key)
    if redemption is None:
        return not_found("Redemption")
    return ok(redemption.to_dict())
