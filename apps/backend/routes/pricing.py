from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from apps.backend.config.settings import Settings
from apps.backend.routes.deps import get_services, get_settings
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import ok

router = APIRouter(tags=["pricing"])


class PriceIn(BaseModel):
    price: Any = None


@router.get("/gold-price")
async def get_gold_price(
    services: RewardsServices = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    price = await services.identity.get_gold_price(settings.DEFAULT_GOLD_PRICE)
    return ok({"price": price})


@router.put("/admin/gold-price")
async def set_gold_price(inb: PriceIn, services: RewardsServices = Depends(get_services)):
    price = await services.identity.set_gold_price(inb.price)
    return ok({"price": price})
