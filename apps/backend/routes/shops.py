from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import not_found, ok

router = APIRouter(tags=["shops"])


@router.get("/shops")
async def list_shops(services: RewardsServices = Depends(get_services)):
    shops = await services.catalog.list_shops()
    return ok([s.to_dict() for s in shops], meta={"count": len(shops)})


@router.get("/shops/{shop_key}")
async def get_shop(shop_key: str, services: RewardsServices = Depends(get_services)):
    shop = await services.catalog.get_shop(shop_key)
    if shop is None:
        return not_found("Shop")
    return ok(shop.to_dict())


@router.post("/admin/shops")
async def create_shop(
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    shop = await services.catalog.create_shop(body)
    return ok(shop.to_dict(), status=201)


@router.patch("/admin/shops/{shop_key}")
async def update_shop(
    shop_key: str,
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    shop = await services.catalog.update_shop(shop_key, body)
    if shop is None:
        return not_found("Shop")
    return ok(shop.to_dict())


@router.delete("/admin/shops/{shop_key}")
async def delete_shop(shop_key: str, services: RewardsServices = Depends(get_services)):
    return ok(await services.catalog.delete_shop(shop_key))
