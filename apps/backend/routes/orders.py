from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import not_found, ok

router = APIRouter(tags=["orders"])


class ClaimRequest(BaseModel):
    orderId: Optional[Any] = None
    email: Optional[str] = None


@router.post("/admin/orders")
async def create_order(
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    order = await services.orders.create_order(body)
    return ok(order.to_dict(), status=201)


@router.get("/orders")
async def list_orders(
    email: Optional[str] = Query(default=None),
    services: RewardsServices = Depends(get_services),
):
    orders = await services.orders.list_orders(email)
    return ok([o.to_dict() for o in orders], meta={"count": len(orders)})


@router.post("/orders/claim")
async def claim_order(inb: ClaimRequest, services: RewardsServices = Depends(get_services)):
    order = await services.orders.claim_order(inb.orderId, inb.email)
    if order is None:
        return not_found("Order")
    return ok(order.to_dict())


@router.get("/orders/{order_key}")
async def get_order(order_key: str, services: RewardsServices = Depends(get_services)):
    order = await services.orders.get_order(order_key)
    if order is None:
        return not_found("Order")
    return ok(order.to_dict())


@router.patch("/admin/orders/{order_key}")
async def update_order(
    order_key: str,
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    order = await services.orders.update_order(order_key, body)
    if order is None:
        return not_found("Order")
    return ok(order.to_dict())


@router.delete("/admin/orders/{order_key}")
async def delete_order(order_key: str, services: RewardsServices = Depends(get_services)):
    return ok(await services.orders.delete_order(order_key))
