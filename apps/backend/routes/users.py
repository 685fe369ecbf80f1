from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import not_found, ok

router = APIRouter(tags=["users"])


@router.post("/users")
async def upsert_user(
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    user = await services.identity.upsert_user(body)
    return ok(user.to_dict())


@router.get("/users/{email}")
async def get_user(email: str, services: RewardsServices = Depends(get_services)):
    user = await services.identity.get_user(email)
    if user is None:
        return not_found("User")
    return ok(user.to_dict())


@router.patch("/users/{email}")
async def update_user(
    email: str,
    body: Dict[str, Any] = Body(...),
    services: RewardsServices = Depends(get_services),
):
    user = await services.identity.update_user(email, body)
    return ok(user.to_dict())


@router.get("/admin/users")
async def list_users(services: RewardsServices = Depends(get_services)):
    users = await services.identity.list_users()
    return ok([u.to_dict() for u in users], meta={"count": len(users)})


@router.delete("/admin/users/{email}")
async def delete_user(email: str, services: RewardsServices = Depends(get_services)):
    return ok(await services.identity.delete_user(email))
