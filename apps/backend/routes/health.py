import logging

from fastapi import APIRouter, Depends, Request

from apps.backend.routes.deps import get_services
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import error, ok

log = logging.getLogger("goldrewards.health")

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_root(request: Request):
    return ok({"version": request.app.version})


@router.get("/store")
async def health_store(services: RewardsServices = Depends(get_services)):
    try:
        checks = await services.repo.ping()
    except Exception as e:
        log.warning("store health check failed: %s", e)
        return error(str(e), code="store_unavailable", status=503)
    return ok(checks)
