from fastapi import APIRouter, Depends, Query

from apps.backend.config.settings import Settings
from apps.backend.routes.deps import get_services, get_settings
from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.container import RewardsServices
from apps.backend.utils.envelope import ok

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard")
async def dashboard(
    email: str = Query(default=""),
    services: RewardsServices = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    if not email.strip():
        raise ValidationError("email is required")
    summary = await services.dashboard.compute_dashboard(email.strip(), settings.DEFAULT_GOLD_PRICE)
    return ok(summary.to_dict())
