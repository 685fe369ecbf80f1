from fastapi import Request

from apps.backend.config.settings import Settings
from apps.backend.services.errors import StoreUnavailable
from apps.backend.services.rewards.container import RewardsServices


def get_services(request: Request) -> RewardsServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise StoreUnavailable("Document store not initialized")
    return services


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
