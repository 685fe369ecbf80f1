# apps/backend/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.backend.config.settings import Settings, settings as default_settings
from apps.backend.db import create_document_store
from apps.backend.middleware.errors import install_error_handlers
from apps.backend.middleware.internal_gate import InternalOnlyGate
from apps.backend.middleware.request_log import RequestLogMiddleware
from apps.backend.routes.dashboard import router as dashboard_router
from apps.backend.routes.health import router as health_router
from apps.backend.routes.orders import router as orders_router
from apps.backend.routes.pricing import router as pricing_router
from apps.backend.routes.queries import router as queries_router
from apps.backend.routes.redemptions import router as redemptions_router
from apps.backend.routes.shops import router as shops_router
from apps.backend.routes.users import router as users_router
from apps.backend.services.rewards.container import build_services
from apps.backend.services.rewards.timeutil import Clock, utcnow
from apps.backend.store.document_store import DocumentStore

log = logging.getLogger("goldrewards.main")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Gold Rewards",
        version=settings.GOLDREWARDS_VERSION,
        description="Purchase-linked gold rewards: orders, redemptions and dashboards",
    )
    app.state.settings = settings
    app.state.services = build_services(store, clock=clock) if store is not None else None

    # -------------------------------------------------------------------
    # Error handling (stable envelopes, no stack leaks)
    # -------------------------------------------------------------------
    install_error_handlers(app)

    # -------------------------------------------------------------------
    # Admin gate (approvals, price, deletes, catalog writes)
    # -------------------------------------------------------------------
    app.add_middleware(
        InternalOnlyGate,
        internal_token=settings.ADMIN_TOKEN,
        protected_prefixes=("/admin",),
    )

    if settings.REQUEST_LOGGING:
        app.add_middleware(RequestLogMiddleware)

    # -------------------------------------------------------------------
    # CORS (storefront-facing, controlled)
    # -------------------------------------------------------------------
    if settings.CORS_MODE == "allowlist":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOW_ORIGINS,
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # -------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(orders_router)
    app.include_router(redemptions_router)
    app.include_router(pricing_router)
    app.include_router(dashboard_router)
    app.include_router(shops_router)
    app.include_router(queries_router)

    @app.get("/")
    async def root():
        return {
            "status": "Gold Rewards Online",
            "version": settings.GOLDREWARDS_VERSION,
            "routes": [
                "/health",
                "/users",
                "/orders",
                "/redemptions",
                "/gold-price",
                "/dashboard",
                "/shops",
                "/queries",
                "/admin",
            ],
        }

    @app.on_event("startup")
    async def startup_event():
        if app.state.services is None:
            app.state.services = build_services(await create_document_store(settings), clock=clock)
        log.info("Gold Rewards starting (store=%s)", settings.STORE_BACKEND)

    return app


app = create_app()
