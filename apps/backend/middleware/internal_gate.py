import hmac
import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

from apps.backend.utils.envelope import error

log = logging.getLogger("goldrewards.gate")


def _presented_token(request: Request) -> str:
    token = request.headers.get("x-internal-token")
    if token:
        return token
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()
    return ""


class InternalOnlyGate(BaseHTTPMiddleware):
    """
    Guards administrative paths with a shared token.
    Accepts `X-Internal-Token: <token>` or `Authorization: Bearer <token>`.
    With no token configured the guarded paths are closed (503).
    """

    def __init__(self, app, internal_token: Optional[str], protected_prefixes: Iterable[str] = ("/admin",)):
        super().__init__(app)
        self.internal_token = internal_token or ""
        self.protected_prefixes = tuple(protected_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith(self.protected_prefixes):
            return await call_next(request)

        if not self.internal_token:
            log.warning("admin path %s requested but ADMIN_TOKEN is not configured", path)
            return error("Admin access not configured", code="admin_disabled", status=503)

        if not hmac.compare_digest(_presented_token(request), self.internal_token):
            return error("Missing or invalid admin token", code="unauthorized", status=401)

        return await call_next(request)
