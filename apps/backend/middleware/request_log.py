import logging
import time
from typing import Any, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

log = logging.getLogger("goldrewards.requests")

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-api-key",
    "x-internal-token",
    "x-supabase-key",
}


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    out = {}
    for k, v in headers.items():
        if k.lower() in SENSITIVE_HEADERS:
            out[k] = "***masked***"
        else:
            out[k] = v
    return out


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration_ms = int((time.time() - start_time) * 1000)

        entry: Dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "client": request.client.host if request.client else None,
            "headers": mask_headers(dict(request.headers)),
        }
        log.info(entry)
        return response
