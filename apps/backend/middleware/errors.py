import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from apps.backend.services.errors import RewardsError
from apps.backend.utils.envelope import error

log = logging.getLogger("goldrewards.errors")


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RewardsError)
    async def rewards_error_handler(request: Request, exc: RewardsError):
        if exc.status_code >= 500:
            log.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return error(exc.message, code=exc.code, status=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg") or "invalid request")
        return error(message, code="validation_error", status=422)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # no stack traces in responses
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return error("Internal server error", code="internal_error", status=500)
