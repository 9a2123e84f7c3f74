from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from swimcore.config import get_settings


def _limiter_enabled() -> bool:
    settings = get_settings()
    if str(settings.app_env).lower() == "test":
        return False
    return bool(settings.rate_limit_enabled)


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().rate_limit_storage_uri,
    enabled=_limiter_enabled(),
    headers_enabled=True,
)


def error_detail(code: str, message: str, **extra) -> dict:
    detail = {"code": code, "message": message}
    detail.update(extra)
    return {"detail": detail}


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    retry_after: Optional[str] = None
    if isinstance(exc, RateLimitExceeded):
        retry_after = getattr(exc, "retry_after", None)
    headers = {}
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=429,
        content=error_detail("RATE_LIMITED", "Too many workout requests, slow down"),
        headers=headers,
    )


def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = []
    if isinstance(exc, RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=422,
        content=error_detail("VALIDATION_ERROR", message, errors=errors),
    )
