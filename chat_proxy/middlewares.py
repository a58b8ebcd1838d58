import time
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse
import structlog

from .errors import ChatProxyError, ErrorKind
from .schemas import ErrorDetail, ErrorExtensions, ErrorResponse
from .utils import BALANCE_PATTERNS, includes_any

logger = structlog.get_logger()

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"
PREFLIGHT_ALLOW_HEADERS = "Content-Type, Authorization, Apollo-Require-Preflight"
PREFLIGHT_MAX_AGE = "86400"


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    logger.info("request.start", method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    except Exception as e:
        logger.exception("request.error", error=str(e))
        raise
    logger.info(
        "request.end",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response


def cors_headers(allow_origin: str) -> dict:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }


def error_envelope(exc: Exception) -> ErrorResponse:
    """Map an uncaught exception onto the 500 JSON body."""
    if isinstance(exc, ChatProxyError):
        message, code, timestamp = exc.message, exc.code, exc.timestamp
    else:
        message = str(exc) or "Unknown server error"
        code = "SERVER_ERROR"
        timestamp = datetime.now(timezone.utc).isoformat()
        if includes_any(message, BALANCE_PATTERNS):
            code = ErrorKind.INSUFFICIENT_BALANCE.value
    return ErrorResponse(
        errors=[ErrorDetail(message=message, extensions=ErrorExtensions(code=code, timestamp=timestamp))]
    )


def make_cors_middleware(allow_origin: str = "*"):
    """Answer preflights directly and stamp CORS headers on everything else,
    including the 500 envelope for errors nothing else handled."""

    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(
                status_code=204,
                headers={
                    "Access-Control-Allow-Origin": allow_origin,
                    "Access-Control-Allow-Methods": ALLOW_METHODS,
                    "Access-Control-Allow-Headers": PREFLIGHT_ALLOW_HEADERS,
                    "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
                },
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("request.unhandled_error", error=str(e))
            return JSONResponse(
                status_code=500,
                content=error_envelope(e).model_dump(),
                headers=cors_headers(allow_origin),
            )

        response.headers.update(cors_headers(allow_origin))
        return response

    return cors
