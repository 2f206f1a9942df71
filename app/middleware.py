"""
Request tracing, access logging and the last-resort 500.

Every response, including one produced for an unhandled exception,
carries X-Request-ID. Unhandled exceptions are logged here once, with the
request id still bound, and turned into INTERNAL_ERROR_PAYLOAD.
"""
import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from structlog.contextvars import bound_contextvars

from app.errors import INTERNAL_ERROR_PAYLOAD
from app.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
# Caller-supplied ids are echoed only if they look like ids
_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:-]{1,64}")


def resolve_request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.fullmatch(supplied):
        return supplied
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    request_id = resolve_request_id(request)
    request.state.request_id = request_id
    started = time.perf_counter()

    with bound_contextvars(request_id=request_id, method=request.method, path=request.url.path):
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exc_info=exc,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            response = JSONResponse(status_code=500, content=INTERNAL_ERROR_PAYLOAD)
        else:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
