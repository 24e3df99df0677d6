# aetherchat/core/middleware.py
"""HTTP middleware: correlation ids and request logging"""
import logging
import time
import uuid

from starlette.requests import Request

from aetherchat.utils.my_logging import correlation_id_var

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
SLOW_REQUEST_MS = 1000


async def correlation_id_middleware(request: Request, call_next):
    """Reuse the caller's correlation id or mint one; services log with it"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    log = logger.warning if elapsed_ms >= SLOW_REQUEST_MS else logger.info
    log(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f} ms")
    return response
