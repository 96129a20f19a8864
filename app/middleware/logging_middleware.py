"""
요청 로깅 미들웨어

요청마다 X-Request-ID를 부여하고(클라이언트가 보낸 값 우선) 완료 시 한 줄로 기록합니다.
"""

import logging
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, set_request_context, clear_request_context, log_event

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, log_requests: bool = True, slow_request_threshold_ms: float = 1000):
        super().__init__(app)
        self.log_requests = log_requests
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_context(request_id)
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
            duration_ms = self._elapsed_ms(started)

            if self.log_requests:
                log_event(
                    logger, "request", f"{route} - {response.status_code}",
                    status_code=response.status_code, duration_ms=duration_ms,
                    client_ip=client_ip(request)
                )
            if duration_ms > self.slow_request_threshold_ms:
                log_event(
                    logger, "slow_request", f"Slow request: {route}", level=logging.WARNING,
                    duration_ms=duration_ms, threshold_ms=self.slow_request_threshold_ms
                )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            log_event(
                logger, "request", f"{route} failed", level=logging.ERROR,
                duration_ms=self._elapsed_ms(started), client_ip=client_ip(request)
            )
            raise
        finally:
            clear_request_context()

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)
