"""
에러 응답 변환

- BaseCustomException: to_dict() 그대로 (5xx만 로그)
- 저장소 예외: INFRASTRUCTURE_ERRORS 표에 따라 상태 코드/에러 코드 지정
- 그 외: 500 (debug 모드에서만 traceback 포함)
"""

import logging
import traceback
from typing import Callable, List, Optional
from fastapi import Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import IntegrityError, OperationalError, DatabaseError
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import ConnectionFailure, OperationFailure

from app.core.errors import (
    BaseCustomException,
    FieldError,
    create_error_response,
    create_validation_error_response
)
from app.core.config import settings
from app.core.logging import get_logger, log_event

logger = get_logger(__name__)

# 위에서부터 첫 번째로 일치하는 항목 사용 (IntegrityError는 DatabaseError의 하위 클래스)
INFRASTRUCTURE_ERRORS = [
    (IntegrityError, status.HTTP_409_CONFLICT, "resource_conflict", "Resource conflict"),
    ((OperationalError, DatabaseError), status.HTTP_503_SERVICE_UNAVAILABLE,
     "database_error", "Database connection or operation failed"),
    (ConnectionFailure, status.HTTP_503_SERVICE_UNAVAILABLE,
     "mongodb_connection_error", "MongoDB connection failed"),
    (OperationFailure, status.HTTP_500_INTERNAL_SERVER_ERROR,
     "mongodb_operation_error", "MongoDB operation failed"),
]


def to_field_errors(errors: List[dict]) -> List[FieldError]:
    """pydantic 에러 목록 -> FieldError (loc은 점으로 연결)"""
    return [
        FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input")
        )
        for error in errors
    ]


def custom_exception_response(exc: BaseCustomException) -> JSONResponse:
    if exc.status_code >= 500:
        log_event(logger, exc.error, exc.message, level=logging.ERROR, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


def validation_failure_response(errors: List[dict]) -> JSONResponse:
    body = create_validation_error_response("Request validation failed", to_field_errors(errors))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(body.model_dump(mode="json"))
    )


def infrastructure_error_response(exc: Exception) -> Optional[JSONResponse]:
    for error_types, status_code, error, message in INFRASTRUCTURE_ERRORS:
        if isinstance(exc, error_types):
            detail = str(getattr(exc, "orig", None) or exc)
            level = logging.WARNING if status_code < 500 else logging.ERROR
            log_event(logger, error, f"{type(exc).__name__}: {detail}", level=level)
            body = create_error_response(
                error, message, status_code,
                {"detail": detail} if settings.debug else None
            )
            return JSONResponse(status_code=status_code, content=body.model_dump())
    return None


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """라우터 밖으로 전파된 예외를 표준 에러 응답으로 변환"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except BaseCustomException as e:
            return custom_exception_response(e)
        except PydanticValidationError as e:
            return validation_failure_response(e.errors())
        except Exception as e:
            response = infrastructure_error_response(e)
            if response is not None:
                return response

            logger.error(f"Unhandled exception: {type(e).__name__}: {e}", exc_info=True)
            details = {"type": type(e).__name__, "traceback": traceback.format_exc()} if settings.debug else None
            body = create_error_response(
                "internal_server_error",
                "An unexpected error occurred",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                details
            )
            return JSONResponse(status_code=body.status_code, content=body.model_dump())


def create_http_exception_handler():
    async def http_exception_handler(request: Request, exc):
        if isinstance(exc, BaseCustomException):
            return custom_exception_response(exc)

        # 프레임워크 HTTPException (401 인증 헤더 등 포함)
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error occurred"
        details = None if isinstance(exc.detail, str) else {"detail": exc.detail}
        body = create_error_response("http_error", message, exc.status_code, details)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(body.model_dump()),
            headers=getattr(exc, "headers", None)
        )

    return http_exception_handler


def create_request_validation_handler():
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return validation_failure_response(exc.errors())

    return request_validation_handler
