"""
도메인 예외

서비스 계층은 아래 예외를 그대로 raise 하고, error_handler가 응답 본문
`{error, message, details, status_code}`(검증 에러는 validation_errors 추가)로 변환합니다.

    ValidationException        400  잘못된 입력, 허용되지 않는 상태 전이
    AuthenticationException    401  토큰/자격 증명 오류
    AuthorizationException     403  관계/대화방/미디어의 당사자가 아님
    ResourceNotFoundException  404
    ConflictException          409  이미 존재하는 관계/멤버십/계정
    InternalServerException    500  저장소 실패 (원인 예외 보존)
"""

from typing import Optional, Dict, Any, List
from fastapi import HTTPException, status
from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str
    value: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    status_code: int


class ValidationErrorResponse(ErrorResponse):
    error: str = "validation_error"
    validation_errors: List[FieldError]


class BaseCustomException(HTTPException):
    """하위 클래스는 status_code / error / default_message만 지정"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=type(self).status_code, detail=self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return ErrorResponse(
            error=self.error,
            message=self.message,
            details=self.details,
            status_code=self.status_code
        ).model_dump()


class ValidationException(BaseCustomException):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "validation_error"
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        validation_errors: Optional[List[FieldError]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.validation_errors = list(validation_errors or [])
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        return ValidationErrorResponse(
            message=self.message,
            details=self.details,
            validation_errors=self.validation_errors,
            status_code=self.status_code
        ).model_dump()


class AuthenticationException(BaseCustomException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "authentication_error"
    default_message = "Authentication failed"


class AuthorizationException(BaseCustomException):
    status_code = status.HTTP_403_FORBIDDEN
    error = "authorization_error"
    default_message = "Access denied"


class ResourceNotFoundException(BaseCustomException):
    status_code = status.HTTP_404_NOT_FOUND
    error = "resource_not_found"

    def __init__(
        self,
        resource: str = "Resource",
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message or f"{resource} not found", details or {"resource": resource})


class ConflictException(BaseCustomException):
    status_code = status.HTTP_409_CONFLICT
    error = "resource_conflict"
    default_message = "Resource conflict"


class InternalServerException(BaseCustomException):
    error = "internal_server_error"
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.cause = cause
        details = dict(details or {})
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, details or None)


def create_error_response(
    error: str,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    return ErrorResponse(error=error, message=message, status_code=status_code, details=details)


def create_validation_error_response(
    message: str,
    validation_errors: List[FieldError],
    status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY
) -> ValidationErrorResponse:
    return ValidationErrorResponse(
        message=message,
        validation_errors=validation_errors,
        status_code=status_code
    )


# =============================================================================
# 자주 쓰는 에러
# =============================================================================

def user_not_found_error(user_id: Optional[str] = None, label: str = "User"):
    """label: "User A", "Target user" 등 메시지에 쓰일 역할명"""
    details = {"resource": "User", "user_id": user_id} if user_id else None
    return ResourceNotFoundException("User", message=f"{label} not found", details=details)


def relationship_not_found_error(relationship_id: Optional[str] = None):
    details = {"resource": "Relationship", "relationship_id": relationship_id} if relationship_id else None
    return ResourceNotFoundException("Relationship", details=details)


def unauthorized_user_error():
    """요청자가 해당 리소스의 당사자가 아님"""
    return AuthorizationException("Unauthorized user")


def invalid_credentials_error():
    return AuthenticationException("Invalid email or password")


def invalid_token_error():
    return AuthenticationException("Invalid or expired token")


def email_already_exists_error():
    return ConflictException("Email already registered")


def username_already_exists_error():
    return ConflictException("Username already taken")
