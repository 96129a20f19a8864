"""
입력 검증

각 규칙은 FieldError 목록을 돌려주고, validate_* 함수가 모아서 한 번에
ValidationException(validation_errors=...)으로 보고합니다.
"""

import re
from typing import List, Optional, Tuple
from email_validator import validate_email, EmailNotValidError

from .errors import ValidationException, FieldError

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
USERNAME_LENGTH = (3, 50)
PASSWORD_LENGTH = (8, 64)
DISPLAY_NAME_MAX_LENGTH = 100


def _raise_if_any(message: str, errors: List[FieldError]):
    if errors:
        raise ValidationException(message, validation_errors=errors)


def _length_errors(value: str, field: str, label: str, bounds: Tuple[int, int]) -> List[FieldError]:
    low, high = bounds
    if len(value) < low:
        return [FieldError(field=field, message=f"{label} must be at least {low} characters long", value=len(value))]
    if len(value) > high:
        return [FieldError(field=field, message=f"{label} must be no more than {high} characters long", value=len(value))]
    return []


class Validator:

    @staticmethod
    def missing(value: Optional[str], field: str) -> List[FieldError]:
        if value is None or not str(value).strip():
            return [FieldError(field=field, message="This field is required", value=value)]
        return []

    @staticmethod
    def email_errors(email: Optional[str], field: str = "email") -> List[FieldError]:
        errors = Validator.missing(email, field)
        if errors:
            return errors
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            return [FieldError(field=field, message=str(e), value=email)]
        return []

    @staticmethod
    def password_errors(password: Optional[str], field: str = "password") -> List[FieldError]:
        errors = Validator.missing(password, field)
        if errors:
            return errors
        errors = _length_errors(password, field, "Password", PASSWORD_LENGTH)
        if not re.search(r"[a-zA-Z]", password):
            errors.append(FieldError(field=field, message="Password must contain at least one letter"))
        if not re.search(r"\d", password):
            errors.append(FieldError(field=field, message="Password must contain at least one digit"))
        return errors

    @staticmethod
    def username_errors(username: Optional[str], field: str = "username") -> List[FieldError]:
        errors = Validator.missing(username, field)
        if errors:
            return errors
        errors = _length_errors(username, field, "Username", USERNAME_LENGTH)
        if not USERNAME_PATTERN.match(username):
            errors.append(FieldError(
                field=field,
                message="Username can only contain letters, numbers, underscores, and hyphens"
            ))
        return errors

    @staticmethod
    def display_name_errors(display_name: Optional[str], field: str = "display_name") -> List[FieldError]:
        # 선택 항목
        if display_name is None or not display_name.strip():
            return []
        display_name = display_name.strip()
        if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
            return [FieldError(
                field=field,
                message=f"Display name must be no more than {DISPLAY_NAME_MAX_LENGTH} characters long",
                value=len(display_name)
            )]
        if CONTROL_CHARS.search(display_name):
            return [FieldError(field=field, message="Display name cannot contain control characters")]
        return []

    @staticmethod
    def validate_password_strength(password: str) -> str:
        _raise_if_any("Password does not meet security requirements", Validator.password_errors(password))
        return password

    @staticmethod
    def validate_pagination(page: int, size: int, max_size: int) -> Tuple[int, int]:
        """관계/미디어 목록의 page, size 범위 검사"""
        errors = []
        if page < 1:
            errors.append(FieldError(field="page", message="Page must be 1 or greater", value=page))
        if size < 1:
            errors.append(FieldError(field="size", message="Size must be greater than 0", value=size))
        elif size > max_size:
            errors.append(FieldError(field="size", message=f"Size must be no more than {max_size}", value=size))

        _raise_if_any("Invalid pagination parameters", errors)
        return page, size


def validate_user_registration(email: str, username: str, password: str, display_name: Optional[str] = None):
    """회원가입 입력 전체를 검사해 모든 필드 오류를 한 번에 보고"""
    _raise_if_any(
        "Registration data is invalid",
        Validator.email_errors(email)
        + Validator.username_errors(username)
        + Validator.password_errors(password)
        + Validator.display_name_errors(display_name)
    )


def validate_user_login(email: str, password: str):
    _raise_if_any(
        "Login data is invalid",
        Validator.email_errors(email) + Validator.missing(password, "password")
    )
