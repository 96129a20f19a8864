"""
사용자 디렉토리와 인증

find_user_by_id는 관계/대화방/미디어 서비스가 사용자 존재 여부를 확인할 때 쓰는
조회 경로입니다. soft delete(deleted_at)된 사용자는 존재하지 않는 것으로 봅니다.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    ConflictException,
    email_already_exists_error,
    invalid_credentials_error,
    invalid_token_error,
    user_not_found_error,
    username_already_exists_error
)
from app.core.validators import validate_user_login, validate_user_registration
from app.models.users import User
from app.schemas.user import Token, UserCreate
from app.utils.auth import create_access_token, decode_access_token, get_password_hash, verify_password


def _live_users():
    return select(User).where(User.deleted_at.is_(None))


async def find_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    result = await db.execute(_live_users().where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(_live_users().where(User.email == email))
    return result.scalar_one_or_none()


async def is_user_exists(db: AsyncSession, user_id: str) -> bool:
    return await find_user_by_id(db, user_id) is not None


# =============================================================================
# Registration / Login
# =============================================================================

async def register_user(db: AsyncSession, payload: UserCreate) -> User:
    """
    회원가입

    Raises:
        ValidationException: 입력 형식 오류 (모든 필드 오류를 한 번에)
        ConflictException: 이메일/사용자명 중복 (삭제된 계정 포함)
    """
    validate_user_registration(payload.email, payload.username, payload.password, payload.display_name)

    # 유니크 컬럼이므로 soft delete된 계정과도 겹치면 안 됨
    result = await db.execute(
        select(User.email, User.username).where(
            or_(User.email == payload.email, User.username == payload.username)
        )
    )
    taken = result.all()
    if any(email == payload.email for email, _ in taken):
        raise email_already_exists_error()
    if taken:
        raise username_already_exists_error()

    now = datetime.utcnow()
    user = User(
        email=payload.email,
        username=payload.username,
        password_hash=get_password_hash(payload.password),
        display_name=payload.display_name,
        created_at=now,
        updated_at=now
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        # 동시 가입
        await db.rollback()
        raise ConflictException("Email or username already registered") from e

    await db.refresh(user)
    return user


async def authenticate_user_by_email(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """비밀번호가 맞고 활성 상태인 사용자, 아니면 None"""
    user = await find_user_by_email(db, email)
    if user and user.is_active and verify_password(password, user.password_hash):
        return user
    return None


async def login(db: AsyncSession, email: str, password: str) -> User:
    validate_user_login(email, password)
    user = await authenticate_user_by_email(db, email, password)
    if not user:
        raise invalid_credentials_error()
    return user


# =============================================================================
# Tokens
# =============================================================================

def issue_token(user: User) -> Token:
    """sub = 사용자 ID"""
    lifetime = timedelta(hours=settings.access_token_expire_hours)
    return Token(
        access_token=create_access_token({"sub": user.id, "email": user.email}, expires_delta=lifetime),
        expires_in=int(lifetime.total_seconds())
    )


async def user_from_token(db: AsyncSession, token: str) -> User:
    """
    Raises:
        AuthenticationException: 토큰 서명/만료/sub 오류
        ResourceNotFoundException: 삭제되었거나 비활성인 사용자
    """
    user_id = (decode_access_token(token) or {}).get("sub")
    if not user_id:
        raise invalid_token_error()

    user = await find_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise user_not_found_error(user_id)
    return user
