import logging
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthenticationException
from app.core.logging import get_logger, log_event, set_user_context
from app.database.mysql import get_async_session
from app.models.users import User
from app.schemas.user import UserCreate, UserLogin, UserResponse, Token
from app.services import auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger(__name__)


async def get_current_user(
        token: str = Depends(oauth2_scheme),
        db: AsyncSession = Depends(get_async_session)
) -> User:
    """Bearer 토큰의 사용자. 관계/대화방/미디어 API의 요청자 ID가 됩니다."""
    user = await auth_service.user_from_token(db, token)
    set_user_context(user.id)
    return user


async def _login(db: AsyncSession, email: str, password: str) -> Token:
    try:
        user = await auth_service.login(db, email, password)
    except AuthenticationException:
        log_event(logger, "authentication", "Login failed", logging.WARNING, email=email)
        raise
    log_event(logger, "authentication", "Login succeeded", user_id=user.id)
    return auth_service.issue_token(user)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
        user_data: UserCreate,
        db: AsyncSession = Depends(get_async_session)
) -> UserResponse:
    user = await auth_service.register_user(db, user_data)
    log_event(logger, "authentication", "User registered", user_id=user.id)
    return user


@router.post("/login", response_model=Token)
async def login_oauth2(
        form_data: OAuth2PasswordRequestForm = Depends(),
        db: AsyncSession = Depends(get_async_session)
) -> Token:
    """OAuth2 폼 로그인 (Swagger UI용, username 필드에 이메일)"""
    return await _login(db, form_data.username, form_data.password)


@router.post("/login/json", response_model=Token)
async def login_json(
        user_data: UserLogin,
        db: AsyncSession = Depends(get_async_session)
) -> Token:
    return await _login(db, user_data.email, user_data.password)


@router.get("/me", response_model=UserResponse)
async def read_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return current_user
