from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_current_user
from app.core.errors import user_not_found_error
from app.database.mysql import get_async_session
from app.models.users import User
from app.schemas.user import UserSummary
from app.services import auth_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserSummary)
async def get_user_summary(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> UserSummary:
    """관계 응답에 쓰이는 것과 같은 공개 요약 (password_hash, deleted_at 제외)"""
    user = await auth_service.find_user_by_id(db, user_id)
    if not user:
        raise user_not_found_error(user_id)
    return UserSummary.model_validate(user)
