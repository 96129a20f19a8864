from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.validators import Validator
from app.database.mysql import get_async_session
from app.models.users import User
from app.schemas.relationship import (
    RelationshipCreate,
    RelationshipUpdate,
    BlockUserRequest,
    RelationshipResponse,
    RelationshipListResponse
)
from app.api.auth import get_current_user
from app.services import relationship_service

router = APIRouter(prefix="/relationships", tags=["Relationships"])


@router.post("", response_model=RelationshipResponse,
             status_code=status.HTTP_201_CREATED)
async def create_relationship(
        payload: RelationshipCreate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipResponse:
    """
    친구 요청을 생성합니다.

    Args:
        payload: user_a, user_b, status (REQUEST_USER_A / REQUEST_USER_B)
        current_user: 현재 인증된 사용자 (요청자)
        db: 데이터베이스 세션

    Returns:
        RelationshipResponse: 사용자 정보가 포함된 관계
    """
    return await relationship_service.create_relationship(db, current_user.id, payload)


@router.get("", response_model=RelationshipListResponse)
async def list_relationships(
        status_filter: str = Query(..., alias="status", description="관계 상태 (대소문자 무시)"),
        page: int = Query(default=1, description="페이지 (1부터)"),
        size: int = Query(default=settings.default_page_size, description="페이지 크기"),
        sort_by: str = Query(default="created_at", description="정렬 필드"),
        order_by: str = Query(default="desc", description="asc 또는 desc"),
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipListResponse:
    """
    내 관계 목록을 조회합니다. 차단된 관계는 포함되지 않습니다.
    """
    Validator.validate_pagination(page, size, settings.max_page_size)

    return await relationship_service.find_all(
        db, current_user.id, page, size, sort_by, order_by, status_filter
    )


@router.post("/block", response_model=RelationshipResponse)
async def block_user(
        payload: BlockUserRequest,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipResponse:
    """사용자를 차단합니다."""
    return await relationship_service.block_user(db, current_user.id, payload)


@router.get("/{relationship_id}", response_model=RelationshipResponse)
async def get_relationship(
        relationship_id: str,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipResponse:
    """내가 참여한 관계를 조회합니다."""
    return await relationship_service.find_my_relationship(db, relationship_id, current_user.id)


@router.patch("/{relationship_id}", response_model=RelationshipResponse)
async def update_relationship(
        relationship_id: str,
        payload: RelationshipUpdate,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipResponse:
    """관계 상태를 수정합니다."""
    return await relationship_service.update_relationship(
        db, relationship_id, payload, current_user.id
    )


@router.post("/{relationship_id}/confirm", response_model=RelationshipResponse)
async def confirm_friendship(
        relationship_id: str,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_session)
) -> RelationshipResponse:
    """
    친구 요청을 수락합니다.

    두 사용자 전용 대화방이 생성되고 관계가 FRIENDS로 변경됩니다.
    """
    return await relationship_service.confirm_friendship(db, current_user.id, relationship_id)
