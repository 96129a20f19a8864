from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.mysql import get_async_session
from app.models.users import User
from app.schemas.conversation import (
    ConversationResponse,
    ConversationMembersResponse,
    MemberResponse
)
from app.api.auth import get_current_user
from app.services import conversation_service, membership_service

router = APIRouter(prefix="/conversations", tags=["Conversations"])


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> ConversationResponse:
    """대화방 조회 (멤버만)"""
    return await conversation_service.get_conversation_for_member(
        db, conversation_id, current_user.id
    )


@router.get("/{conversation_id}/members", response_model=ConversationMembersResponse)
async def get_conversation_members(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
) -> ConversationMembersResponse:
    """
    대화방 멤버 목록을 조회합니다.

    Args:
        conversation_id: 대화방 ID
        current_user: 현재 사용자 (멤버여야 함)
        db: 데이터베이스 세션

    Returns:
        ConversationMembersResponse: 멤버 목록
    """
    await conversation_service.get_conversation_for_member(db, conversation_id, current_user.id)

    memberships = await membership_service.list_conversation_members(db, conversation_id)
    members = [MemberResponse.model_validate(membership) for membership in memberships]

    return ConversationMembersResponse(
        conversation_id=conversation_id,
        members=members,
        total=len(members)
    )
