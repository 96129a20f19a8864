"""
Conversation service layer for database operations.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.errors import ResourceNotFoundException, unauthorized_user_error
from app.core.logging import get_logger, bind_resource, log_database_operation
from app.models.conversations import Conversation
from app.models.memberships import Membership
from app.schemas.conversation import ConversationCreate

logger = get_logger(__name__)


# =============================================================================
# Conversation CRUD Operations
# =============================================================================

async def create_conversation(db: AsyncSession, payload: ConversationCreate) -> Conversation:
    """
    대화방 생성

    Args:
        db: 데이터베이스 세션
        payload: 이름, 설명, 생성자, 호스트 (호스트 미지정 시 생성자)

    Returns:
        Conversation: 생성된 대화방
    """
    now = datetime.utcnow()
    conversation = Conversation(
        name=payload.name,
        description=payload.description,
        created_by_id=payload.created_by,
        host_id=payload.host or payload.created_by,
        created_at=now,
        updated_at=now
    )

    db.add(conversation)
    await db.commit()
    await db.refresh(conversation)

    bind_resource(conversation_id=conversation.id)
    log_database_operation(logger, "insert", "conversations", host_id=conversation.host_id)
    return conversation


async def find_conversation_by_id(db: AsyncSession, conversation_id: str) -> Optional[Conversation]:
    """대화방 ID로 조회"""
    result = await db.execute(
        select(Conversation).where(Conversation.id == conversation_id)
    )
    return result.scalar_one_or_none()


async def get_conversation_by_id(db: AsyncSession, conversation_id: str) -> Conversation:
    """대화방 ID로 조회 (없으면 404)"""
    conversation = await find_conversation_by_id(db, conversation_id)
    if not conversation:
        raise ResourceNotFoundException(
            "Conversation",
            details={"resource": "Conversation", "conversation_id": conversation_id}
        )
    return conversation


# =============================================================================
# Access Checks
# =============================================================================

async def is_member(db: AsyncSession, conversation_id: str, user_id: str) -> bool:
    """사용자가 대화방 멤버인지 확인"""
    result = await db.execute(
        select(Membership.id).where(
            Membership.conversation_id == conversation_id,
            Membership.user_id == user_id
        )
    )
    return result.first() is not None


async def get_conversation_for_member(
    db: AsyncSession,
    conversation_id: str,
    user_id: str
) -> Conversation:
    """멤버만 조회 가능한 대화방"""
    bind_resource(conversation_id=conversation_id)
    conversation = await get_conversation_by_id(db, conversation_id)
    if not await is_member(db, conversation_id, user_id):
        raise unauthorized_user_error()
    return conversation
