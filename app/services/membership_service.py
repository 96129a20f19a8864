"""
Membership service layer for database operations.
"""

from datetime import datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictException, user_not_found_error, unauthorized_user_error
from app.core.logging import get_logger, bind_resource, log_database_operation, log_security_event
from app.models.enums import MembershipRole
from app.models.memberships import Membership
from app.schemas.conversation import MembershipCreate
from app.services import auth_service, conversation_service

logger = get_logger(__name__)


async def find_membership(
    db: AsyncSession,
    user_id: str,
    conversation_id: str
) -> Optional[Membership]:
    """사용자-대화방 멤버십 조회"""
    result = await db.execute(
        select(Membership).where(
            Membership.user_id == user_id,
            Membership.conversation_id == conversation_id
        )
    )
    return result.scalar_one_or_none()


async def create_membership(
    db: AsyncSession,
    requester_id: str,
    payload: MembershipCreate
) -> Membership:
    """
    대화방에 사용자를 멤버로 추가합니다.

    호스트는 누구든 추가할 수 있고, 그 외 사용자는 자기 자신만 추가할 수 있습니다.

    Raises:
        ResourceNotFoundException: 사용자 또는 대화방이 없음
        AuthorizationException: 호스트도 본인도 아님
        ConflictException: 이미 멤버
    """
    user = await auth_service.find_user_by_id(db, payload.user)
    if not user:
        raise user_not_found_error(payload.user)

    conversation = await conversation_service.get_conversation_by_id(db, payload.conversation)
    bind_resource(conversation_id=conversation.id)

    if requester_id not in (conversation.host_id, payload.user):
        log_security_event(
            logger, "membership_denied", severity="low",
            requester_id=requester_id, member_id=payload.user
        )
        raise unauthorized_user_error()

    if await find_membership(db, payload.user, payload.conversation):
        raise ConflictException("User is already a member of this conversation")

    now = datetime.utcnow()
    membership = Membership(
        user_id=payload.user,
        conversation_id=payload.conversation,
        role=MembershipRole(payload.role).value,
        created_at=now,
        updated_at=now
    )
    db.add(membership)

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictException("User is already a member of this conversation") from e

    await db.refresh(membership)

    log_database_operation(logger, "insert", "memberships", member_id=membership.user_id, role=membership.role)
    return membership


async def list_conversation_members(db: AsyncSession, conversation_id: str) -> List[Membership]:
    """대화방 멤버 목록 (가입 순)"""
    result = await db.execute(
        select(Membership)
        .options(selectinload(Membership.user))
        .where(Membership.conversation_id == conversation_id)
        .order_by(Membership.created_at, Membership.id)
    )
    return list(result.scalars().all())
