"""
친구 수락 시퀀스

친구 요청을 수락하면 다음 단계가 순서대로 실행됩니다.

1. create_conversation: 두 사용자 전용 대화방 생성 (요청자가 생성자이자 호스트)
2. create_memberships: 참여자별 멤버십 생성 (요청자 HOST, 상대방 MEMBER)
3. mark_friends: 관계를 FRIENDS로 변경하고 대화방을 연결

각 단계는 개별적으로 커밋됩니다. 중간 단계가 실패하면 이미 완료된 단계는
되돌리지 않고 그대로 남으며, 실패한 단계와 완료된 단계 목록을 담은
InternalServerException이 발생합니다.
"""

import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalServerException
from app.core.logging import get_logger, bind_resource, log_event
from app.models.conversations import Conversation
from app.models.enums import MembershipRole, RelationshipStatus
from app.models.memberships import Membership
from app.models.relationships import Relationship
from app.schemas.conversation import ConversationCreate, MembershipCreate
from app.services import conversation_service, membership_service, relationship_store

logger = get_logger(__name__)


class FriendshipConfirmation:
    STEPS = ("create_conversation", "create_memberships", "mark_friends")

    def __init__(self, db: AsyncSession, relationship: Relationship, requester_id: str):
        self.db = db
        self.relationship = relationship
        self.requester_id = requester_id
        self.completed_steps: List[str] = []
        self.conversation: Optional[Conversation] = None
        self.memberships: List[Membership] = []
        self.result: Optional[Relationship] = None

    async def run(self) -> Relationship:
        relationship_id = self.relationship.id
        bind_resource(relationship_id=relationship_id)

        for step in self.STEPS:
            try:
                await getattr(self, step)()
            except Exception as e:
                details = {
                    "relationship_id": relationship_id,
                    "failed_step": step,
                    "completed_steps": list(self.completed_steps)
                }
                log_event(
                    logger, "friendship_confirmation", f"Confirmation failed at {step}: {e}",
                    level=logging.ERROR, **details
                )
                raise InternalServerException(
                    "Failed to update relationship", cause=e, details=details
                ) from e
            self.completed_steps.append(step)

        log_event(logger, "friendship_confirmation", "Friendship confirmed", steps=list(self.completed_steps))
        return self.result

    async def create_conversation(self):
        label = f"Private conversation [{self.relationship.id}]"
        self.conversation = await conversation_service.create_conversation(
            self.db,
            ConversationCreate(
                name=label,
                description=label,
                created_by=self.requester_id,
                host=self.requester_id
            )
        )

    async def create_memberships(self):
        for user_id in (self.relationship.user_a_id, self.relationship.user_b_id):
            role = MembershipRole.HOST if user_id == self.requester_id else MembershipRole.MEMBER
            membership = await membership_service.create_membership(
                self.db,
                self.requester_id,
                MembershipCreate(user=user_id, conversation=self.conversation.id, role=role)
            )
            self.memberships.append(membership)

    async def mark_friends(self):
        self.result = await relationship_store.update_relationship(
            self.db,
            self.relationship.id,
            {
                "status": RelationshipStatus.FRIENDS,
                "private_conversation_id": self.conversation.id
            }
        )
