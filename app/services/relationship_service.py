"""
Relationship service layer.

친구 요청, 수락, 차단 등 관계 상태 전이와 권한 검사를 담당합니다.
모든 반환값은 사용자 정보가 채워진 응답 스키마입니다.
"""

from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ValidationException,
    relationship_not_found_error,
    user_not_found_error,
    unauthorized_user_error
)
from app.core.logging import get_logger, bind_resource, log_event, log_security_event
from app.models.enums import RelationshipStatus
from app.schemas.relationship import (
    RelationshipCreate,
    RelationshipUpdate,
    BlockUserRequest,
    RelationshipResponse,
    RelationshipListResponse,
    ListMetadata,
    Pagination
)
from app.services import auth_service, relationship_store
from app.services.friendship_confirmation import FriendshipConfirmation
from app.utils.pairing import canonical_pair, slot_of, user_in_slot
from app.utils.populate import populate

logger = get_logger(__name__)


def to_response(relationship) -> RelationshipResponse:
    return RelationshipResponse.model_validate(relationship)


# =============================================================================
# Create
# =============================================================================

async def create_relationship(
    db: AsyncSession,
    requester_id: str,
    payload: RelationshipCreate
) -> RelationshipResponse:
    """
    친구 요청 생성

    payload의 상태는 입력 순서 기준(user_a, user_b)으로 요청자를 가리킵니다.
    저장 시 쌍을 정렬하면서 상태도 요청한 사용자를 그대로 가리키도록 다시 계산합니다.
    예) create(u1, user_a=u2, user_b=u1, REQUEST_USER_B) -> (u1, u2, REQUEST_USER_A)

    Raises:
        ValidationException: 같은 사용자, 요청 상태가 아님
        ResourceNotFoundException: 사용자 없음
        ConflictException: AWAY가 아닌 관계가 이미 존재
    """
    if payload.user_a == payload.user_b:
        raise ValidationException("User A and user B must be different")

    status = RelationshipStatus(payload.status)
    if not status.is_request:
        raise ValidationException(
            "Relationship status must be REQUEST_USER_A or REQUEST_USER_B",
            details={"status": status.value}
        )

    if not await auth_service.find_user_by_id(db, payload.user_a):
        raise user_not_found_error(payload.user_a, label="User A")
    if not await auth_service.find_user_by_id(db, payload.user_b):
        raise user_not_found_error(payload.user_b, label="User B")

    initiator_id = user_in_slot(status.requester_slot, payload.user_a, payload.user_b)
    user_a_id, user_b_id = canonical_pair(payload.user_a, payload.user_b)
    stored_status = RelationshipStatus.request_from(
        slot_of(initiator_id, payload.user_a, payload.user_b)
    )

    relationship = await relationship_store.insert_relationship(
        db, user_a_id, user_b_id, stored_status
    )
    bind_resource(relationship_id=relationship.id)
    log_event(
        logger, "relationship", "Friend request created",
        status=stored_status.value, initiator=initiator_id
    )
    return populate(relationship, to_response)


# =============================================================================
# Read
# =============================================================================

async def find_my_relationship(
    db: AsyncSession,
    relationship_id: str,
    requester_id: str
) -> RelationshipResponse:
    """요청자가 참여한 관계 조회"""
    bind_resource(relationship_id=relationship_id)
    relationship = await relationship_store.get_relationship_by_id(db, relationship_id)
    if not relationship.has_participant(requester_id):
        raise unauthorized_user_error()
    return populate(relationship, to_response)


async def find_all(
    db: AsyncSession,
    requester_id: str,
    page: int,
    size: int,
    sort_by: str,
    order_by: str,
    status: str
) -> RelationshipListResponse:
    """요청자의 관계 목록 (차단된 관계 제외)"""
    relationships = await relationship_store.list_relationships(
        db, requester_id, page, size, sort_by, order_by, status
    )
    data = populate(relationships, to_response)
    return RelationshipListResponse(
        data=data,
        metadata=ListMetadata(
            pagination=Pagination(page=page, size=size),
            count=len(data)
        )
    )


# =============================================================================
# Transitions
# =============================================================================

async def confirm_friendship(
    db: AsyncSession,
    requester_id: str,
    relationship_id: str
) -> RelationshipResponse:
    """
    친구 요청 수락

    전용 대화방과 멤버십을 만든 뒤 관계를 FRIENDS로 변경합니다.
    진행 단계는 FriendshipConfirmation 참고.
    """
    bind_resource(relationship_id=relationship_id)
    relationship = await relationship_store.get_relationship_by_id(db, relationship_id)

    if not relationship.has_participant(requester_id):
        raise unauthorized_user_error()
    if relationship.status == RelationshipStatus.FRIENDS.value:
        raise ValidationException("Users are already friends")
    if relationship.blocked_at is not None:
        raise ValidationException("Relationship is blocked")

    confirmed = await FriendshipConfirmation(db, relationship, requester_id).run()
    return populate(confirmed, to_response)


async def update_relationship(
    db: AsyncSession,
    relationship_id: str,
    payload: RelationshipUpdate,
    requester_id: str
) -> RelationshipResponse:
    """관계 필드 수정 (존재 여부만 확인)"""
    bind_resource(relationship_id=relationship_id)
    relationship = await relationship_store.get_relationship_by_id(db, relationship_id)

    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return populate(relationship, to_response)

    relationship = await relationship_store.update_relationship(db, relationship_id, fields)
    log_event(
        logger, "relationship", "Relationship updated",
        fields=sorted(fields), updated_by=requester_id
    )
    return populate(relationship, to_response)


async def block_user(
    db: AsyncSession,
    requester_id: str,
    payload: BlockUserRequest
) -> RelationshipResponse:
    """
    사용자 차단

    차단한 사용자가 정렬된 쌍의 어느 슬롯인지에 따라 BLOCKED_USER_A / BLOCKED_USER_B를 저장합니다.

    Raises:
        ResourceNotFoundException: 차단자/대상 사용자 또는 관계 없음
        AuthorizationException: 요청자가 차단자가 아님
        ValidationException: 이미 차단된 관계
    """
    if not await auth_service.find_user_by_id(db, payload.blocked_by):
        raise user_not_found_error(payload.blocked_by, label="Block by user")

    if payload.blocked_by != requester_id:
        log_security_event(
            logger, "block_denied", severity="medium",
            user_id=requester_id, blocked_by=payload.blocked_by
        )
        raise unauthorized_user_error()

    if not await auth_service.find_user_by_id(db, payload.target_user):
        raise user_not_found_error(payload.target_user, label="Target user")

    relationship = await relationship_store.find_relationship_by_user_pair(
        db, payload.blocked_by, payload.target_user
    )
    if not relationship:
        raise relationship_not_found_error()
    bind_resource(relationship_id=relationship.id)
    if relationship.blocked_at is not None:
        raise ValidationException("Relationship is already blocked")

    status = RelationshipStatus.blocked_by(
        slot_of(payload.blocked_by, payload.blocked_by, payload.target_user)
    )
    blocked = await relationship_store.update_relationship(
        db,
        relationship.id,
        {"status": status, "blocked_at": datetime.utcnow()}
    )
    log_event(
        logger, "relationship", "User blocked",
        status=status.value, target_user=payload.target_user
    )
    return populate(blocked, to_response)
