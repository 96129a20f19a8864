"""
Relationship store layer for database operations.

One record per unordered user pair, always stored as (user_a_id <= user_b_id).
Lookups return None on absence; point reads and updates raise ResourceNotFoundException.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from app.core.errors import (
    ConflictException,
    InternalServerException,
    ValidationException,
    relationship_not_found_error
)
from app.core.logging import get_logger, log_database_operation
from app.models.enums import RelationshipStatus
from app.models.relationships import Relationship
from app.utils.pairing import canonical_pair

logger = get_logger(__name__)

SORTABLE_FIELDS = {
    "created_at": Relationship.created_at,
    "updated_at": Relationship.updated_at,
    "status": Relationship.status,
}

UPDATABLE_FIELDS = {"status", "blocked_at", "private_conversation_id"}


def _with_users(query):
    """user_a / user_b를 함께 로드 (세션에 남아있는 객체도 새로 채움)"""
    return query.options(
        selectinload(Relationship.user_a),
        selectinload(Relationship.user_b)
    ).execution_options(populate_existing=True)


# =============================================================================
# Lookups
# =============================================================================

async def find_relationship_by_id(db: AsyncSession, relationship_id: str) -> Optional[Relationship]:
    """관계 ID로 조회"""
    result = await db.execute(
        _with_users(select(Relationship).where(Relationship.id == relationship_id))
    )
    return result.scalar_one_or_none()


async def get_relationship_by_id(db: AsyncSession, relationship_id: str) -> Relationship:
    """관계 ID로 조회 (없으면 404)"""
    relationship = await find_relationship_by_id(db, relationship_id)
    if not relationship:
        raise relationship_not_found_error(relationship_id)
    return relationship


async def find_relationship_by_user_pair(
    db: AsyncSession,
    first_user_id: str,
    second_user_id: str
) -> Optional[Relationship]:
    """두 사용자 간 관계 조회 (인자 순서와 무관)"""
    user_a_id, user_b_id = canonical_pair(first_user_id, second_user_id)
    result = await db.execute(
        _with_users(
            select(Relationship).where(
                Relationship.user_a_id == user_a_id,
                Relationship.user_b_id == user_b_id
            )
        )
    )
    return result.scalar_one_or_none()


# =============================================================================
# Writes
# =============================================================================

async def insert_relationship(
    db: AsyncSession,
    user_a_id: str,
    user_b_id: str,
    status: RelationshipStatus
) -> Relationship:
    """
    정렬된 쌍으로 관계를 저장합니다.

    같은 쌍에 AWAY 상태의 레코드가 있으면 그 레코드를 새 상태로 초기화하고,
    그 외 상태의 레코드가 있으면 ConflictException을 발생시킵니다.
    동시 요청으로 유니크 제약이 깨지는 경우도 ConflictException으로 보고합니다.

    Args:
        db: 데이터베이스 세션
        user_a_id: 정렬된 쌍의 앞쪽 사용자 ID
        user_b_id: 정렬된 쌍의 뒤쪽 사용자 ID
        status: 저장할 상태

    Returns:
        Relationship: 사용자 정보가 로드된 관계
    """
    if user_a_id == user_b_id:
        raise ValidationException("User A and user B must be different")
    if (user_a_id, user_b_id) != canonical_pair(user_a_id, user_b_id):
        raise ValidationException(
            "Relationship pair must be given in canonical order",
            details={"user_a_id": user_a_id, "user_b_id": user_b_id}
        )

    existing = await find_relationship_by_user_pair(db, user_a_id, user_b_id)
    if existing and existing.status != RelationshipStatus.AWAY.value:
        raise ConflictException(
            "Relationship existed",
            details={"relationship_id": existing.id, "status": existing.status}
        )

    now = datetime.utcnow()
    if existing:
        # AWAY 레코드 재사용
        existing.status = RelationshipStatus(status).value
        existing.blocked_at = None
        existing.private_conversation_id = None
        existing.updated_at = now
        relationship = existing
        operation = "reset"
    else:
        relationship = Relationship(
            user_a_id=user_a_id,
            user_b_id=user_b_id,
            status=RelationshipStatus(status).value,
            created_at=now,
            updated_at=now
        )
        db.add(relationship)
        operation = "insert"

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictException(
            "Relationship existed",
            details={"user_a_id": user_a_id, "user_b_id": user_b_id}
        ) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create relationship: {e}")
        raise InternalServerException("Failed to create relationship", cause=e) from e

    log_database_operation(
        logger, operation, "relationships",
        affected_rows=1, relationship_id=relationship.id
    )
    return await get_relationship_by_id(db, relationship.id)


async def update_relationship(
    db: AsyncSession,
    relationship_id: str,
    fields: Dict[str, Any]
) -> Relationship:
    """
    관계 부분 수정

    Args:
        db: 데이터베이스 세션
        relationship_id: 관계 ID
        fields: 변경할 필드 (status, blocked_at, private_conversation_id)

    Returns:
        Relationship: 수정된 관계
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationException(
            f"Fields cannot be updated: {', '.join(sorted(unknown))}"
        )

    relationship = await get_relationship_by_id(db, relationship_id)

    for field, value in fields.items():
        if field == "status" and value is not None:
            value = RelationshipStatus(value).value
        setattr(relationship, field, value)
    relationship.updated_at = datetime.utcnow()

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update relationship {relationship_id}: {e}")
        raise InternalServerException("Failed to update relationship", cause=e) from e

    log_database_operation(
        logger, "update", "relationships",
        affected_rows=1, relationship_id=relationship_id, fields=sorted(fields)
    )
    return await get_relationship_by_id(db, relationship_id)


# =============================================================================
# Listing
# =============================================================================

def normalize_status_filter(status: str) -> RelationshipStatus:
    """대소문자 구분 없이 상태 필터 해석"""
    try:
        return RelationshipStatus(status.strip().upper())
    except ValueError:
        raise ValidationException(f"Unknown relationship status: {status}")


async def list_relationships(
    db: AsyncSession,
    participant_id: str,
    page: int,
    size: int,
    sort_by: str,
    order_by: str,
    status: str
) -> List[Relationship]:
    """
    참여자 기준 관계 목록 조회 (차단된 관계 제외)

    Args:
        db: 데이터베이스 세션
        participant_id: user_a 또는 user_b로 참여한 사용자 ID
        page: 페이지 (1부터)
        size: 페이지 크기
        sort_by: 정렬 필드 (created_at, updated_at, status)
        order_by: asc 이면 오름차순, 그 외 내림차순
        status: 상태 필터 (대소문자 무시)

    Returns:
        List[Relationship]: 관계 목록
    """
    if page < 1 or size < 1:
        raise ValidationException("Page and size must be positive")

    sort_column = SORTABLE_FIELDS.get(sort_by)
    if sort_column is None:
        raise ValidationException(
            f"Cannot sort by '{sort_by}'. Allowed: {', '.join(SORTABLE_FIELDS)}"
        )
    direction = asc if order_by.lower() == "asc" else desc
    status_filter = normalize_status_filter(status)

    query = _with_users(
        select(Relationship).where(
            or_(
                Relationship.user_a_id == participant_id,
                Relationship.user_b_id == participant_id
            ),
            Relationship.status == status_filter.value,
            Relationship.blocked_at.is_(None)
        )
    ).order_by(direction(sort_column), direction(Relationship.id)).offset((page - 1) * size).limit(size)

    result = await db.execute(query)
    return list(result.scalars().all())
