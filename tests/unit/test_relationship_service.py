import pytest
from sqlalchemy import select

from app.core.errors import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException
)
from app.models.enums import RelationshipStatus
from app.models.memberships import Membership
from app.schemas.relationship import (
    RelationshipCreate,
    RelationshipUpdate,
    BlockUserRequest,
    RelationshipResponse
)
from app.services import relationship_service, relationship_store


def request(user_a: str, user_b: str, status: RelationshipStatus) -> RelationshipCreate:
    return RelationshipCreate(user_a=user_a, user_b=user_b, status=status)


class TestCreateRelationship:
    """친구 요청 생성 테스트"""

    @pytest.mark.asyncio
    async def test_create_stores_canonical_pair(self, test_session, test_user_1, test_user_2):
        result = await relationship_service.create_relationship(
            test_session, "u1", request("u1", "u2", RelationshipStatus.REQUEST_USER_A)
        )

        assert isinstance(result, RelationshipResponse)
        assert result.user_a.id == "u1"
        assert result.user_b.id == "u2"
        assert result.status == RelationshipStatus.REQUEST_USER_A

    @pytest.mark.asyncio
    async def test_swapped_input_keeps_requester(self, test_session, test_user_1, test_user_2):
        """u2, u1 순서로 u1이 요청하면 (u1, u2, REQUEST_USER_A)로 저장"""
        result = await relationship_service.create_relationship(
            test_session, "u1", request("u2", "u1", RelationshipStatus.REQUEST_USER_B)
        )

        assert result.user_a.id == "u1"
        assert result.user_b.id == "u2"
        assert result.status == RelationshipStatus.REQUEST_USER_A

    @pytest.mark.asyncio
    async def test_swapped_input_requester_in_slot_b(self, test_session, test_user_1, test_user_2):
        result = await relationship_service.create_relationship(
            test_session, "u2", request("u2", "u1", RelationshipStatus.REQUEST_USER_A)
        )

        assert result.user_a.id == "u1"
        assert result.status == RelationshipStatus.REQUEST_USER_B

    @pytest.mark.asyncio
    async def test_populated_users_hide_password(self, test_session, test_user_1, test_user_2):
        result = await relationship_service.create_relationship(
            test_session, "u1", request("u1", "u2", RelationshipStatus.REQUEST_USER_A)
        )

        user_a = result.model_dump()["user_a"]
        assert user_a["username"] == "user1"
        assert "password_hash" not in user_a
        assert "deleted_at" not in user_a

    @pytest.mark.asyncio
    async def test_same_user_rejected(self, test_session, test_user_1):
        with pytest.raises(ValidationException) as exc_info:
            await relationship_service.create_relationship(
                test_session, "u1", request("u1", "u1", RelationshipStatus.REQUEST_USER_A)
            )

        assert exc_info.value.message == "User A and user B must be different"

    @pytest.mark.asyncio
    async def test_friends_initial_status_rejected(self, test_session, test_user_1, test_user_2):
        with pytest.raises(ValidationException):
            await relationship_service.create_relationship(
                test_session, "u1", request("u1", "u2", RelationshipStatus.FRIENDS)
            )

        assert await relationship_store.find_relationship_by_user_pair(test_session, "u1", "u2") is None

    @pytest.mark.asyncio
    async def test_missing_user(self, test_session, test_user_1):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await relationship_service.create_relationship(
                test_session, "u1", request("u1", "ghost", RelationshipStatus.REQUEST_USER_A)
            )

        assert exc_info.value.message == "User B not found"

    @pytest.mark.asyncio
    async def test_status_slot_decides_initiator(self, test_session, test_user_1, test_user_2):
        """상태가 가리키는 슬롯의 사용자가 요청자로 저장됨 (호출자와 무관)"""
        result = await relationship_service.create_relationship(
            test_session, "u1", request("u1", "u2", RelationshipStatus.REQUEST_USER_B)
        )

        assert result.user_a.id == "u1"
        assert result.user_b.id == "u2"
        assert result.status == RelationshipStatus.REQUEST_USER_B

    @pytest.mark.asyncio
    async def test_existing_pair_conflict(self, test_session, pending_relationship):
        with pytest.raises(ConflictException):
            await relationship_service.create_relationship(
                test_session, "u2", request("u2", "u1", RelationshipStatus.REQUEST_USER_A)
            )

    @pytest.mark.asyncio
    async def test_recreate_after_away(self, test_session, pending_relationship):
        await relationship_store.update_relationship(
            test_session, pending_relationship.id, {"status": RelationshipStatus.AWAY}
        )

        result = await relationship_service.create_relationship(
            test_session, "u2", request("u2", "u1", RelationshipStatus.REQUEST_USER_A)
        )

        assert result.id == pending_relationship.id
        assert result.status == RelationshipStatus.REQUEST_USER_B


class TestFindRelationships:
    """관계 조회 테스트"""

    @pytest.mark.asyncio
    async def test_find_my_relationship(self, test_session, pending_relationship):
        result = await relationship_service.find_my_relationship(
            test_session, pending_relationship.id, "u2"
        )

        assert result.id == pending_relationship.id

    @pytest.mark.asyncio
    async def test_non_participant_rejected(self, test_session, pending_relationship, test_user_3):
        with pytest.raises(AuthorizationException) as exc_info:
            await relationship_service.find_my_relationship(
                test_session, pending_relationship.id, "u3"
            )

        assert exc_info.value.message == "Unauthorized user"

    @pytest.mark.asyncio
    async def test_missing_relationship(self, test_session):
        with pytest.raises(ResourceNotFoundException):
            await relationship_service.find_my_relationship(test_session, "missing", "u1")

    @pytest.mark.asyncio
    async def test_find_all_envelope(self, test_session, pending_relationship):
        result = await relationship_service.find_all(
            test_session, "u1", 1, 10, "created_at", "desc", "request_user_a"
        )

        assert result.metadata.pagination.page == 1
        assert result.metadata.pagination.size == 10
        assert result.metadata.count == 1
        assert result.data[0].id == pending_relationship.id


class TestConfirmFriendship:
    """친구 요청 수락 테스트"""

    @pytest.mark.asyncio
    async def test_confirm_creates_conversation_and_memberships(self, test_session, pending_relationship):
        result = await relationship_service.confirm_friendship(
            test_session, "u2", pending_relationship.id
        )

        assert result.status == RelationshipStatus.FRIENDS
        assert result.private_conversation_id is not None

        memberships = (await test_session.execute(
            select(Membership).where(Membership.conversation_id == result.private_conversation_id)
        )).scalars().all()

        assert {m.user_id for m in memberships} == {"u1", "u2"}
        hosts = [m for m in memberships if m.role == "HOST"]
        assert len(hosts) == 1
        assert hosts[0].user_id == "u2"

    @pytest.mark.asyncio
    async def test_confirm_twice_rejected(self, test_session, pending_relationship):
        await relationship_service.confirm_friendship(test_session, "u2", pending_relationship.id)

        with pytest.raises(ValidationException) as exc_info:
            await relationship_service.confirm_friendship(test_session, "u2", pending_relationship.id)

        assert exc_info.value.message == "Users are already friends"

    @pytest.mark.asyncio
    async def test_confirm_by_outsider_rejected(self, test_session, pending_relationship, test_user_3):
        with pytest.raises(AuthorizationException):
            await relationship_service.confirm_friendship(test_session, "u3", pending_relationship.id)

    @pytest.mark.asyncio
    async def test_confirm_missing(self, test_session, test_user_1):
        with pytest.raises(ResourceNotFoundException):
            await relationship_service.confirm_friendship(test_session, "u1", "missing")

    @pytest.mark.asyncio
    async def test_confirm_blocked_rejected(self, test_session, pending_relationship):
        await relationship_service.block_user(
            test_session, "u1", BlockUserRequest(blocked_by="u1", target_user="u2")
        )

        with pytest.raises(ValidationException):
            await relationship_service.confirm_friendship(test_session, "u2", pending_relationship.id)


class TestUpdateRelationship:
    """관계 수정 테스트"""

    @pytest.mark.asyncio
    async def test_update_status(self, test_session, pending_relationship):
        result = await relationship_service.update_relationship(
            test_session,
            pending_relationship.id,
            RelationshipUpdate(status=RelationshipStatus.AWAY),
            "u1"
        )

        assert result.status == RelationshipStatus.AWAY

    @pytest.mark.asyncio
    async def test_update_missing(self, test_session, test_user_1):
        with pytest.raises(ResourceNotFoundException):
            await relationship_service.update_relationship(
                test_session, "missing", RelationshipUpdate(status=RelationshipStatus.AWAY), "u1"
            )

    @pytest.mark.asyncio
    async def test_empty_update_returns_current(self, test_session, pending_relationship):
        result = await relationship_service.update_relationship(
            test_session, pending_relationship.id, RelationshipUpdate(), "u1"
        )

        assert result.status == RelationshipStatus.REQUEST_USER_A


class TestBlockUser:
    """사용자 차단 테스트"""

    @pytest.mark.asyncio
    async def test_block_by_user_a(self, test_session, pending_relationship):
        result = await relationship_service.block_user(
            test_session, "u1", BlockUserRequest(blocked_by="u1", target_user="u2")
        )

        assert result.status == RelationshipStatus.BLOCKED_USER_A
        assert result.blocked_at is not None

    @pytest.mark.asyncio
    async def test_block_by_user_b(self, test_session, pending_relationship):
        result = await relationship_service.block_user(
            test_session, "u2", BlockUserRequest(blocked_by="u2", target_user="u1")
        )

        assert result.status == RelationshipStatus.BLOCKED_USER_B

    @pytest.mark.asyncio
    async def test_block_on_behalf_rejected(self, test_session, pending_relationship, test_user_3):
        with pytest.raises(AuthorizationException):
            await relationship_service.block_user(
                test_session, "u3", BlockUserRequest(blocked_by="u1", target_user="u2")
            )

    @pytest.mark.asyncio
    async def test_block_twice_rejected(self, test_session, pending_relationship):
        payload = BlockUserRequest(blocked_by="u1", target_user="u2")
        await relationship_service.block_user(test_session, "u1", payload)

        with pytest.raises(ValidationException) as exc_info:
            await relationship_service.block_user(test_session, "u1", payload)

        assert exc_info.value.message == "Relationship is already blocked"

    @pytest.mark.asyncio
    async def test_block_missing_blocker(self, test_session, test_user_2):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await relationship_service.block_user(
                test_session, "ghost", BlockUserRequest(blocked_by="ghost", target_user="u2")
            )

        assert exc_info.value.message == "Block by user not found"

    @pytest.mark.asyncio
    async def test_block_missing_target(self, test_session, test_user_1):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            await relationship_service.block_user(
                test_session, "u1", BlockUserRequest(blocked_by="u1", target_user="ghost")
            )

        assert exc_info.value.message == "Target user not found"

    @pytest.mark.asyncio
    async def test_block_without_relationship(self, test_session, test_user_1, test_user_3):
        with pytest.raises(ResourceNotFoundException):
            await relationship_service.block_user(
                test_session, "u1", BlockUserRequest(blocked_by="u1", target_user="u3")
            )

    @pytest.mark.asyncio
    async def test_blocked_relationship_still_readable_by_id(self, test_session, pending_relationship):
        await relationship_service.block_user(
            test_session, "u1", BlockUserRequest(blocked_by="u1", target_user="u2")
        )

        result = await relationship_service.find_my_relationship(
            test_session, pending_relationship.id, "u1"
        )
        listed = await relationship_service.find_all(
            test_session, "u1", 1, 10, "created_at", "desc", "blocked_user_a"
        )

        assert result.status == RelationshipStatus.BLOCKED_USER_A
        assert listed.data == []
