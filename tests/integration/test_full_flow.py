import pytest
from httpx import AsyncClient
from fastapi import status


class TestRelationshipFlow:
    """친구 요청부터 차단까지 전체 플로우 통합 테스트"""

    @pytest.mark.asyncio
    async def test_complete_friendship_flow(self, client: AsyncClient):
        """
        1. 사용자 A, B 회원가입 및 로그인
        2. A가 B에게 친구 요청
        3. B가 목록에서 요청 확인 후 수락
        4. 두 사용자 모두 전용 대화방 멤버 조회 가능
        5. A가 B를 차단하면 목록에서 사라짐
        """
        users = {}
        for name in ("alice", "bob"):
            response = await client.post("/auth/register", json={
                "username": name,
                "email": f"{name}@example.com",
                "password": f"{name}pass123"
            })
            assert response.status_code == status.HTTP_201_CREATED
            user_id = response.json()["id"]

            login = await client.post("/auth/login/json", json={
                "email": f"{name}@example.com",
                "password": f"{name}pass123"
            })
            assert login.status_code == status.HTTP_200_OK
            users[name] = {
                "id": user_id,
                "headers": {"Authorization": f"Bearer {login.json()['access_token']}"}
            }

        alice, bob = users["alice"], users["bob"]

        # 2. 친구 요청 (입력 순서: bob, alice / 요청자는 alice)
        response = await client.post("/relationships", headers=alice["headers"], json={
            "user_a": bob["id"],
            "user_b": alice["id"],
            "status": "REQUEST_USER_B"
        })
        assert response.status_code == status.HTTP_201_CREATED
        relationship = response.json()
        assert relationship["user_a"]["id"] == min(alice["id"], bob["id"])
        assert "password_hash" not in relationship["user_a"]

        requester_slot = "A" if relationship["user_a"]["id"] == alice["id"] else "B"
        assert relationship["status"] == f"REQUEST_USER_{requester_slot}"

        # 3. 수락
        response = await client.get(
            "/relationships",
            headers=bob["headers"],
            params={"status": relationship["status"].lower()}
        )
        assert response.status_code == status.HTTP_200_OK
        listing = response.json()
        assert listing["metadata"]["count"] == 1
        assert listing["metadata"]["pagination"] == {"page": 1, "size": 20}

        response = await client.post(
            f"/relationships/{relationship['id']}/confirm", headers=bob["headers"]
        )
        assert response.status_code == status.HTTP_200_OK
        confirmed = response.json()
        assert confirmed["status"] == "FRIENDS"
        conversation_id = confirmed["private_conversation_id"]

        response = await client.post(
            f"/relationships/{relationship['id']}/confirm", headers=bob["headers"]
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Users are already friends"

        # 4. 전용 대화방
        for user in (alice, bob):
            response = await client.get(
                f"/conversations/{conversation_id}/members", headers=user["headers"]
            )
            assert response.status_code == status.HTTP_200_OK
            members = response.json()
            assert members["total"] == 2
            host_ids = [m["user_id"] for m in members["members"] if m["role"] == "HOST"]
            assert host_ids == [bob["id"]]

        # 5. 차단
        response = await client.post("/relationships/block", headers=alice["headers"], json={
            "blocked_by": alice["id"],
            "target_user": bob["id"]
        })
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == f"BLOCKED_USER_{requester_slot}"
        assert response.json()["blocked_at"] is not None

        response = await client.get(
            "/relationships", headers=alice["headers"], params={"status": "blocked_user_a"}
        )
        assert response.json()["data"] == []


class TestRelationshipAPIErrors:
    """관계 API 에러 응답 테스트"""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/relationships", params={"status": "friends"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_friends_initial_status(self, client: AsyncClient, headers_user_1, test_user_2):
        response = await client.post("/relationships", headers=headers_user_1, json={
            "user_a": "u1",
            "user_b": "u2",
            "status": "FRIENDS"
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_duplicate_request(self, client: AsyncClient, headers_user_2, pending_relationship):
        response = await client.post("/relationships", headers=headers_user_2, json={
            "user_a": "u2",
            "user_b": "u1",
            "status": "REQUEST_USER_A"
        })

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["message"] == "Relationship existed"

    @pytest.mark.asyncio
    async def test_outsider_cannot_read(self, client: AsyncClient, headers_user_3, pending_relationship):
        response = await client.get(
            f"/relationships/{pending_relationship.id}", headers=headers_user_3
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Unauthorized user"

    @pytest.mark.asyncio
    async def test_missing_relationship(self, client: AsyncClient, headers_user_1):
        response = await client.get("/relationships/missing", headers=headers_user_1)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Relationship not found"

    @pytest.mark.asyncio
    async def test_block_on_behalf(self, client: AsyncClient, headers_user_3, pending_relationship):
        response = await client.post("/relationships/block", headers=headers_user_3, json={
            "blocked_by": "u1",
            "target_user": "u2"
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_unknown_status_filter(self, client: AsyncClient, headers_user_1):
        response = await client.get(
            "/relationships", headers=headers_user_1, params={"status": "pending"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_page_size_limit(self, client: AsyncClient, headers_user_1):
        response = await client.get(
            "/relationships", headers=headers_user_1, params={"status": "friends", "size": 1000}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["validation_errors"][0]["field"] == "size"

    @pytest.mark.asyncio
    async def test_patch_status(self, client: AsyncClient, headers_user_1, pending_relationship):
        response = await client.patch(
            f"/relationships/{pending_relationship.id}",
            headers=headers_user_1,
            json={"status": "AWAY"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "AWAY"

    @pytest.mark.asyncio
    async def test_conversation_hidden_from_non_member(
        self, client: AsyncClient, headers_user_2, headers_user_3, pending_relationship
    ):
        response = await client.post(
            f"/relationships/{pending_relationship.id}/confirm", headers=headers_user_2
        )
        conversation_id = response.json()["private_conversation_id"]

        response = await client.get(f"/conversations/{conversation_id}", headers=headers_user_3)

        assert response.status_code == status.HTTP_403_FORBIDDEN
