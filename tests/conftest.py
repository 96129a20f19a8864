import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database.mysql import Base, get_async_session
from app.models.users import User
from app.models.relationships import Relationship
from app.models.enums import RelationshipStatus
from app.utils.auth import get_password_hash, create_access_token

TEST_PASSWORD = "testpass123"
# bcrypt가 느려서 모듈 로드 시 한 번만
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest_asyncio.fixture
async def test_session():
    """인메모리 SQLite 위의 세션. 테스트마다 스키마를 새로 만든다."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_session):
    app.dependency_overrides[get_async_session] = lambda: test_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.clear()


async def create_test_user(session: AsyncSession, user_id: str, username: str) -> User:
    user = User(
        id=user_id,
        username=username,
        email=f"{username}@example.com",
        password_hash=TEST_PASSWORD_HASH,
        display_name=username.capitalize()
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


# u1, u2, u3 와 각자의 Bearer 헤더

@pytest_asyncio.fixture
async def test_user_1(test_session) -> User:
    return await create_test_user(test_session, "u1", "user1")


@pytest_asyncio.fixture
async def test_user_2(test_session) -> User:
    return await create_test_user(test_session, "u2", "user2")


@pytest_asyncio.fixture
async def test_user_3(test_session) -> User:
    return await create_test_user(test_session, "u3", "user3")


@pytest_asyncio.fixture
async def headers_user_1(test_user_1) -> dict:
    return auth_headers(test_user_1)


@pytest_asyncio.fixture
async def headers_user_2(test_user_2) -> dict:
    return auth_headers(test_user_2)


@pytest_asyncio.fixture
async def headers_user_3(test_user_3) -> dict:
    return auth_headers(test_user_3)


@pytest_asyncio.fixture
async def pending_relationship(test_session, test_user_1, test_user_2) -> Relationship:
    """u1 -> u2 친구 요청 (REQUEST_USER_A)"""
    relationship = Relationship(
        user_a_id=test_user_1.id,
        user_b_id=test_user_2.id,
        status=RelationshipStatus.REQUEST_USER_A.value
    )
    test_session.add(relationship)
    await test_session.commit()
    await test_session.refresh(relationship)
    return relationship
