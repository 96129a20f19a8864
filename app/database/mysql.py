"""
관계형 저장소 (users, relationships, conversations, memberships)

운영은 aiomysql, 테스트는 conftest에서 aiosqlite 엔진으로 세션을 대체합니다.
"""

from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# sqlite 드라이버는 커넥션 풀 옵션을 받지 않음
POOL_OPTIONS = {"pool_size": 10, "max_overflow": 20, "pool_recycle": 3600}


def build_engine(url: str) -> AsyncEngine:
    options = {"echo": settings.debug, "pool_pre_ping": True}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(POOL_OPTIONS)
    return create_async_engine(url, **options)


engine = build_engine(settings.mysql_url)
session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 세션 (예외 시 롤백)"""
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_mysql_db():
    """테이블 생성"""
    import app.models  # noqa: F401  테이블 메타데이터 등록

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Relational tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def check_mysql_connection() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"MySQL ping failed: {e}")
        return False


async def close_mysql_db():
    await engine.dispose()
