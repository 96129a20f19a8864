from app.core.logging import get_logger

from .mysql import init_mysql_db, close_mysql_db, check_mysql_connection, get_async_session
from .mongodb import init_mongodb, close_mongo_connection, check_mongo_connection

logger = get_logger(__name__)


async def init_databases():
    """관계형 저장소 먼저, 이어서 Media 문서 저장소"""
    await init_mysql_db()
    await init_mongodb()


async def close_databases():
    await close_mysql_db()
    await close_mongo_connection()
    logger.info("Database connections closed")


async def check_database_health() -> dict:
    """저장소별 연결 상태와 전체 상태 (둘 다 연결되어야 healthy)"""
    status = {
        "mysql": await check_mysql_connection(),
        "mongodb": await check_mongo_connection(),
    }
    status["overall"] = all(status.values())
    return status


__all__ = [
    "init_databases",
    "close_databases",
    "check_database_health",
    "get_async_session",
]
