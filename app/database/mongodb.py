"""
문서 저장소 (Media 메타데이터)
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

client: Optional[AsyncIOMotorClient] = None


async def init_mongodb():
    """motor 클라이언트 생성 후 beanie에 Media 문서 등록"""
    global client
    from app.models.media import Media

    client = AsyncIOMotorClient(settings.mongo_url, maxPoolSize=10, serverSelectionTimeoutMS=5000)
    await init_beanie(database=client[settings.mongo_db_name], document_models=[Media])
    logger.info(f"MongoDB ready: {settings.mongo_db_name}")


async def check_mongo_connection() -> bool:
    if client is None:
        return False
    try:
        await client.admin.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False


async def close_mongo_connection():
    global client
    if client is not None:
        client.close()
        client = None
