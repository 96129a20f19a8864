from datetime import datetime
from fastapi import APIRouter, HTTPException, status

from app.core.logging import get_logger
from app.database import check_database_health

router = APIRouter(prefix="/health", tags=["Health"])
logger = get_logger(__name__)

SERVICE_NAME = "social-backend"


def describe(connected: bool) -> str:
    return "connected" if connected else "disconnected"


@router.get("")
async def health_check():
    """저장소별 연결 상태 (항상 200, 본문의 status로 판단)"""
    db_health = await check_database_health()
    if not db_health["overall"]:
        logger.warning(f"Degraded storage: {db_health}")

    return {
        "service": SERVICE_NAME,
        "status": "healthy" if db_health["overall"] else "unhealthy",
        "timestamp": datetime.utcnow(),
        "databases": {name: describe(db_health[name]) for name in ("mysql", "mongodb")},
    }


@router.get("/ready")
async def readiness_check():
    """두 저장소 모두 연결되어야 트래픽 수신 가능 (아니면 503)"""
    db_health = await check_database_health()
    if not db_health["overall"]:
        down = [name for name in ("mysql", "mongodb") if not db_health[name]]
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Not ready: {', '.join(down)} unavailable"
        )
    return {"status": "ready"}


@router.get("/live")
async def liveness_check():
    return {"status": "alive", "timestamp": datetime.utcnow()}
