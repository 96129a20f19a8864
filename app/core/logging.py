"""
로깅 설정

한 줄짜리 JSON 로그를 출력합니다. 요청 ID, 인증된 사용자 ID와 함께
서비스가 바인딩한 리소스 ID(relationship_id, conversation_id, media_id)가
같은 요청 안의 모든 로그에 자동으로 붙습니다.

    bind_resource(relationship_id=relationship.id)
    log_event(logger, "relationship", "Friend request created", status="REQUEST_USER_A")
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from app.core.config import settings

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
_resources: ContextVar[Dict[str, str]] = ContextVar("resources", default={})

DEBUG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "pymongo", "motor")


def current_context() -> Dict[str, str]:
    """현재 요청에 바인딩된 식별자"""
    context = dict(_resources.get())
    if _request_id.get():
        context["request_id"] = _request_id.get()
    if _user_id.get():
        context["user_id"] = _user_id.get()
    return context


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
        }
        event = getattr(record, "event", None)
        if event:
            entry["event"] = event
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging():
    """루트 로거 구성 (stdout + log_dir/app.log)"""
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(DEBUG_FORMAT) if settings.debug else JsonFormatter())
    handlers = [console]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "app.log", encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# =============================================================================
# Request context
# =============================================================================

def set_request_context(request_id: str):
    _request_id.set(request_id)


def set_user_context(user_id: str):
    _user_id.set(user_id)


def bind_resource(**ids):
    """이후 로그에 리소스 ID를 붙임 (None 값은 무시)"""
    bound = {key: str(value) for key, value in ids.items() if value is not None}
    _resources.set({**_resources.get(), **bound})


def clear_request_context():
    _request_id.set(None)
    _user_id.set(None)
    _resources.set({})


# =============================================================================
# Events
# =============================================================================

def log_event(
    logger: logging.Logger,
    event_type: str,
    message: str,
    level: int = logging.INFO,
    **fields
):
    """이벤트 종류와 필드를 `event` 키 아래에 담아 기록"""
    logger.log(level, message, extra={"event": {"type": event_type, **fields}})


def log_database_operation(logger: logging.Logger, operation: str, table: str, **fields):
    log_event(logger, "database", f"DB {operation} on {table}", operation=operation, table=table, **fields)


def log_security_event(logger: logging.Logger, event: str, severity: str = "medium", **fields):
    """권한 위반 등 (WARNING)"""
    log_event(
        logger, "security", f"Security {event} ({severity})",
        level=logging.WARNING, event=event, severity=severity, **fields
    )
