from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import api
from app.api import include_routers
from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.database import init_databases, close_databases
from app.middleware.error_handler import (
    ErrorHandlerMiddleware,
    create_http_exception_handler,
    create_request_validation_handler
)
from app.middleware.logging_middleware import LoggingMiddleware
from app.services.media_service import MEDIA_URL_PREFIX

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    await init_databases()
    logger.info(f"Application started with routers: {', '.join(ROUTER_MODULES)}")
    yield
    # Shutdown
    await close_databases()
    logger.info("Application stopped")


app = FastAPI(title="Social Backend", lifespan=lifespan)

# 미들웨어는 나중에 추가한 것이 바깥쪽에서 실행됨
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())
app.add_exception_handler(RequestValidationError, create_request_validation_handler())

# app/api 아래 router 모듈 자동 등록
ROUTER_MODULES = include_routers(app, "api", api.__path__)

app.mount(
    MEDIA_URL_PREFIX,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads"
)


@app.get("/")
async def root():
    return {"message": "Social Backend API"}
