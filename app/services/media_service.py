"""
Media upload service layer.

Handles file validation, storage on disk and Media document persistence.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import List

import aiofiles
from bson import ObjectId
from fastapi import UploadFile

from app.core.config import settings
from app.core.errors import (
    InternalServerException,
    ResourceNotFoundException,
    ValidationException,
    unauthorized_user_error
)
from app.core.logging import get_logger, bind_resource, log_event
from app.models.enums import MediaStatus
from app.models.media import Media
from app.schemas.media import MediaResponse

logger = get_logger(__name__)

# 업로드 디렉토리 (사용자별 하위 디렉토리에 저장)
UPLOAD_DIR = Path(settings.upload_dir)
MEDIA_URL_PREFIX = "/uploads"
UPLOAD_CHUNK_SIZE = 64 * 1024


# =============================================================================
# File Utilities
# =============================================================================

def ensure_user_upload_dir(user_id: str) -> Path:
    """사용자 업로드 디렉토리 생성"""
    user_dir = UPLOAD_DIR / user_id
    user_dir.mkdir(parents=True, exist_ok=True)
    return user_dir


def get_file_extension(filename: str) -> str:
    """파일 확장자 추출"""
    return Path(filename).suffix.lower()


def is_allowed_media_file(filename: str) -> bool:
    """허용된 확장자인지 확인"""
    return get_file_extension(filename) in settings.allowed_media_extensions


def generate_unique_filename(original_filename: str) -> str:
    """고유한 파일명 생성"""
    return f"{uuid.uuid4()}{get_file_extension(original_filename)}"


def validate_file_size(file_size: int) -> bool:
    """파일 크기 검증"""
    return file_size <= settings.max_upload_size_bytes


def build_media_url(media: Media) -> str:
    return f"{MEDIA_URL_PREFIX}/{media.user_id}/{media.filename}"


def to_media_response(media: Media) -> MediaResponse:
    return MediaResponse(
        id=str(media.id),
        user_id=media.user_id,
        filename=media.filename,
        original_name=media.original_name,
        url=build_media_url(media),
        size=media.size,
        mimetype=media.mimetype,
        status=media.status,
        created_at=media.created_at
    )


# =============================================================================
# Upload Operations
# =============================================================================

async def validate_uploaded_file(file: UploadFile) -> None:
    """업로드된 파일 검증"""
    if not file.filename:
        raise ValidationException("No file provided")

    if not is_allowed_media_file(file.filename):
        allowed_extensions = ", ".join(settings.allowed_media_extensions)
        raise ValidationException(
            f"Invalid file type. Allowed extensions: {allowed_extensions}"
        )

    if file.size and not validate_file_size(file.size):
        raise ValidationException(
            f"File size exceeds maximum limit of {settings.max_upload_size_mb}MB"
        )


async def read_upload_content(file: UploadFile) -> bytes:
    """크기 제한을 넘는 순간 중단하며 청크 단위로 읽기"""
    limit = settings.max_upload_size_bytes
    chunks = []
    total = 0

    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise ValidationException(
                f"File size exceeds maximum limit of {settings.max_upload_size_mb}MB"
            )
        chunks.append(chunk)

    return b"".join(chunks)


async def save_media(file: UploadFile, user_id: str) -> Media:
    """
    파일을 저장하고 Media 문서를 생성합니다.

    저장 또는 문서 생성이 실패하면 기록된 파일을 삭제하고 InternalServerException을 발생시킵니다.
    """
    await validate_uploaded_file(file)

    # 선언된 크기와 무관하게 실제 읽은 크기로 제한
    content = await read_upload_content(file)

    user_dir = ensure_user_upload_dir(user_id)
    unique_filename = generate_unique_filename(file.filename)
    file_path = user_dir / unique_filename

    try:
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)

        media = Media(
            user_id=user_id,
            filename=unique_filename,
            file_path=str(file_path),
            original_name=file.filename,
            size=len(content),
            mimetype=file.content_type or "application/octet-stream",
            status=MediaStatus.UPLOADED
        )
        await media.insert()

    except Exception as e:
        # 저장 실패 시 파일 삭제
        if file_path.exists():
            file_path.unlink()
        logger.error(f"Failed to save media for user {user_id}: {e}")
        raise InternalServerException("Failed to save file", cause=e) from e

    bind_resource(media_id=media.id)
    log_event(
        logger, "file", "Media uploaded",
        operation="upload", file_path=str(file_path), size=len(content)
    )
    return media


# =============================================================================
# Media Queries
# =============================================================================

async def find_user_media(user_id: str, page: int = 1, size: int = 20) -> List[Media]:
    """사용자 미디어 목록 (최신순, 삭제 제외)"""
    if page < 1 or size < 1:
        raise ValidationException("Page and size must be positive")

    return await Media.find(
        Media.user_id == user_id,
        Media.status == MediaStatus.UPLOADED
    ).sort(-Media.created_at).skip((page - 1) * size).limit(size).to_list()


async def get_media_for_owner(media_id: str, user_id: str) -> Media:
    """본인 미디어 조회"""
    bind_resource(media_id=media_id)
    media = await Media.get(ObjectId(media_id)) if ObjectId.is_valid(media_id) else None
    if not media or media.status == MediaStatus.DELETED:
        raise ResourceNotFoundException(
            "Media",
            details={"resource": "Media", "media_id": media_id}
        )

    if media.user_id != user_id:
        raise unauthorized_user_error()

    return media


async def delete_media(media_id: str, user_id: str) -> Media:
    """미디어 삭제 (문서는 DELETED 상태로 유지, 파일은 제거)"""
    media = await get_media_for_owner(media_id, user_id)

    media.status = MediaStatus.DELETED
    media.updated_at = datetime.utcnow()
    await media.save()

    file_path = Path(media.file_path)
    if file_path.exists():
        file_path.unlink()

    log_event(logger, "file", "Media deleted", operation="delete", file_path=media.file_path)
    return media
