from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from app.core.config import settings
from app.core.validators import Validator
from app.models.users import User
from app.schemas.media import MediaResponse, MediaListResponse
from app.api.auth import get_current_user
from app.services import media_service

router = APIRouter(prefix="/media", tags=["Media"])


@router.post("", response_model=MediaResponse, status_code=status.HTTP_201_CREATED)
async def upload_media(
    file: UploadFile = File(..., description="업로드할 파일"),
    current_user: User = Depends(get_current_user)
) -> MediaResponse:
    """
    파일을 업로드합니다.

    허용 확장자와 최대 크기는 설정(allowed_media_extensions, max_upload_size_mb)을 따릅니다.
    """
    media = await media_service.save_media(file, current_user.id)
    return media_service.to_media_response(media)


@router.get("", response_model=MediaListResponse)
async def list_my_media(
    page: int = Query(default=1, description="페이지 (1부터)"),
    size: int = Query(default=settings.default_page_size, description="페이지 크기"),
    current_user: User = Depends(get_current_user)
) -> MediaListResponse:
    """내 미디어 목록 (최신순)"""
    Validator.validate_pagination(page, size, settings.max_page_size)

    items = await media_service.find_user_media(current_user.id, page, size)
    data = [media_service.to_media_response(media) for media in items]
    return MediaListResponse(data=data, page=page, size=size, count=len(data))


@router.get("/{media_id}", response_model=MediaResponse)
async def get_media(
    media_id: str,
    current_user: User = Depends(get_current_user)
) -> MediaResponse:
    media = await media_service.get_media_for_owner(media_id, current_user.id)
    return media_service.to_media_response(media)


@router.delete("/{media_id}", response_model=MediaResponse)
async def delete_media(
    media_id: str,
    current_user: User = Depends(get_current_user)
) -> MediaResponse:
    """미디어를 삭제합니다."""
    media = await media_service.delete_media(media_id, current_user.id)
    return media_service.to_media_response(media)
