from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from app.models.enums import MediaStatus


class MediaResponse(BaseModel):
    """업로드된 미디어 응답 스키마"""
    id: str = Field(..., description="미디어 ID")
    user_id: str = Field(..., description="업로드한 사용자 ID")
    filename: str = Field(..., description="저장된 파일명")
    original_name: str = Field(..., description="원본 파일명")
    url: str = Field(..., description="파일 접근 경로")
    size: int = Field(..., description="파일 크기 (bytes)")
    mimetype: str = Field(..., description="MIME 타입")
    status: MediaStatus
    created_at: datetime


class MediaListResponse(BaseModel):
    data: List[MediaResponse]
    page: int
    size: int
    count: int
