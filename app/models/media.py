from datetime import datetime
from beanie import Document
from pydantic import Field
from pymongo import IndexModel, ASCENDING, DESCENDING

from app.models.enums import MediaStatus


class Media(Document):
    user_id: str = Field(..., description="업로드한 사용자 ID")
    filename: str = Field(..., description="저장된 파일명")
    file_path: str = Field(..., description="저장 경로")
    original_name: str = Field(..., description="원본 파일명")
    size: int = Field(..., description="파일 크기 (bytes)")
    mimetype: str = Field(..., description="MIME 타입")
    status: MediaStatus = Field(default=MediaStatus.UPLOADED)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "media"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("filename", ASCENDING)], unique=True),
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)]),
        ]

    def __repr__(self):
        return f"<Media(id={self.id}, user_id={self.user_id}, filename={self.filename})>"
