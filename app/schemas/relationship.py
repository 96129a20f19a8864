from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.models.enums import RelationshipStatus
from app.schemas.user import UserSummary


class RelationshipCreate(BaseModel):
    """관계(친구 요청) 생성 스키마"""
    user_a: str = Field(..., min_length=1, description="사용자 A ID")
    user_b: str = Field(..., min_length=1, description="사용자 B ID")
    status: RelationshipStatus = Field(..., description="초기 상태: REQUEST_USER_A 또는 REQUEST_USER_B")


class RelationshipUpdate(BaseModel):
    """관계 부분 수정 스키마"""
    status: Optional[RelationshipStatus] = Field(None, description="변경할 상태")


class BlockUserRequest(BaseModel):
    """사용자 차단 스키마"""
    blocked_by: str = Field(..., min_length=1, description="차단하는 사용자 ID")
    target_user: str = Field(..., min_length=1, description="차단 대상 사용자 ID")


class RelationshipResponse(BaseModel):
    """사용자 정보가 채워진 관계 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="관계 ID")
    user_a: UserSummary = Field(..., description="사용자 A (정렬된 쌍의 앞쪽)")
    user_b: UserSummary = Field(..., description="사용자 B (정렬된 쌍의 뒤쪽)")
    status: RelationshipStatus = Field(..., description="관계 상태")
    blocked_at: Optional[datetime] = Field(None, description="차단일시")
    private_conversation_id: Optional[str] = Field(None, description="친구 전용 대화방 ID")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")


class Pagination(BaseModel):
    page: int
    size: int


class ListMetadata(BaseModel):
    pagination: Pagination
    count: int


class RelationshipListResponse(BaseModel):
    """관계 목록 응답"""
    data: List[RelationshipResponse]
    metadata: ListMetadata
