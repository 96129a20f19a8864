from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from app.models.enums import MembershipRole
from app.schemas.user import UserSummary


class ConversationCreate(BaseModel):
    """대화방 생성 스키마"""
    name: str = Field(..., min_length=1, max_length=255, description="대화방 이름")
    description: Optional[str] = Field(None, description="대화방 설명")
    created_by: str = Field(..., description="생성한 사용자 ID")
    host: Optional[str] = Field(None, description="호스트 사용자 ID (기본값: 생성자)")


class ConversationResponse(BaseModel):
    """대화방 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_by_id: str
    host_id: str
    created_at: datetime
    updated_at: datetime


class MembershipCreate(BaseModel):
    """멤버십 생성 스키마"""
    user: str = Field(..., description="사용자 ID")
    conversation: str = Field(..., description="대화방 ID")
    role: MembershipRole = Field(default=MembershipRole.MEMBER, description="역할")


class MembershipResponse(BaseModel):
    """멤버십 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    conversation_id: str
    role: MembershipRole
    created_at: datetime


class MemberResponse(MembershipResponse):
    """사용자 정보가 포함된 멤버 응답"""
    user: UserSummary


class ConversationMembersResponse(BaseModel):
    conversation_id: str
    members: List[MemberResponse]
    total: int
