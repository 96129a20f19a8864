from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict


class UserBase(BaseModel):
    """사용자 기본 스키마"""
    email: EmailStr = Field(..., description="사용자 이메일")
    username: str = Field(..., min_length=3, max_length=50, description="사용자명")
    display_name: Optional[str] = Field(None, max_length=100, description="표시명")


class UserCreate(UserBase):
    """사용자 생성 스키마"""
    password: str = Field(..., min_length=8, max_length=64, description="비밀번호")


class UserLogin(BaseModel):
    """사용자 로그인 스키마"""
    email: EmailStr = Field(..., description="이메일")
    password: str = Field(..., description="비밀번호")


class UserResponse(UserBase):
    """사용자 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="사용자 ID")
    is_active: bool = Field(default=True, description="활성 여부")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")


class UserSummary(BaseModel):
    """공개 프로필 요약 (password_hash, deleted_at 제외)"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="사용자 ID")
    email: str = Field(..., description="이메일")
    username: str = Field(..., description="사용자명")
    display_name: Optional[str] = Field(None, description="표시명")
    is_active: bool = Field(default=True, description="활성 여부")
    created_at: Optional[datetime] = Field(None, description="생성일시")
    updated_at: Optional[datetime] = Field(None, description="수정일시")


class Token(BaseModel):
    """토큰 스키마"""
    access_token: str = Field(..., description="액세스 토큰")
    token_type: str = Field(default="bearer", description="토큰 타입")
    expires_in: int = Field(..., description="액세스 토큰 만료 시간(초)")
