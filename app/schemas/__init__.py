# User schemas
from .user import (
    UserBase,
    UserCreate,
    UserLogin,
    UserResponse,
    UserSummary,
    Token
)

# Relationship schemas
from .relationship import (
    RelationshipCreate,
    RelationshipUpdate,
    BlockUserRequest,
    RelationshipResponse,
    RelationshipListResponse
)

# Conversation / membership schemas
from .conversation import (
    ConversationCreate,
    ConversationResponse,
    MembershipCreate,
    MembershipResponse,
    MemberResponse,
    ConversationMembersResponse
)

# Media schemas
from .media import (
    MediaResponse,
    MediaListResponse
)

__all__ = [
    "UserBase",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserSummary",
    "Token",
    "RelationshipCreate",
    "RelationshipUpdate",
    "BlockUserRequest",
    "RelationshipResponse",
    "RelationshipListResponse",
    "ConversationCreate",
    "ConversationResponse",
    "MembershipCreate",
    "MembershipResponse",
    "MemberResponse",
    "ConversationMembersResponse",
    "MediaResponse",
    "MediaListResponse",
]
