from .users import User
from .conversations import Conversation
from .memberships import Membership
from .relationships import Relationship
from .media import Media
from .enums import RelationshipStatus, MembershipRole, MediaStatus

__all__ = [
    "User",
    "Conversation",
    "Membership",
    "Relationship",
    "Media",
    "RelationshipStatus",
    "MembershipRole",
    "MediaStatus",
]
