"""
Services layer for data access and domain operations.

This layer handles:
- Database queries and operations
- Relationship transitions and authorization checks
- Conversation / membership collaborators
- Media file storage
"""

from . import auth_service
from . import conversation_service
from . import membership_service
from . import relationship_store
from . import relationship_service
from . import media_service

__all__ = [
    "auth_service",
    "conversation_service",
    "membership_service",
    "relationship_store",
    "relationship_service",
    "media_service"
]
