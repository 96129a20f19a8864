from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database.mysql import Base
from app.models.users import generate_id


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # HOST, MEMBER
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User")
    conversation = relationship("Conversation", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "conversation_id", name="uq_membership_user_conversation"),
    )

    def __repr__(self):
        return f"<Membership(user_id={self.user_id}, conversation_id={self.conversation_id}, role={self.role})>"
