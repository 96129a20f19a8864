from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.mysql import Base
from app.models.users import generate_id


class Relationship(Base):
    """
    두 사용자 간 관계 (쌍마다 레코드 하나)

    user_a_id <= user_b_id 순서로 정렬되어 저장된다.
    """
    __tablename__ = "relationships"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_a_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user_b_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    blocked_at = Column(DateTime, nullable=True)
    private_conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user_a = relationship("User", foreign_keys=[user_a_id])
    user_b = relationship("User", foreign_keys=[user_b_id])
    private_conversation = relationship("Conversation", foreign_keys=[private_conversation_id])

    __table_args__ = (
        UniqueConstraint("user_a_id", "user_b_id", name="uq_relationship_pair"),
        CheckConstraint("user_a_id <> user_b_id", name="ck_relationship_distinct_users"),
    )

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.user_a_id, self.user_b_id)

    def __repr__(self):
        return f"<Relationship(id={self.id}, user_a_id={self.user_a_id}, user_b_id={self.user_b_id}, status={self.status})>"
