from enum import Enum


class RelationshipStatus(str, Enum):
    """관계 상태 (USER_A / USER_B는 정렬된 쌍의 슬롯을 의미)"""
    REQUEST_USER_A = "REQUEST_USER_A"
    REQUEST_USER_B = "REQUEST_USER_B"
    FRIENDS = "FRIENDS"
    AWAY = "AWAY"
    BLOCKED_USER_A = "BLOCKED_USER_A"
    BLOCKED_USER_B = "BLOCKED_USER_B"

    @classmethod
    def request_from(cls, slot: str) -> "RelationshipStatus":
        return cls.REQUEST_USER_A if slot == "A" else cls.REQUEST_USER_B

    @classmethod
    def blocked_by(cls, slot: str) -> "RelationshipStatus":
        return cls.BLOCKED_USER_A if slot == "A" else cls.BLOCKED_USER_B

    @property
    def is_request(self) -> bool:
        return self in (RelationshipStatus.REQUEST_USER_A, RelationshipStatus.REQUEST_USER_B)

    @property
    def requester_slot(self) -> str:
        if not self.is_request:
            raise ValueError(f"{self.value} is not a request status")
        return "A" if self is RelationshipStatus.REQUEST_USER_A else "B"


class MembershipRole(str, Enum):
    HOST = "HOST"
    MEMBER = "MEMBER"


class MediaStatus(str, Enum):
    UPLOADED = "UPLOADED"
    DELETED = "DELETED"
