"""
사용자 쌍 정렬 유틸리티

관계 레코드는 (user_a, user_b)가 문자열 순서로 정렬된 상태로만 저장된다.
생성, 조회, 차단 방향 결정 모두 이 모듈의 함수를 사용한다.
"""

from typing import Tuple

USER_A = "A"
USER_B = "B"


def canonical_pair(first: str, second: str) -> Tuple[str, str]:
    """두 사용자 ID를 (작은 값, 큰 값) 순서로 반환"""
    return (first, second) if first <= second else (second, first)


def slot_of(user_id: str, first: str, second: str) -> str:
    """정렬된 쌍에서 user_id가 차지하는 슬롯 (USER_A / USER_B)"""
    user_a, user_b = canonical_pair(first, second)
    if user_id == user_a:
        return USER_A
    if user_id == user_b:
        return USER_B
    raise ValueError(f"User {user_id} is not part of the pair ({first}, {second})")


def user_in_slot(slot: str, first: str, second: str) -> str:
    """입력 순서 기준 슬롯에 해당하는 사용자 ID"""
    return first if slot == USER_A else second
