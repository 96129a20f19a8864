from typing import Any, Callable, List, TypeVar, Union

R = TypeVar("R")


def populate(result: Any, transform: Callable[[Any], R]) -> Union[R, List[R], None]:
    """
    조회 결과(단건 또는 목록)에 동일한 변환을 적용한다.

    ORM 레코드의 사용자 참조를 공개 프로필 요약으로 치환할 때 사용하며,
    단건/목록 조회 모두 이 함수 하나를 거친다.
    """
    if result is None:
        return None
    if isinstance(result, (list, tuple)):
        return [transform(item) for item in result]
    return transform(result)
