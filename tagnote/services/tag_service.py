"""
태그 정규화

"ui, , #research, TODO" -> ["#ui", "#research", "#TODO"]
입력 순서를 유지하고 중복은 제거하지 않는다.
"""

from typing import Iterable, List


TAG_PREFIX = "#"


def normalize_tag_list(tokens: Iterable[str]) -> List[str]:
    """토큰 목록을 정규화 (공백 제거, 빈 값 제외, '#' 접두어 보장)"""
    tags: List[str] = []
    for token in tokens:
        tag = token.strip()
        if not tag:
            continue
        if not tag.startswith(TAG_PREFIX):
            tag = f"{TAG_PREFIX}{tag}"
        tags.append(tag)
    return tags


def normalize_tags(raw: str) -> List[str]:
    """쉼표로 구분된 입력 문자열을 태그 목록으로 변환"""
    return normalize_tag_list(raw.split(","))
