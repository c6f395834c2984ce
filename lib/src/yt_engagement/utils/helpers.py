import re
from typing import Iterable, List, Pattern, Union

_DOTTED_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$')


def ensure_list(value: Union[str, List[str], None]) -> List[str]:
    """문자열 또는 리스트를 리스트로 정규화"""
    if value is None:
        return []
    return [value] if isinstance(value, str) else list(value)


def validate_prefix(prefix: str) -> str:
    """구조 prefix 검증 ('snippet', 'snippet.' 모두 허용)

    Returns:
        끝에 '.'이 붙은 prefix

    Raises:
        ValueError: 점 표기 식별자가 아닌 경우
    """
    name = prefix.rstrip('.')
    if not _DOTTED_RE.match(name):
        raise ValueError(f"Invalid structural prefix: {prefix!r}")
    return name + '.'


def compile_patterns(patterns: Iterable[str]) -> List[Pattern]:
    """정규표현식 문자열 리스트 컴파일"""
    return [re.compile(p) for p in ensure_list(patterns)]


def matches_any(name: str, regexes: Iterable[Pattern]) -> bool:
    """컬럼명이 패턴 중 하나라도 매칭되는지"""
    return any(r.search(name) for r in regexes)
