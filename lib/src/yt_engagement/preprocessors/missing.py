"""명시적 결측 마커

FlatRow의 모든 셀은 값(Present) 또는 MISSING 둘 중 하나다.
빈 문자열/None 해석은 소비자(테이블 변환, CSV 렌더링)가 결정한다.
"""
from typing import Any


class _Missing:
    """결측 싱글톤 (falsy, 복사/피클 시에도 동일 객체 유지)"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return '<missing>'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    """MISSING 또는 None"""
    return value is MISSING or value is None


def to_missing(value: Any) -> Any:
    """None → MISSING, 나머지는 그대로"""
    return MISSING if value is None else value


def to_null(value: Any) -> Any:
    """MISSING → None (polars null 렌더링용)"""
    return None if value is MISSING else value
