"""
도메인 공통: 부분 갱신(patch) 표기

필드 값 3가지를 구분한다.
- UNSET: 요청에 없음 → 기존 값 유지
- None: 명시적 null → 값 비움
- 그 외: 새 값으로 설정
"""
from __future__ import annotations

from typing import Any, TypeVar, Union

T = TypeVar("T")


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

Patch = Union[T, None, _Unset]


def is_set(value: Any) -> bool:
    return value is not UNSET


def apply_patch(current: T, value: Any) -> T:
    """UNSET이면 current 유지, 아니면 value(None 포함)로 교체."""
    return current if value is UNSET else value
