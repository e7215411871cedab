"""
시험 배정/채점 도메인 오류 — 순수 파이썬

모든 오류는 해당 연산 1건에 대해 최종적이다 (내부 재시도 없음).
code / http_status는 API 계층 변환용.
"""
from __future__ import annotations

from typing import Optional


class AssignmentDomainError(Exception):
    """시험 배정/채점 도메인 규칙 위반."""

    code = "error"
    http_status = 400
    retryable = False

    def __init__(self, message: str = "", *, code: Optional[str] = None):
        super().__init__(message)
        self.message = str(message)
        if code is not None:
            self.code = str(code)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class NotFoundError(AssignmentDomainError):
    """ID 또는 토큰이 존재하지 않음."""

    code = "not_found"
    http_status = 404


class ForbiddenError(AssignmentDomainError):
    """요청 교사가 상위 시험(또는 그룹)의 소유자가 아님."""

    code = "forbidden"
    http_status = 403


class InvalidStateError(AssignmentDomainError):
    """현재 상태에서 허용되지 않는 연산. 항상 현재 상태를 포함."""

    code = "invalid_state"
    http_status = 409

    def __init__(self, message: str, *, current_state: str):
        super().__init__(message)
        self.current_state = str(current_state)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["current_state"] = self.current_state
        return out


class ConflictError(AssignmentDomainError):
    """유일성 위반 (중복 배정, 중복 이메일)."""

    code = "conflict"
    http_status = 409


class InvalidRequestError(AssignmentDomainError):
    """입력 형식 오류, 상호 배타 입력 위반, 필수 입력 누락."""

    code = "invalid_request"
    http_status = 400


class StoreTimeoutError(AssignmentDomainError):
    """저장소 호출 타임아웃. 상태 변화 없음, 호출자 재시도 가능."""

    code = "store_timeout"
    http_status = 503
    retryable = True
