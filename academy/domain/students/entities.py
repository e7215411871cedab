"""
학생 / 그룹 도메인 엔티티 — 순수 파이썬

배치 생성 결과(BatchResult)는 저장하지 않는 1회성 값.
호출자(엑셀/CSV 재업로드 화면)가 행 단위 오류로 정정 대상을 보여주는 계약이므로 형태 고정.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FULL_NAME_MAX_LENGTH = 200
YEAR_MAX_LENGTH = 20
CAREER_MAX_LENGTH = 100


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class StudentRecord:
    """배치 생성 입력 1행."""
    full_name: str
    email: str
    year: Optional[str] = None
    career: Optional[str] = None
    group_ids: tuple[int, ...] = ()

    def validation_error(self) -> Optional[str]:
        """행 단위 검증. 문제 없으면 None."""
        name = (self.full_name or "").strip()
        if not name:
            return "Full name is required"
        if len(name) > FULL_NAME_MAX_LENGTH:
            return f"Full name must not exceed {FULL_NAME_MAX_LENGTH} characters"
        if not _EMAIL_RE.match(normalize_email(self.email)):
            return "Please provide a valid email address"
        if self.year and len(self.year) > YEAR_MAX_LENGTH:
            return f"Year must not exceed {YEAR_MAX_LENGTH} characters"
        if self.career and len(self.career) > CAREER_MAX_LENGTH:
            return f"Career must not exceed {CAREER_MAX_LENGTH} characters"
        return None


@dataclass(frozen=True)
class StudentInfo:
    id: int
    teacher_id: int
    full_name: str
    email: str
    year: Optional[str] = None
    career: Optional[str] = None


@dataclass(frozen=True)
class GroupInfo:
    id: int
    teacher_id: int
    name: str = ""
    member_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class StudentRowError:
    row: int
    error: str
    email: Optional[str] = None
    full_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "email": self.email,
            "full_name": self.full_name,
            "error": self.error,
        }


@dataclass
class BatchResult:
    created: int = 0
    failed: int = 0
    errors: list[StudentRowError] = field(default_factory=list)
    created_ids: list[int] = field(default_factory=list)

    def record_created(self, student_id: int) -> None:
        self.created += 1
        self.created_ids.append(student_id)

    def record_failed(self, error: StudentRowError) -> None:
        self.failed += 1
        self.errors.append(error)

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
            "created_ids": list(self.created_ids),
        }
