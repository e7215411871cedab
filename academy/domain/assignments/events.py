"""
도메인 이벤트 — 커밋 이후 best-effort 발행 (실패해도 상태 변경은 유지)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DomainEvent:
    name = "domain_event"

    def to_dict(self) -> dict:
        out = asdict(self)
        out["event"] = self.name
        return out


@dataclass(frozen=True)
class ExamAssigned(DomainEvent):
    name = "exam_assigned"

    exam_id: int
    teacher_id: int
    student_count: int
    skipped_count: int = 0


@dataclass(frozen=True)
class AssignmentStarted(DomainEvent):
    name = "assignment_started"

    assignment_id: int
    exam_id: int
    student_id: int
    at: Optional[datetime] = None


@dataclass(frozen=True)
class AssignmentSubmitted(DomainEvent):
    name = "assignment_submitted"

    assignment_id: int
    exam_id: int
    student_id: int
    score: float
    at: Optional[datetime] = None


@dataclass(frozen=True)
class AssignmentGraded(DomainEvent):
    name = "assignment_graded"

    assignment_id: int
    exam_id: int
    teacher_id: int
    final_grade: float
    at: Optional[datetime] = None


@dataclass(frozen=True)
class StudentCreated(DomainEvent):
    name = "student_created"

    student_id: int
    teacher_id: int
    full_name: str
    email: str
