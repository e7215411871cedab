"""
시험 배정 도메인 엔티티 — 순수 파이썬 (Django/ORM 미사용)

상태 전이 규칙은 엔티티 메서드로 표현.
pending → in_progress → submitted → graded (역방향/건너뛰기 없음)
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from academy.domain.assignments.errors import InvalidRequestError, InvalidStateError
from academy.domain.assignments.questions import ExamQuestion, QuestionType


class AssignmentStatus(str, Enum):
    """배정 상태 (apps.domains.assignments.models ExamAssignment.Status choices와 동기화)."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    GRADED = "graded"


class RoundingMethod(str, Enum):
    """최종 성적 반올림 방식. 기록용 메타데이터 (엔진은 재반올림하지 않음)."""
    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"

    @classmethod
    def parse(cls, value: Any) -> "RoundingMethod":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidRequestError(
                f"rounding_method must be one of: {', '.join(m.value for m in cls)}"
            )


# 응답 필드 이름 (Answer 행의 컬럼과 동일)
RESPONSE_FIELDS = (
    "selected_option_id",
    "answer_text",
    "answer_latex",
    "answer_numeric",
    "answer_point",
)

# 문항 유형별 허용 응답 필드
_FIELDS_BY_TYPE: dict[QuestionType, tuple[str, ...]] = {
    QuestionType.MULTIPLE_CHOICE: ("selected_option_id",),
    QuestionType.NUMERIC: ("answer_numeric",),
    QuestionType.GRAPH_CLICK: ("answer_point",),
    QuestionType.OPEN_TEXT: ("answer_text", "answer_latex"),
}


@dataclass(frozen=True)
class AnswerPayload:
    """응답 1건. 정확히 하나의 필드만 채워져 있어야 한다."""

    selected_option_id: Optional[str] = None
    answer_text: Optional[str] = None
    answer_latex: Optional[str] = None
    answer_numeric: Optional[float] = None
    answer_point: Optional[dict] = None

    def populated_fields(self) -> list[str]:
        return [f for f in RESPONSE_FIELDS if getattr(self, f) is not None]

    def validate_for(self, question: ExamQuestion) -> None:
        """필드 1개 + 문항 유형과 일치하는지 검사. 위반 시 InvalidRequestError."""
        populated = self.populated_fields()
        if len(populated) != 1:
            raise InvalidRequestError(
                f"exactly one response field is required (got {len(populated)})"
            )
        name = populated[0]
        allowed = _FIELDS_BY_TYPE.get(question.question_type, ())
        if name not in allowed:
            raise InvalidRequestError(
                f"{name} is not a valid response for a {question.question_type.value} question"
            )
        if name == "answer_numeric":
            v = self.answer_numeric
            if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
                raise InvalidRequestError("answer_numeric must be a finite number")
        if name == "answer_point":
            point = self.answer_point
            if not isinstance(point, dict):
                raise InvalidRequestError("answer_point must be an object")

    def to_dict(self) -> dict:
        return {f: getattr(self, f) for f in RESPONSE_FIELDS}


@dataclass
class Answer:
    """
    문항 응답 1건. (assignment_id, question_id) 당 최대 1행.
    덮어쓰기는 행 전체 교체: 이전 score/feedback도 함께 비워진다.
    """
    assignment_id: int
    question_id: int
    payload: AnswerPayload = field(default_factory=AnswerPayload)
    id: Optional[int] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "assignment_id": self.assignment_id,
            "question_id": self.question_id,
        }
        out.update(self.payload.to_dict())
        out.update(
            {
                "score": self.score,
                "feedback": self.feedback,
                "created_at": self.created_at,
            }
        )
        return out


@dataclass
class Assignment:
    """
    시험 배정 도메인 엔티티.
    DB/ORM 없이 규칙만 보유. 실제 전이는 저장소의 조건부 갱신(compare-and-set)으로 확정.
    """
    exam_id: int
    student_id: int
    access_token: str
    status: AssignmentStatus = AssignmentStatus.PENDING
    id: Optional[int] = None
    assigned_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    score: Optional[float] = None

    def _reject(self, action: str) -> InvalidStateError:
        return InvalidStateError(
            f"Cannot {action} assignment with status: {self.status.value}",
            current_state=self.status.value,
        )

    def can_start(self) -> bool:
        return self.status == AssignmentStatus.PENDING

    def can_answer(self) -> bool:
        return self.status == AssignmentStatus.IN_PROGRESS

    def can_submit(self) -> bool:
        return self.status == AssignmentStatus.IN_PROGRESS

    def can_finalize(self) -> bool:
        return self.status == AssignmentStatus.SUBMITTED

    def is_terminal(self) -> bool:
        return self.status == AssignmentStatus.GRADED

    def ensure_can_answer(self) -> None:
        if not self.can_answer():
            raise self._reject("save answer for")

    def start(self, now: datetime) -> "Assignment":
        """PENDING → IN_PROGRESS. 새 엔티티 반환 (self 불변)."""
        if not self.can_start():
            raise self._reject("start")
        return replace(self, status=AssignmentStatus.IN_PROGRESS, started_at=now)

    def submit(self, score: float, now: datetime) -> "Assignment":
        """IN_PROGRESS → SUBMITTED (자동 채점 백분율 저장)."""
        if not self.can_submit():
            raise self._reject("submit")
        return replace(self, status=AssignmentStatus.SUBMITTED, submitted_at=now, score=score)

    def finalize(self) -> "Assignment":
        """SUBMITTED → GRADED."""
        if not self.can_finalize():
            raise InvalidStateError(
                "Assignment must be in submitted status to be graded",
                current_state=self.status.value,
            )
        return replace(self, status=AssignmentStatus.GRADED)

    def to_dict(self, *, include_token: bool = True) -> dict:
        out = {
            "id": self.id,
            "exam_id": self.exam_id,
            "student_id": self.student_id,
            "status": self.status.value,
            "assigned_at": self.assigned_at,
            "started_at": self.started_at,
            "submitted_at": self.submitted_at,
            "score": self.score,
        }
        if include_token:
            out["access_token"] = self.access_token
        return out


@dataclass
class Grade:
    """배정 1건의 최종 성적 (1:1). 재채점 시 upsert."""
    assignment_id: int
    average_score: float
    final_grade: float
    rounding_method: RoundingMethod
    id: Optional[int] = None
    graded_at: Optional[datetime] = None
    graded_by: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignment_id": self.assignment_id,
            "average_score": self.average_score,
            "final_grade": self.final_grade,
            "rounding_method": self.rounding_method.value,
            "graded_at": self.graded_at,
            "graded_by": self.graded_by,
        }
