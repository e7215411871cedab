"""
성적 기록 Use Case — 시험 소유 교사만

- grade_answer: 응답 1건 수동 채점 (배정 상태와 무관)
- finalize: 교사가 계산한 평균/최종 성적 기록 + SUBMITTED → GRADED

finalize는 SUBMITTED 에서만 가능. GRADED 이후 재채점 경로는 제공하지 않는다.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Optional

from academy.application.ports.events import EventPublisher
from academy.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from academy.application.use_cases.assignments.exam_session import lost_race_error
from academy.application.use_cases.common import Clock, publish_safely, utc_now
from academy.domain.assignments.entities import Answer, Assignment, AssignmentStatus, Grade, RoundingMethod
from academy.domain.assignments.errors import ForbiddenError, InvalidRequestError, NotFoundError
from academy.domain.assignments.events import AssignmentGraded
from academy.domain.assignments.questions import ExamDefinition
from academy.domain.shared.patch import UNSET, Patch

logger = logging.getLogger(__name__)


def _finite(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidRequestError(f"{name} must be a number")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{name} must be a number")
    if not math.isfinite(v):
        raise InvalidRequestError(f"{name} must be a finite number")
    return v


def owned_exam(uow: UnitOfWork, assignment: Assignment, teacher_id: int, action: str) -> ExamDefinition:
    """상위 시험 조회 + 소유 확인. 없음 → NotFoundError, 소유 아님 → ForbiddenError."""
    exam = uow.exams.get_exam(assignment.exam_id)
    if exam is None:
        raise NotFoundError("Exam not found")
    if not exam.is_owned_by(teacher_id):
        raise ForbiddenError(f"You do not have permission to {action}")
    return exam


class GradeRecorder:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        events: Optional[EventPublisher] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._events = events
        self._clock = clock

    def grade_answer(
        self,
        teacher_id: int,
        answer_id: int,
        score: Any,
        feedback: Patch[str] = UNSET,
    ) -> Answer:
        """
        응답 점수/피드백 기록.
        feedback: UNSET → 기존 유지, None → 비움, 문자열 → 설정.
        """
        value = _finite(score, "score")
        if value < 0:
            raise InvalidRequestError("score must not be negative")
        if feedback is not UNSET and feedback is not None and not isinstance(feedback, str):
            raise InvalidRequestError("feedback must be a string")

        with self._uow_factory() as uow:
            answer = uow.answers.get(answer_id)
            if answer is None:
                raise NotFoundError("Answer not found")
            assignment = uow.assignments.get(answer.assignment_id)
            if assignment is None:
                raise NotFoundError("Assignment not found")
            owned_exam(uow, assignment, teacher_id, "grade this answer")

            graded = uow.answers.apply_grade(answer_id, value, feedback)

        logger.info("answer graded id=%s assignment=%s score=%s", answer_id, assignment.id, value)
        return graded

    def finalize(
        self,
        teacher_id: int,
        assignment_id: int,
        average_score: Any,
        final_grade: Any,
        rounding_method: Any,
    ) -> Grade:
        """최종 성적 upsert + SUBMITTED → GRADED (한 트랜잭션). final_grade는 재반올림하지 않음."""
        method = RoundingMethod.parse(rounding_method)
        average = _finite(average_score, "average_score")
        final = _finite(final_grade, "final_grade")
        now = self._clock()

        with self._uow_factory() as uow:
            assignment = uow.assignments.get(assignment_id, for_update=True)
            if assignment is None:
                raise NotFoundError("Assignment not found")
            owned_exam(uow, assignment, teacher_id, "grade this assignment")
            assignment.finalize()

            grade = uow.grades.upsert(
                Grade(
                    assignment_id=assignment.id,
                    average_score=average,
                    final_grade=final,
                    rounding_method=method,
                    graded_at=now,
                    graded_by=teacher_id,
                )
            )
            ok = uow.assignments.transition(
                assignment.id,
                AssignmentStatus.SUBMITTED,
                AssignmentStatus.GRADED,
            )
            if not ok:
                raise lost_race_error(uow, assignment.id, "grade")

        logger.info(
            "assignment graded id=%s final=%s (%s) by teacher=%s",
            assignment.id,
            final,
            method.value,
            teacher_id,
        )
        publish_safely(
            self._events,
            AssignmentGraded(
                assignment_id=assignment.id,
                exam_id=assignment.exam_id,
                teacher_id=teacher_id,
                final_grade=final,
                at=now,
            ),
        )
        return grade
