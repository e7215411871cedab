"""
응시 세션 Use Case — 토큰 보유 = 권한 (capability 모델)

토큰으로 할 수 있는 일: 시험 조회(정답 정보 제거), 시작, 답안 저장, 제출.
토큰 외 신원 확인은 하지 않는다.

토큰 조회 실패 정책:
- 형식 오류 토큰과 존재하지 않는 토큰은 동일한 NotFoundError (같은 메시지)
- 형식 오류 토큰은 저장소까지 가지 않는다
"""
from __future__ import annotations

import logging
from typing import Optional

from academy.application.ports.events import EventPublisher
from academy.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from academy.application.use_cases.common import Clock, publish_safely, utc_now
from academy.domain.assignments.entities import Answer, AnswerPayload, Assignment, AssignmentStatus
from academy.domain.assignments.errors import InvalidRequestError, InvalidStateError, NotFoundError
from academy.domain.assignments.events import AssignmentStarted, AssignmentSubmitted
from academy.domain.assignments.questions import ExamDefinition
from academy.domain.assignments.scoring import score_submission
from academy.domain.shared.ids import is_well_formed_token

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid exam token"


def lost_race_error(uow: UnitOfWork, assignment_id: int, action: str) -> InvalidStateError:
    """조건부 갱신에서 진 호출자: 최신 상태를 다시 읽어 InvalidStateError 구성."""
    latest = uow.assignments.get(assignment_id)
    current = latest.status.value if latest else "unknown"
    return InvalidStateError(
        f"Cannot {action} assignment with status: {current}",
        current_state=current,
    )


class ExamSessionService:
    """응시자(토큰 보유자) 측 상태 전이: start / save_answer / submit."""

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

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _resolve(self, uow: UnitOfWork, token: str, *, for_update: bool = False) -> Assignment:
        if not is_well_formed_token(token):
            raise NotFoundError(INVALID_TOKEN_MESSAGE)
        assignment = uow.assignments.get_by_token(token, for_update=for_update)
        if assignment is None:
            raise NotFoundError(INVALID_TOKEN_MESSAGE)
        return assignment

    @staticmethod
    def _exam(uow: UnitOfWork, assignment: Assignment) -> ExamDefinition:
        exam = uow.exams.get_exam(assignment.exam_id)
        if exam is None:
            raise NotFoundError("Exam not found")
        return exam

    # ------------------------------------------------------------------
    # read
    # ------------------------------------------------------------------

    def get_by_token(self, token: str) -> dict:
        """응시 화면용 조회. 문항 type_config에서 정답 정보 제거."""
        with self._uow_factory() as uow:
            assignment = self._resolve(uow, token)
            exam = self._exam(uow, assignment)
            student = uow.students.get_many([assignment.student_id]).get(assignment.student_id)
            answers = uow.answers.list_by_assignment(assignment.id)

        return {
            "assignment": {
                "id": assignment.id,
                "status": assignment.status.value,
                "started_at": assignment.started_at,
                "submitted_at": assignment.submitted_at,
            },
            "exam": {
                "id": exam.exam_id,
                "title": exam.title,
                "description": exam.description,
                "duration_minutes": exam.duration_minutes,
                "config": dict(exam.config),
            },
            "student": {
                "id": assignment.student_id,
                "full_name": student.full_name if student else "",
            },
            "questions": [q.public_dict() for q in exam.questions],
            "answers": [a.to_dict() for a in answers],
        }

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    def start(self, token: str) -> Assignment:
        """PENDING → IN_PROGRESS. 동시 호출 시 한 건만 성공, 나머지는 InvalidStateError."""
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._resolve(uow, token)
            started = current.start(now)
            ok = uow.assignments.transition(
                current.id,
                AssignmentStatus.PENDING,
                AssignmentStatus.IN_PROGRESS,
                started_at=now,
            )
            if not ok:
                raise lost_race_error(uow, current.id, "start")

        logger.info("assignment started id=%s exam=%s", started.id, started.exam_id)
        publish_safely(
            self._events,
            AssignmentStarted(
                assignment_id=started.id,
                exam_id=started.exam_id,
                student_id=started.student_id,
                at=now,
            ),
        )
        return started

    def save_answer(self, token: str, question_id: int, payload: AnswerPayload) -> Answer:
        """
        IN_PROGRESS에서만. (assignment, question) upsert — 행 전체 교체.
        재응답 시 기존 수동 채점(score/feedback)도 지워진다.
        """
        now = self._clock()
        with self._uow_factory() as uow:
            assignment = self._resolve(uow, token, for_update=True)
            assignment.ensure_can_answer()

            exam = self._exam(uow, assignment)
            question = exam.question(question_id)
            if question is None:
                raise InvalidRequestError("Question does not belong to this exam")
            payload.validate_for(question)

            saved = uow.answers.upsert(
                Answer(
                    assignment_id=assignment.id,
                    question_id=question.question_id,
                    payload=payload,
                ),
                now,
            )

        logger.debug("answer saved assignment=%s question=%s", assignment.id, question_id)
        return saved

    def submit(self, token: str) -> Assignment:
        """
        IN_PROGRESS → SUBMITTED.
        자동 채점 + 응답별 점수 기록 + 상태 전이를 한 트랜잭션으로 커밋.
        """
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._resolve(uow, token, for_update=True)
            if not current.can_submit():
                raise InvalidStateError(
                    f"Cannot submit assignment with status: {current.status.value}",
                    current_state=current.status.value,
                )

            exam = self._exam(uow, current)
            answers = uow.answers.list_by_assignment(current.id)
            outcome = score_submission(exam.questions, answers)

            by_question = {a.question_id: a for a in answers}
            for question_id, score in outcome.answer_scores.items():
                uow.answers.set_score(by_question[question_id].id, score)

            submitted = current.submit(outcome.percentage, now)
            ok = uow.assignments.transition(
                current.id,
                AssignmentStatus.IN_PROGRESS,
                AssignmentStatus.SUBMITTED,
                submitted_at=now,
                score=outcome.percentage,
            )
            if not ok:
                # 예외로 빠져나가며 점수 기록까지 롤백
                raise lost_race_error(uow, current.id, "submit")

        logger.info(
            "assignment submitted id=%s score=%.2f (%s/%s)",
            submitted.id,
            outcome.percentage,
            outcome.earned,
            outcome.max_score,
        )
        publish_safely(
            self._events,
            AssignmentSubmitted(
                assignment_id=submitted.id,
                exam_id=submitted.exam_id,
                student_id=submitted.student_id,
                score=outcome.percentage,
                at=now,
            ),
        )
        return submitted
