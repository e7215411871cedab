"""
Exam / Assignment / Answer / Grade Repository — Django ORM 구현
ORM 접근은 메서드 내부에서만 lazy import (apps.domains.*).

상태 전이는 조건부 UPDATE (WHERE id=? AND status=?) 로 확정한다.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from academy.adapters.db.django.uow import is_unique_violation
from academy.domain.assignments.entities import (
    Answer,
    AnswerPayload,
    Assignment,
    AssignmentStatus,
    Grade,
    RoundingMethod,
)
from academy.domain.assignments.errors import ConflictError, NotFoundError
from academy.domain.assignments.questions import ExamDefinition, ExamQuestion, QuestionType, parse_type_config
from academy.domain.shared.patch import UNSET

_TRANSITION_FIELDS = ("started_at", "submitted_at", "score")
# SQLite 유일 제약 위반 메시지의 컬럼 목록
_EXAM_STUDENT_COLUMNS = "assignments_exam_assignment.exam_id, assignments_exam_assignment.student_id"


def _assignment_to_entity(m) -> Optional[Assignment]:
    if m is None:
        return None
    return Assignment(
        id=m.id,
        exam_id=m.exam_id,
        student_id=m.student_id,
        access_token=m.access_token,
        status=AssignmentStatus(m.status),
        assigned_at=m.assigned_at,
        started_at=m.started_at,
        submitted_at=m.submitted_at,
        score=m.score,
    )


def _answer_to_entity(m) -> Optional[Answer]:
    if m is None:
        return None
    return Answer(
        id=m.id,
        assignment_id=m.assignment_id,
        question_id=m.question_id,
        payload=AnswerPayload(
            selected_option_id=m.selected_option_id,
            answer_text=m.answer_text,
            answer_latex=m.answer_latex,
            answer_numeric=m.answer_numeric,
            answer_point=m.answer_point,
        ),
        score=m.score,
        feedback=m.feedback,
        created_at=m.created_at,
    )


def _grade_to_entity(m) -> Optional[Grade]:
    if m is None:
        return None
    return Grade(
        id=m.id,
        assignment_id=m.assignment_id,
        average_score=m.average_score,
        final_grade=m.final_grade,
        rounding_method=RoundingMethod(m.rounding_method),
        graded_at=m.graded_at,
        graded_by=m.graded_by_id,
    )


class DjangoExamRepository:
    def get_exam(self, exam_id: int) -> Optional[ExamDefinition]:
        from apps.domains.exams.models import Exam, ExamQuestion as ExamQuestionModel

        exam = Exam.objects.filter(id=exam_id).first()
        if exam is None:
            return None

        links = (
            ExamQuestionModel.objects.filter(exam_id=exam.id)
            .select_related("question")
            .order_by("question_order", "id")
        )
        questions = []
        for link in links:
            q = link.question
            qt = QuestionType(q.question_type)
            questions.append(
                ExamQuestion(
                    question_id=q.id,
                    question_type=qt,
                    config=parse_type_config(qt, q.type_config),
                    weight=float(link.weight),
                    order=int(link.question_order),
                    title=q.title,
                    content=q.content or "",
                    difficulty=q.difficulty,
                )
            )

        return ExamDefinition(
            exam_id=exam.id,
            teacher_id=exam.teacher_id,
            title=exam.title,
            questions=tuple(questions),
            description=exam.description or "",
            duration_minutes=exam.duration_minutes,
            config=dict(exam.config or {}),
        )


class DjangoAssignmentRepository:
    def get(self, assignment_id: int, for_update: bool = False) -> Optional[Assignment]:
        """for_update=True: 호출자가 UoW 트랜잭션 안에 있어야 함 (select_for_update)."""
        from apps.domains.assignments.models import ExamAssignment

        qs = ExamAssignment.objects.all()
        if for_update:
            qs = qs.select_for_update()
        return _assignment_to_entity(qs.filter(id=assignment_id).first())

    def get_by_token(self, access_token: str, for_update: bool = False) -> Optional[Assignment]:
        from apps.domains.assignments.models import ExamAssignment

        qs = ExamAssignment.objects.all()
        if for_update:
            qs = qs.select_for_update()
        return _assignment_to_entity(qs.filter(access_token=access_token).first())

    def assigned_student_ids(self, exam_id: int, student_ids: Iterable[int]) -> set[int]:
        from apps.domains.assignments.models import ExamAssignment

        ids = list(student_ids)
        if not ids:
            return set()
        return set(
            ExamAssignment.objects.filter(exam_id=exam_id, student_id__in=ids)
            .values_list("student_id", flat=True)
        )

    def create(self, assignment: Assignment) -> Assignment:
        from django.db import IntegrityError, transaction
        from apps.domains.assignments.models import ExamAssignment

        try:
            with transaction.atomic():
                m = ExamAssignment.objects.create(
                    exam_id=assignment.exam_id,
                    student_id=assignment.student_id,
                    access_token=assignment.access_token,
                    status=AssignmentStatus.PENDING.value,
                    assigned_at=assignment.assigned_at,
                )
        except IntegrityError as e:
            if not is_unique_violation(e, "uniq_assignment_exam_student", _EXAM_STUDENT_COLUMNS):
                raise
            raise ConflictError("Student already has this exam assigned")
        return _assignment_to_entity(m)

    def transition(
        self,
        assignment_id: int,
        expected: AssignmentStatus,
        new: AssignmentStatus,
        **fields: Any,
    ) -> bool:
        from django.utils import timezone
        from apps.domains.assignments.models import ExamAssignment

        unknown = set(fields) - set(_TRANSITION_FIELDS)
        if unknown:
            raise ValueError(f"unsupported transition fields: {sorted(unknown)}")

        updated = ExamAssignment.objects.filter(
            id=assignment_id,
            status=expected.value,
        ).update(status=new.value, updated_at=timezone.now(), **fields)
        return updated == 1

    def list_for_teacher(
        self,
        teacher_id: int,
        exam_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Optional[AssignmentStatus] = None,
    ) -> list[Assignment]:
        from apps.domains.assignments.models import ExamAssignment

        qs = ExamAssignment.objects.filter(exam__teacher_id=teacher_id)
        if exam_id is not None:
            qs = qs.filter(exam_id=exam_id)
        if student_id is not None:
            qs = qs.filter(student_id=student_id)
        if status is not None:
            qs = qs.filter(status=status.value)
        return [_assignment_to_entity(m) for m in qs.order_by("-assigned_at", "-id")]


class DjangoAnswerRepository:
    def upsert(self, answer: Answer, now: datetime) -> Answer:
        """
        (assignment, question_id) 행 잠금 후 교체, 없으면 생성.
        동시 생성 경쟁(IntegrityError)은 savepoint 롤백 후 갱신으로 처리 (last write wins).
        """
        from django.db import IntegrityError, transaction
        from apps.domains.assignments.models import StudentAnswer

        values = dict(answer.payload.to_dict())
        values.update({"score": None, "feedback": None})

        def _update():
            m = (
                StudentAnswer.objects.select_for_update()
                .filter(assignment_id=answer.assignment_id, question_id=answer.question_id)
                .first()
            )
            if m is None:
                return None
            for k, v in values.items():
                setattr(m, k, v)
            m.save(update_fields=list(values.keys()) + ["updated_at"])
            return m

        m = _update()
        if m is None:
            try:
                with transaction.atomic():
                    m = StudentAnswer.objects.create(
                        assignment_id=answer.assignment_id,
                        question_id=answer.question_id,
                        created_at=now,
                        **values,
                    )
            except IntegrityError:
                m = _update()
                if m is None:
                    raise
        return _answer_to_entity(m)

    def list_by_assignment(self, assignment_id: int) -> list[Answer]:
        from apps.domains.assignments.models import StudentAnswer

        return [
            _answer_to_entity(m)
            for m in StudentAnswer.objects.filter(assignment_id=assignment_id).order_by("id")
        ]

    def get(self, answer_id: int) -> Optional[Answer]:
        from apps.domains.assignments.models import StudentAnswer

        return _answer_to_entity(StudentAnswer.objects.filter(id=answer_id).first())

    def set_score(self, answer_id: int, score: Optional[float]) -> None:
        from django.utils import timezone
        from apps.domains.assignments.models import StudentAnswer

        updated = StudentAnswer.objects.filter(id=answer_id).update(score=score, updated_at=timezone.now())
        if not updated:
            raise NotFoundError("Answer not found")

    def apply_grade(self, answer_id: int, score: float, feedback: Any) -> Answer:
        from apps.domains.assignments.models import StudentAnswer

        m = StudentAnswer.objects.select_for_update().filter(id=answer_id).first()
        if m is None:
            raise NotFoundError("Answer not found")
        m.score = score
        fields = ["score", "updated_at"]
        if feedback is not UNSET:
            m.feedback = feedback
            fields.append("feedback")
        m.save(update_fields=fields)
        return _answer_to_entity(m)


class DjangoGradeRepository:
    def upsert(self, grade: Grade) -> Grade:
        from apps.domains.assignments.models import AssignmentGrade

        m, _ = AssignmentGrade.objects.update_or_create(
            assignment_id=grade.assignment_id,
            defaults={
                "average_score": grade.average_score,
                "final_grade": grade.final_grade,
                "rounding_method": grade.rounding_method.value,
                "graded_at": grade.graded_at,
                "graded_by_id": grade.graded_by,
            },
        )
        return _grade_to_entity(m)

    def get_by_assignment(self, assignment_id: int) -> Optional[Grade]:
        from apps.domains.assignments.models import AssignmentGrade

        return _grade_to_entity(AssignmentGrade.objects.filter(assignment_id=assignment_id).first())

    def list_for_teacher(
        self,
        teacher_id: int,
        student_id: Optional[int] = None,
        group_id: Optional[int] = None,
        career: Optional[str] = None,
    ) -> list[Grade]:
        from apps.domains.assignments.models import AssignmentGrade

        qs = AssignmentGrade.objects.filter(assignment__exam__teacher_id=teacher_id)
        if student_id is not None:
            qs = qs.filter(assignment__student_id=student_id)
        if group_id is not None:
            qs = qs.filter(assignment__student__memberships__group_id=group_id)
        if career:
            qs = qs.filter(assignment__student__career=career)
        return [_grade_to_entity(m) for m in qs.distinct().order_by("-graded_at", "-id")]
