"""
교사용 조회 (읽기 전용) — 배정 목록/상세/채점 화면, 성적 목록
"""
from __future__ import annotations

from typing import Any, Optional

from academy.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from academy.domain.assignments.entities import Assignment, AssignmentStatus
from academy.domain.assignments.errors import ForbiddenError, InvalidRequestError, NotFoundError
from academy.domain.assignments.questions import ExamDefinition

VIEW_FORBIDDEN_MESSAGE = "You do not have permission to view this assignment"


def _student_dict(info) -> Optional[dict]:
    if info is None:
        return None
    return {
        "id": info.id,
        "full_name": info.full_name,
        "email": info.email,
        "year": info.year,
        "career": info.career,
    }


class AssignmentQueries:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    @staticmethod
    def _owned(uow: UnitOfWork, teacher_id: int, assignment_id: int) -> tuple[Assignment, ExamDefinition]:
        assignment = uow.assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        exam = uow.exams.get_exam(assignment.exam_id)
        if exam is None:
            raise NotFoundError("Exam not found")
        if not exam.is_owned_by(teacher_id):
            raise ForbiddenError(VIEW_FORBIDDEN_MESSAGE)
        return assignment, exam

    def list_assignments(
        self,
        teacher_id: int,
        *,
        exam_id: Optional[int] = None,
        student_id: Optional[int] = None,
        status: Any = None,
    ) -> list[dict]:
        """교사 소유 시험의 배정 (assigned_at 최신순). 토큰 포함 (교사가 링크 재발송)."""
        status_filter = None
        if status:
            try:
                status_filter = AssignmentStatus(status)
            except ValueError:
                raise InvalidRequestError(f"Unknown status: {status}")

        with self._uow_factory() as uow:
            rows = uow.assignments.list_for_teacher(
                teacher_id,
                exam_id=exam_id,
                student_id=student_id,
                status=status_filter,
            )
            students = uow.students.get_many({a.student_id for a in rows})
            exams: dict[int, Optional[ExamDefinition]] = {}
            for a in rows:
                if a.exam_id not in exams:
                    exams[a.exam_id] = uow.exams.get_exam(a.exam_id)

        out = []
        for a in rows:
            item = a.to_dict()
            exam = exams.get(a.exam_id)
            item["exam_title"] = exam.title if exam else ""
            item["student"] = _student_dict(students.get(a.student_id))
            out.append(item)
        return out

    def get_detail(self, teacher_id: int, assignment_id: int) -> dict:
        with self._uow_factory() as uow:
            assignment, exam = self._owned(uow, teacher_id, assignment_id)
            student = uow.students.get_many([assignment.student_id]).get(assignment.student_id)
            answers = uow.answers.list_by_assignment(assignment.id)
            grade = uow.grades.get_by_assignment(assignment.id)

        out = assignment.to_dict()
        out["exam"] = {"id": exam.exam_id, "title": exam.title, "description": exam.description}
        out["student"] = _student_dict(student)
        out["answers"] = [a.to_dict() for a in answers]
        out["grade"] = grade.to_dict() if grade else None
        return out

    def get_grading_view(self, teacher_id: int, assignment_id: int) -> dict:
        """채점 화면: 문항(정답 포함) + 문항별 응답. 미응답 문항은 answer=None."""
        with self._uow_factory() as uow:
            assignment, exam = self._owned(uow, teacher_id, assignment_id)
            student = uow.students.get_many([assignment.student_id]).get(assignment.student_id)
            answers = uow.answers.list_by_assignment(assignment.id)
            grade = uow.grades.get_by_assignment(assignment.id)

        by_question = {a.question_id: a for a in answers}
        questions = []
        for q in exam.questions:
            item = q.to_dict()
            answer = by_question.get(q.question_id)
            item["answer"] = answer.to_dict() if answer else None
            questions.append(item)

        return {
            "assignment": assignment.to_dict(include_token=False),
            "exam": {"id": exam.exam_id, "title": exam.title},
            "student": _student_dict(student),
            "questions": questions,
            "grade": grade.to_dict() if grade else None,
        }

    def list_grades(
        self,
        teacher_id: int,
        *,
        student_id: Optional[int] = None,
        group_id: Optional[int] = None,
        career: Optional[str] = None,
    ) -> list[dict]:
        """graded_at 최신순."""
        with self._uow_factory() as uow:
            grades = uow.grades.list_for_teacher(
                teacher_id,
                student_id=student_id,
                group_id=group_id,
                career=career or None,
            )
            assignments = {g.assignment_id: uow.assignments.get(g.assignment_id) for g in grades}
            students = uow.students.get_many(
                {a.student_id for a in assignments.values() if a is not None}
            )

        out = []
        for g in grades:
            item = g.to_dict()
            a = assignments.get(g.assignment_id)
            item["exam_id"] = a.exam_id if a else None
            item["student"] = _student_dict(students.get(a.student_id)) if a else None
            out.append(item)
        return out
