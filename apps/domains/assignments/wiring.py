# PATH: apps/domains/assignments/wiring.py
# HTTP 계층 → Use Case 조립 (명시적 팩토리, DI 컨테이너 없음)
from __future__ import annotations

from django.conf import settings

from academy.adapters.db.django.uow import DjangoUnitOfWork
from academy.adapters.events.logging_publisher import LoggingEventPublisher
from academy.application.use_cases.assignments.assign_exam import AssignExamService
from academy.application.use_cases.assignments.exam_session import ExamSessionService
from academy.application.use_cases.assignments.grade_recorder import GradeRecorder
from academy.application.use_cases.assignments.queries import AssignmentQueries
from academy.application.use_cases.students.import_students import StudentImportService

_events = LoggingEventPublisher()


def uow_factory() -> DjangoUnitOfWork:
    return DjangoUnitOfWork(timeout_ms=getattr(settings, "ASSIGNMENT_STORE_TIMEOUT_MS", None))


def exam_session_service() -> ExamSessionService:
    return ExamSessionService(uow_factory, events=_events)


def grade_recorder() -> GradeRecorder:
    return GradeRecorder(uow_factory, events=_events)


def assign_exam_service() -> AssignExamService:
    return AssignExamService(
        uow_factory,
        events=_events,
        link_base_url=getattr(settings, "EXAM_FRONTEND_URL", ""),
    )


def assignment_queries() -> AssignmentQueries:
    return AssignmentQueries(uow_factory)


def student_import_service() -> StudentImportService:
    return StudentImportService(uow_factory, events=_events)
