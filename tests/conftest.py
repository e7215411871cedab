from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from academy.adapters.db.memory.store import MemoryStore
from academy.application.use_cases.assignments.assign_exam import AssignExamService
from academy.application.use_cases.assignments.exam_session import ExamSessionService
from academy.application.use_cases.assignments.grade_recorder import GradeRecorder
from academy.application.use_cases.assignments.queries import AssignmentQueries
from academy.application.use_cases.students.import_students import StudentImportService
from academy.domain.assignments.questions import (
    ChoiceOption,
    ExamDefinition,
    ExamQuestion,
    MultipleChoiceConfig,
    NumericConfig,
    OpenTextConfig,
    QuestionType,
)

TEACHER_ID = 1
OTHER_TEACHER_ID = 2
EXAM_ID = 100
OTHER_EXAM_ID = 200


def mc_question(question_id: int, weight: float = 1.0, order: int = 0, correct: str = "a") -> ExamQuestion:
    options = tuple(
        ChoiceOption(id=oid, text=oid.upper(), is_correct=(oid == correct), order=i)
        for i, oid in enumerate(("a", "b", "c"))
    )
    return ExamQuestion(
        question_id=question_id,
        question_type=QuestionType.MULTIPLE_CHOICE,
        config=MultipleChoiceConfig(options=options),
        weight=weight,
        order=order,
        title=f"Q{question_id}",
    )


def open_text_question(question_id: int, weight: float = 1.0, order: int = 0) -> ExamQuestion:
    return ExamQuestion(
        question_id=question_id,
        question_type=QuestionType.OPEN_TEXT,
        config=OpenTextConfig(max_length=500),
        weight=weight,
        order=order,
        title=f"Q{question_id}",
    )


def numeric_question(question_id: int, weight: float = 1.0, order: int = 0) -> ExamQuestion:
    return ExamQuestion(
        question_id=question_id,
        question_type=QuestionType.NUMERIC,
        config=NumericConfig(correct_value=9.81, tolerance=0.1),
        weight=weight,
        order=order,
        title=f"Q{question_id}",
    )


class StepClock:
    """호출마다 1초씩 증가하는 고정 시계."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]


class FailingPublisher:
    def publish(self, event) -> None:
        raise RuntimeError("broker down")


@pytest.fixture
def store() -> MemoryStore:
    s = MemoryStore()
    s.seed_exam(
        ExamDefinition(
            exam_id=EXAM_ID,
            teacher_id=TEACHER_ID,
            title="Kinematics",
            questions=(
                mc_question(11, weight=2.0, order=1, correct="a"),
                mc_question(12, weight=3.0, order=2, correct="b"),
                open_text_question(13, weight=4.0, order=3),
                numeric_question(14, weight=1.0, order=4),
            ),
            description="Unit 1",
            duration_minutes=45,
        )
    )
    s.seed_exam(
        ExamDefinition(
            exam_id=OTHER_EXAM_ID,
            teacher_id=OTHER_TEACHER_ID,
            title="Someone else's exam",
            questions=(mc_question(21),),
        )
    )
    return s


@pytest.fixture
def students(store):
    return [
        store.seed_student(TEACHER_ID, f"Student {i}", f"student{i}@school.test", career="Physics" if i % 2 else "Math")
        for i in range(1, 6)
    ]


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def session(store, clock, publisher) -> ExamSessionService:
    return ExamSessionService(store.uow_factory(), events=publisher, clock=clock)


@pytest.fixture
def grader(store, clock, publisher) -> GradeRecorder:
    return GradeRecorder(store.uow_factory(), events=publisher, clock=clock)


@pytest.fixture
def assigner(store, clock, publisher) -> AssignExamService:
    return AssignExamService(
        store.uow_factory(),
        events=publisher,
        clock=clock,
        link_base_url="https://exam.test",
    )


@pytest.fixture
def queries(store) -> AssignmentQueries:
    return AssignmentQueries(store.uow_factory())


@pytest.fixture
def importer(store, publisher) -> StudentImportService:
    return StudentImportService(store.uow_factory(), events=publisher)


@pytest.fixture
def assigned(assigner, students):
    """EXAM_ID를 학생 1명에게 배정. (CreatedAssignment 반환)"""
    result = assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id])
    return result.assignments[0]
