import pytest
from django.utils import timezone

from academy.adapters.db.django.repositories_assignments import _EXAM_STUDENT_COLUMNS
from academy.adapters.db.django.uow import DjangoUnitOfWork, _is_statement_timeout, is_unique_violation
from academy.application.use_cases.assignments.assign_exam import AssignExamService
from academy.application.use_cases.assignments.exam_session import ExamSessionService
from academy.application.use_cases.assignments.grade_recorder import GradeRecorder
from academy.application.use_cases.students.import_students import StudentImportService
from academy.domain.assignments.entities import Answer, AnswerPayload, Assignment, AssignmentStatus
from academy.domain.assignments.errors import ConflictError, InvalidStateError
from academy.domain.assignments.questions import QuestionType
from academy.domain.students.entities import StudentRecord
from apps.domains.assignments.models import AssignmentGrade, ExamAssignment, StudentAnswer
from apps.domains.students.models import GroupMembership, Student

from tests.django_seed import seed_exam, seed_students

pytestmark = pytest.mark.django_db


@pytest.fixture
def teacher(django_user_model):
    return django_user_model.objects.create_user(username="teacher", password="pw")


@pytest.fixture
def seeded(teacher):
    exam, questions = seed_exam(teacher)
    students, group = seed_students(teacher, group_name="Period 1")
    return exam, questions, students, group


def _assign(teacher, exam, **kwargs):
    return AssignExamService(DjangoUnitOfWork, link_base_url="https://exam.test").assign(
        teacher.id, exam.id, **kwargs
    )


def test_exam_definition_loaded_in_question_order(seeded):
    exam, (mc, essay), _, _ = seeded
    with DjangoUnitOfWork() as uow:
        definition = uow.exams.get_exam(exam.id)

    assert [q.question_id for q in definition.questions] == [mc.id, essay.id]
    assert definition.questions[0].question_type is QuestionType.MULTIPLE_CHOICE
    assert definition.questions[0].weight == 3.0
    assert definition.questions[0].config.find_option("a").is_correct


def test_student_email_stored_lowercase(seeded):
    _, _, students, _ = seeded
    assert Student.objects.get(id=students[0].id).email == "student1@school.test"


def test_full_flow_against_orm(teacher, seeded):
    exam, (mc, essay), students, group = seeded
    result = _assign(teacher, exam, group_id=group.id)
    assert result.created_count == 3

    token = result.assignments[0].access_token
    session = ExamSessionService(DjangoUnitOfWork)
    session.start(token)
    session.save_answer(token, mc.id, AnswerPayload(selected_option_id="a"))
    session.save_answer(token, essay.id, AnswerPayload(answer_text="draft"))
    session.save_answer(token, essay.id, AnswerPayload(answer_text="final"))
    submitted = session.submit(token)

    assert submitted.score == pytest.approx(75.0)
    row = ExamAssignment.objects.get(access_token=token)
    assert row.status == "submitted"
    assert StudentAnswer.objects.filter(assignment=row).count() == 2
    assert StudentAnswer.objects.get(assignment=row, question_id=essay.id).answer_text == "final"

    grader = GradeRecorder(DjangoUnitOfWork)
    essay_answer = StudentAnswer.objects.get(assignment=row, question_id=essay.id)
    grader.grade_answer(teacher.id, essay_answer.id, 1, "ok")
    grader.grade_answer(teacher.id, essay_answer.id, 0.5)
    essay_answer.refresh_from_db()
    assert (essay_answer.score, essay_answer.feedback) == (0.5, "ok")

    grader.finalize(teacher.id, row.id, 87.5, 88, "ceil")
    row.refresh_from_db()
    assert row.status == "graded"
    grade = AssignmentGrade.objects.get(assignment=row)
    assert grade.final_grade == 88
    assert grade.graded_by_id == teacher.id

    with pytest.raises(InvalidStateError):
        session.start(token)


def test_assign_conflict_and_skip(teacher, seeded):
    exam, _, students, group = seeded
    _assign(teacher, exam, student_ids=[students[0].id])

    result = _assign(teacher, exam, group_id=group.id)
    assert (result.created_count, result.skipped_count) == (2, 1)

    with pytest.raises(ConflictError):
        _assign(teacher, exam, group_id=group.id)
    assert ExamAssignment.objects.filter(exam=exam).count() == 3


def test_repository_create_maps_unique_violation(teacher, seeded):
    exam, _, students, _ = seeded
    _assign(teacher, exam, student_ids=[students[0].id])
    with pytest.raises(ConflictError):
        with DjangoUnitOfWork() as uow:
            uow.assignments.create(
                Assignment(
                    exam_id=exam.id,
                    student_id=students[0].id,
                    access_token="f" * 64,
                    assigned_at=timezone.now(),
                )
            )


def test_answer_upsert_falls_back_to_update_when_row_appears(teacher, seeded, monkeypatch):
    exam, (mc, _), students, _ = seeded
    created = _assign(teacher, exam, student_ids=[students[0].id]).assignments[0]
    # 다른 요청이 먼저 INSERT한 행 (첫 조회 이후에 생긴 것처럼 만든다)
    StudentAnswer.objects.create(
        assignment_id=created.assignment_id,
        question_id=mc.id,
        selected_option_id="b",
        score=3,
        feedback="old",
        created_at=timezone.now(),
    )

    original = StudentAnswer.objects.select_for_update
    reads = []

    def stale_first_read(*args, **kwargs):
        reads.append(1)
        if len(reads) == 1:
            return StudentAnswer.objects.none()
        return original(*args, **kwargs)

    monkeypatch.setattr(StudentAnswer.objects, "select_for_update", stale_first_read)

    with DjangoUnitOfWork() as uow:
        saved = uow.answers.upsert(
            Answer(
                assignment_id=created.assignment_id,
                question_id=mc.id,
                payload=AnswerPayload(selected_option_id="a"),
            ),
            timezone.now(),
        )

    assert len(reads) == 2
    rows = list(StudentAnswer.objects.filter(assignment_id=created.assignment_id))
    assert len(rows) == 1
    assert rows[0].id == saved.id
    assert (rows[0].selected_option_id, rows[0].score, rows[0].feedback) == ("a", None, None)


def test_transition_is_conditional(teacher, seeded):
    exam, _, students, _ = seeded
    created = _assign(teacher, exam, student_ids=[students[0].id]).assignments[0]

    with DjangoUnitOfWork() as uow:
        assert uow.assignments.transition(
            created.assignment_id, AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS
        )
        assert not uow.assignments.transition(
            created.assignment_id, AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS
        )


def test_student_batch_against_orm(teacher, seeded):
    _, _, _, group = seeded
    service = StudentImportService(DjangoUnitOfWork)

    result = service.create_batch(
        teacher.id,
        [
            StudentRecord(full_name="Dup", email="STUDENT1@school.test"),
            StudentRecord(full_name="New", email="new@school.test", group_ids=(group.id,)),
        ],
    )

    assert (result.created, result.failed) == (1, 1)
    new = Student.objects.get(email="new@school.test")
    assert GroupMembership.objects.filter(group=group, student=new).exists()


def test_statement_timeout_detection():
    from django.db import OperationalError

    assert _is_statement_timeout(OperationalError("canceling statement due to statement timeout"))
    assert not _is_statement_timeout(OperationalError("connection refused"))
    assert not _is_statement_timeout(ValueError("statement timeout"))


def _fake_db_error(**attrs):
    # __cause__ must be an exception instance; mimic a psycopg error's attributes.
    err = Exception()
    for key, value in attrs.items():
        setattr(err, key, value)
    return err


def test_unique_violation_detection():
    from types import SimpleNamespace

    from django.db import IntegrityError

    sqlite_dup = IntegrityError(
        "UNIQUE constraint failed: assignments_exam_assignment.exam_id, assignments_exam_assignment.student_id"
    )
    assert is_unique_violation(sqlite_dup, "uniq_assignment_exam_student", _EXAM_STUDENT_COLUMNS)
    assert is_unique_violation(
        IntegrityError("UNIQUE constraint failed: index 'uniq_student_teacher_email'"),
        "uniq_student_teacher_email",
    )
    assert not is_unique_violation(
        IntegrityError("UNIQUE constraint failed: assignments_exam_assignment.access_token"),
        "uniq_assignment_exam_student",
        _EXAM_STUDENT_COLUMNS,
    )
    assert not is_unique_violation(IntegrityError("FOREIGN KEY constraint failed"), "uniq_assignment_exam_student")

    pg_dup = IntegrityError("duplicate key value")
    pg_dup.__cause__ = _fake_db_error(sqlstate="23505", diag=SimpleNamespace(constraint_name="uniq_student_teacher_email"))
    assert is_unique_violation(pg_dup, "uniq_student_teacher_email")
    assert not is_unique_violation(pg_dup, "uniq_assignment_exam_student")

    pg_fk = IntegrityError("violates foreign key constraint")
    pg_fk.__cause__ = _fake_db_error(sqlstate="23503", diag=SimpleNamespace(constraint_name="fk_student"))
    assert not is_unique_violation(pg_fk, "fk_student")


def test_repository_create_reraises_other_integrity_errors(teacher, seeded, monkeypatch):
    from django.db import IntegrityError

    exam, _, students, _ = seeded

    def fk_failure(**kwargs):
        raise IntegrityError("FOREIGN KEY constraint failed")

    monkeypatch.setattr(ExamAssignment.objects, "create", fk_failure)
    with pytest.raises(IntegrityError):
        with DjangoUnitOfWork() as uow:
            uow.assignments.create(
                Assignment(
                    exam_id=exam.id,
                    student_id=students[0].id,
                    access_token="e" * 64,
                    assigned_at=timezone.now(),
                )
            )


def test_student_create_reraises_other_integrity_errors(teacher, monkeypatch):
    from django.db import IntegrityError

    def fk_failure(**kwargs):
        raise IntegrityError("FOREIGN KEY constraint failed")

    monkeypatch.setattr(Student.objects, "create", fk_failure)
    with pytest.raises(IntegrityError):
        with DjangoUnitOfWork() as uow:
            uow.students.create(teacher.id, StudentRecord(full_name="Ana", email="ana@school.test"))
