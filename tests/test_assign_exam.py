import pytest

from academy.application.use_cases.assignments.assign_exam import AssignExamService
from academy.domain.assignments.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from academy.domain.shared.ids import is_well_formed_token

from tests.conftest import EXAM_ID, OTHER_EXAM_ID, OTHER_TEACHER_ID, TEACHER_ID


def test_assign_to_group_skips_existing(assigner, store, students, publisher):
    group = store.seed_group(TEACHER_ID, "Period 3", tuple(s.id for s in students))
    assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, students[1].id])

    result = assigner.assign(TEACHER_ID, EXAM_ID, group_id=group.id)

    assert result.created_count == 3
    assert result.skipped_count == 2
    tokens = [a.access_token for a in result.assignments]
    assert len(set(tokens)) == 3
    assert all(is_well_formed_token(t) for t in tokens)
    assert {a.student_id for a in result.assignments} == {s.id for s in students[2:]}
    assert len(store.state.assignments) == 5
    assert publisher.events[-1].skipped_count == 2


def test_created_assignment_carries_student_and_link(assigner, students):
    result = assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id])
    created = result.assignments[0]

    assert created.student_name == "Student 1"
    assert created.student_email == "student1@school.test"
    assert created.access_link == f"https://exam.test/exam/{created.access_token}"
    assert result.to_dict()["skipped_count"] == 0


def test_all_already_assigned_is_conflict(assigner, store, students):
    assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[s.id for s in students])
    with pytest.raises(ConflictError):
        assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, students[1].id])
    assert len(store.state.assignments) == 5


def test_duplicate_student_ids_collapse(assigner, students):
    result = assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, students[0].id])
    assert result.created_count == 1
    assert result.skipped_count == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"student_ids": []},
        {"student_ids": [1], "group_id": 1},
    ],
)
def test_exactly_one_target_required(assigner, students, kwargs):
    with pytest.raises(InvalidRequestError):
        assigner.assign(TEACHER_ID, EXAM_ID, **kwargs)


def test_exam_errors(assigner, students):
    with pytest.raises(NotFoundError):
        assigner.assign(TEACHER_ID, 9999, student_ids=[students[0].id])
    with pytest.raises(ForbiddenError):
        assigner.assign(TEACHER_ID, OTHER_EXAM_ID, student_ids=[students[0].id])


def test_group_errors(assigner, store, students):
    foreign = store.seed_group(OTHER_TEACHER_ID, "Theirs", (students[0].id,))
    empty = store.seed_group(TEACHER_ID, "Empty")

    with pytest.raises(NotFoundError):
        assigner.assign(TEACHER_ID, EXAM_ID, group_id=9999)
    with pytest.raises(ForbiddenError):
        assigner.assign(TEACHER_ID, EXAM_ID, group_id=foreign.id)
    with pytest.raises(InvalidRequestError):
        assigner.assign(TEACHER_ID, EXAM_ID, group_id=empty.id)


def test_foreign_student_is_not_found(assigner, store, students):
    outsider = store.seed_student(OTHER_TEACHER_ID, "Outsider", "out@school.test")
    with pytest.raises(NotFoundError):
        assigner.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, outsider.id])
    assert store.state.assignments == {}


def test_uniqueness_race_counts_as_skipped(store, clock, students, monkeypatch):
    service = AssignExamService(store.uow_factory(), clock=clock)

    from academy.adapters.db.memory.repositories import MemoryAssignmentRepository

    # 조회 시점에는 미배정으로 보이지만 생성 직전 다른 요청이 배정한 상황
    monkeypatch.setattr(MemoryAssignmentRepository, "assigned_student_ids", lambda self, exam_id, ids: set())
    service.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id])

    result = service.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, students[1].id])

    assert result.created_count == 1
    assert result.skipped_count == 1


def test_token_factory_is_injectable(store, clock, students):
    tokens = iter(["1" * 64, "2" * 64])
    service = AssignExamService(store.uow_factory(), clock=clock, token_factory=lambda: next(tokens))

    result = service.assign(TEACHER_ID, EXAM_ID, student_ids=[students[0].id, students[1].id])

    assert [a.access_token for a in result.assignments] == ["1" * 64, "2" * 64]
