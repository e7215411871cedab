import pytest

from academy.domain.assignments.entities import AnswerPayload, AssignmentStatus, RoundingMethod
from academy.domain.assignments.errors import (
    ForbiddenError,
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
)

from tests.conftest import OTHER_TEACHER_ID, TEACHER_ID


@pytest.fixture
def submitted(session, assigned):
    token = assigned.access_token
    session.start(token)
    session.save_answer(token, 11, AnswerPayload(selected_option_id="a"))
    session.save_answer(token, 13, AnswerPayload(answer_text="essay"))
    session.submit(token)
    return assigned


def _answer_id(store, question_id):
    return next(a.id for a in store.state.answers.values() if a.question_id == question_id)


def test_finalize_records_grade_and_transitions(grader, store, submitted, publisher):
    grade = grader.finalize(TEACHER_ID, submitted.assignment_id, 72.5, 73, "round")

    assert grade.final_grade == 73
    assert grade.rounding_method is RoundingMethod.ROUND
    assert grade.graded_by == TEACHER_ID
    assert grade.graded_at is not None
    assert store.state.assignments[submitted.assignment_id].status == AssignmentStatus.GRADED
    assert publisher.names()[-1] == "assignment_graded"


def test_final_grade_is_stored_without_rerounding(grader, submitted):
    grade = grader.finalize(TEACHER_ID, submitted.assignment_id, 72.5, 72.5, "floor")
    assert grade.final_grade == 72.5


def test_finalize_twice_rejected(grader, submitted):
    grader.finalize(TEACHER_ID, submitted.assignment_id, 80, 80, "round")
    with pytest.raises(InvalidStateError) as exc:
        grader.finalize(TEACHER_ID, submitted.assignment_id, 90, 90, "round")
    assert exc.value.current_state == "graded"


def test_finalize_requires_submitted(grader, store, assigned):
    with pytest.raises(InvalidStateError) as exc:
        grader.finalize(TEACHER_ID, assigned.assignment_id, 80, 80, "round")
    assert exc.value.message == "Assignment must be in submitted status to be graded"
    assert store.state.grades == {}


def test_finalize_error_order(grader, submitted):
    with pytest.raises(NotFoundError):
        grader.finalize(TEACHER_ID, 9999, 80, 80, "round")
    with pytest.raises(ForbiddenError):
        grader.finalize(OTHER_TEACHER_ID, submitted.assignment_id, 80, 80, "round")
    with pytest.raises(InvalidRequestError):
        grader.finalize(TEACHER_ID, submitted.assignment_id, 80, 80, "stochastic")


def test_grade_answer_sets_score_and_feedback(grader, store, submitted):
    answer_id = _answer_id(store, 13)

    graded = grader.grade_answer(TEACHER_ID, answer_id, 3.5, "clear argument")

    assert graded.score == 3.5
    assert graded.feedback == "clear argument"


def test_grade_answer_feedback_patch_semantics(grader, store, submitted):
    answer_id = _answer_id(store, 13)
    grader.grade_answer(TEACHER_ID, answer_id, 2, "first pass")

    kept = grader.grade_answer(TEACHER_ID, answer_id, 3)
    assert kept.score == 3
    assert kept.feedback == "first pass"

    cleared = grader.grade_answer(TEACHER_ID, answer_id, 3, None)
    assert cleared.feedback is None


def test_grade_answer_after_graded_is_allowed(grader, store, submitted):
    grader.finalize(TEACHER_ID, submitted.assignment_id, 50, 50, "round")
    answer_id = _answer_id(store, 13)
    assert grader.grade_answer(TEACHER_ID, answer_id, 1).score == 1


def test_grade_answer_errors(grader, store, submitted):
    answer_id = _answer_id(store, 13)
    with pytest.raises(NotFoundError):
        grader.grade_answer(TEACHER_ID, 9999, 1)
    with pytest.raises(ForbiddenError):
        grader.grade_answer(OTHER_TEACHER_ID, answer_id, 1)
    with pytest.raises(InvalidRequestError):
        grader.grade_answer(TEACHER_ID, answer_id, -1)
    with pytest.raises(InvalidRequestError):
        grader.grade_answer(TEACHER_ID, answer_id, float("inf"))
