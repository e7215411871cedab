from academy.domain.assignments.entities import Answer, AnswerPayload
from academy.domain.assignments.questions import ExamQuestion, QuestionType, parse_type_config
from academy.domain.assignments.scoring import score_submission

from tests.conftest import mc_question, numeric_question, open_text_question


def _mc_answer(question_id, option_id):
    return Answer(
        assignment_id=1,
        question_id=question_id,
        payload=AnswerPayload(selected_option_id=option_id),
    )


def test_weighted_multiple_choice_percentage():
    questions = [mc_question(1, weight=2, correct="a"), mc_question(2, weight=3, correct="a")]
    answers = [_mc_answer(1, "a"), _mc_answer(2, "b")]

    outcome = score_submission(questions, answers)

    assert outcome.earned == 2
    assert outcome.max_score == 5
    assert outcome.percentage == 40
    assert outcome.answer_scores == {1: 2.0, 2: 0.0}


def test_open_text_only_scores_zero_without_answer_scores():
    outcome = score_submission([open_text_question(1, weight=4)], [])

    assert outcome.max_score == 4
    assert outcome.percentage == 0
    assert outcome.answer_scores == {}


def test_no_questions_is_zero_not_division_error():
    outcome = score_submission([], [])
    assert outcome.percentage == 0
    assert outcome.max_score == 0


def test_unanswered_multiple_choice_records_nothing():
    questions = [mc_question(1, weight=1), mc_question(2, weight=1)]
    answers = [_mc_answer(1, "a")]

    outcome = score_submission(questions, answers)

    assert outcome.percentage == 50
    assert 2 not in outcome.answer_scores


def test_unknown_option_counts_as_incorrect():
    outcome = score_submission([mc_question(1, weight=2)], [_mc_answer(1, "zzz")])
    assert outcome.answer_scores == {1: 0.0}
    assert outcome.earned == 0


def test_non_objective_answers_stay_unscored():
    questions = [mc_question(1, weight=1), numeric_question(2, weight=1)]
    answers = [
        _mc_answer(1, "a"),
        Answer(assignment_id=1, question_id=2, payload=AnswerPayload(answer_numeric=9.81)),
    ]

    outcome = score_submission(questions, answers)

    assert outcome.percentage == 50
    assert set(outcome.answer_scores) == {1}


def test_scoring_is_deterministic():
    questions = [mc_question(i, weight=0.1 * i) for i in range(1, 8)]
    answers = [_mc_answer(i, "a" if i % 2 else "c") for i in range(1, 8)]

    first = score_submission(questions, answers)
    second = score_submission(questions, answers)

    assert first == second


def test_option_with_zero_id_scores_when_selected():
    question = ExamQuestion(
        question_id=9,
        question_type=QuestionType.MULTIPLE_CHOICE,
        config=parse_type_config(
            "multiple_choice",
            {"options": [{"id": 0, "is_correct": True}, {"id": 1, "is_correct": False}]},
        ),
        weight=2,
    )

    outcome = score_submission([question], [_mc_answer(9, "0")])

    assert outcome.percentage == 100
    assert outcome.answer_scores == {9: 2.0}
