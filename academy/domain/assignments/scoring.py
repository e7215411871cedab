"""
제출 시 자동 채점 — 순수 함수

- 모든 문항: max_score += weight
- multiple_choice: 선택지가 정답이면 weight, 오답(또는 알 수 없는 선택지)이면 0 기록
  응답이 없거나 선택이 비어 있으면 아무것도 기록하지 않음
- 그 외 유형: 자동 채점 없음 (수동 채점 대기, score = None 유지)
- 백분율 = earned / max_score * 100 (max_score == 0 이면 0)

같은 문항/응답 입력이면 항상 같은 결과 (문항 순서대로 누적).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from academy.domain.assignments.entities import Answer
from academy.domain.assignments.questions import OBJECTIVE_TYPES, ExamQuestion, MultipleChoiceConfig


@dataclass(frozen=True)
class ScoringOutcome:
    earned: float
    max_score: float
    percentage: float
    # question_id → 자동 채점 점수 (기록 대상만)
    answer_scores: Mapping[int, float] = field(default_factory=dict)


def score_submission(
    questions: Iterable[ExamQuestion],
    answers: Iterable[Answer],
) -> ScoringOutcome:
    by_question = {a.question_id: a for a in answers}

    earned = 0.0
    max_score = 0.0
    answer_scores: dict[int, float] = {}

    for q in questions:
        weight = float(q.weight)
        max_score += weight

        if q.question_type not in OBJECTIVE_TYPES:
            continue

        answer = by_question.get(q.question_id)
        selected = answer.payload.selected_option_id if answer else None
        if not selected:
            continue

        config = q.config if isinstance(q.config, MultipleChoiceConfig) else MultipleChoiceConfig()
        option = config.find_option(selected)
        if option is not None and option.is_correct:
            earned += weight
            answer_scores[q.question_id] = weight
        else:
            answer_scores[q.question_id] = 0.0

    percentage = (earned / max_score) * 100 if max_score > 0 else 0.0
    return ScoringOutcome(
        earned=earned,
        max_score=max_score,
        percentage=percentage,
        answer_scores=answer_scores,
    )
