"""
문항 정의 (문제은행 읽기 전용 뷰) — 순수 파이썬

문항 유형별 설정(type_config)은 JSON blob을 그대로 돌리지 않고
어댑터 경계에서 한 번만 유형별 dataclass로 디코딩한다.
stored JSON은 snake_case 기준이며, 이관 데이터의 camelCase 키도 받아준다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    NUMERIC = "numeric"
    GRAPH_CLICK = "graph_click"
    OPEN_TEXT = "open_text"


# 자동 채점 대상 (정답키로 정오 판정 가능한 유형)
OBJECTIVE_TYPES = (QuestionType.MULTIPLE_CHOICE,)


def _pick(raw: dict, *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in raw:
            return raw[k]
    return default


def _float_or_none(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    return float(v)


def _range(v: Any, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(v, (list, tuple)) and len(v) == 2:
        return float(v[0]), float(v[1])
    return default


@dataclass(frozen=True)
class ChoiceOption:
    id: str
    text: str = ""
    is_correct: bool = False
    order: int = 0

    @classmethod
    def from_dict(cls, raw: dict) -> "ChoiceOption":
        return cls(
            id="" if raw.get("id") is None else str(raw["id"]),
            text=str(raw.get("text") or ""),
            is_correct=bool(_pick(raw, "is_correct", "isCorrect", default=False)),
            order=int(raw.get("order") or 0),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "is_correct": self.is_correct, "order": self.order}

    def public_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "order": self.order}


@dataclass(frozen=True)
class MultipleChoiceConfig:
    question_type: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE

    options: tuple[ChoiceOption, ...] = ()
    allow_multiple: bool = False
    shuffle_options: bool = True

    @classmethod
    def from_dict(cls, raw: dict) -> "MultipleChoiceConfig":
        options = raw.get("options") or []
        return cls(
            options=tuple(ChoiceOption.from_dict(o) for o in options if isinstance(o, dict)),
            allow_multiple=bool(_pick(raw, "allow_multiple", "allowMultiple", default=False)),
            shuffle_options=bool(_pick(raw, "shuffle_options", "shuffleOptions", default=True)),
        )

    def find_option(self, option_id: Optional[str]) -> Optional[ChoiceOption]:
        if not option_id:
            return None
        for o in self.options:
            if o.id == option_id:
                return o
        return None

    def to_dict(self) -> dict:
        return {
            "options": [o.to_dict() for o in self.options],
            "allow_multiple": self.allow_multiple,
            "shuffle_options": self.shuffle_options,
        }

    def public_dict(self) -> dict:
        return {
            "options": [o.public_dict() for o in self.options],
            "allow_multiple": self.allow_multiple,
            "shuffle_options": self.shuffle_options,
        }


@dataclass(frozen=True)
class NumericConfig:
    question_type: ClassVar[QuestionType] = QuestionType.NUMERIC

    correct_value: Optional[float] = None
    tolerance: float = 0.0
    tolerance_type: str = "absolute"  # absolute | percentage
    unit: Optional[str] = None
    show_unit_input: bool = False

    @classmethod
    def from_dict(cls, raw: dict) -> "NumericConfig":
        tolerance_type = str(_pick(raw, "tolerance_type", "toleranceType", default="absolute") or "absolute")
        if tolerance_type not in ("absolute", "percentage"):
            raise ValueError(f"unknown tolerance_type: {tolerance_type}")
        return cls(
            correct_value=_float_or_none(_pick(raw, "correct_value", "correctValue")),
            tolerance=float(raw.get("tolerance") or 0.0),
            tolerance_type=tolerance_type,
            unit=raw.get("unit") or None,
            show_unit_input=bool(_pick(raw, "show_unit_input", "showUnitInput", default=False)),
        )

    def to_dict(self) -> dict:
        return {
            "correct_value": self.correct_value,
            "tolerance": self.tolerance,
            "tolerance_type": self.tolerance_type,
            "unit": self.unit,
            "show_unit_input": self.show_unit_input,
        }

    def public_dict(self) -> dict:
        return {"unit": self.unit, "show_unit_input": self.show_unit_input}


@dataclass(frozen=True)
class GraphClickConfig:
    question_type: ClassVar[QuestionType] = QuestionType.GRAPH_CLICK

    graph_type: str = "cartesian"
    x_range: tuple[float, float] = (-10.0, 10.0)
    y_range: tuple[float, float] = (-10.0, 10.0)
    answer_type: str = "point"  # point | function | area
    correct_point: Optional[dict] = None
    tolerance_radius: Optional[float] = None
    correct_function_id: Optional[str] = None
    correct_area: Optional[dict] = None
    # 축 라벨, 선/함수 데이터, 이미지 등 화면 표시용 값
    display: dict = field(default_factory=dict)

    _ANSWER_KEYS: ClassVar[tuple[str, ...]] = (
        "correct_point", "correctPoint",
        "tolerance_radius", "toleranceRadius",
        "correct_function_id", "correctFunctionId",
        "correct_area", "correctArea",
    )
    _STRUCT_KEYS: ClassVar[tuple[str, ...]] = (
        "graph_type", "graphType", "x_range", "xRange", "y_range", "yRange",
        "answer_type", "answerType",
    )

    @classmethod
    def from_dict(cls, raw: dict) -> "GraphClickConfig":
        answer_type = str(_pick(raw, "answer_type", "answerType", default="point") or "point")
        if answer_type not in ("point", "function", "area"):
            raise ValueError(f"unknown answer_type: {answer_type}")
        skip = set(cls._ANSWER_KEYS) | set(cls._STRUCT_KEYS)
        return cls(
            graph_type=str(_pick(raw, "graph_type", "graphType", default="cartesian")),
            x_range=_range(_pick(raw, "x_range", "xRange"), (-10.0, 10.0)),
            y_range=_range(_pick(raw, "y_range", "yRange"), (-10.0, 10.0)),
            answer_type=answer_type,
            correct_point=_pick(raw, "correct_point", "correctPoint"),
            tolerance_radius=_float_or_none(_pick(raw, "tolerance_radius", "toleranceRadius")),
            correct_function_id=_pick(raw, "correct_function_id", "correctFunctionId"),
            correct_area=_pick(raw, "correct_area", "correctArea"),
            display={k: v for k, v in raw.items() if k not in skip},
        )

    def to_dict(self) -> dict:
        out = dict(self.display)
        out.update(
            {
                "graph_type": self.graph_type,
                "x_range": list(self.x_range),
                "y_range": list(self.y_range),
                "answer_type": self.answer_type,
                "correct_point": self.correct_point,
                "tolerance_radius": self.tolerance_radius,
                "correct_function_id": self.correct_function_id,
                "correct_area": self.correct_area,
            }
        )
        return out

    def public_dict(self) -> dict:
        out = dict(self.display)
        out.update(
            {
                "graph_type": self.graph_type,
                "x_range": list(self.x_range),
                "y_range": list(self.y_range),
                "answer_type": self.answer_type,
            }
        )
        return out


@dataclass(frozen=True)
class OpenTextConfig:
    question_type: ClassVar[QuestionType] = QuestionType.OPEN_TEXT

    max_length: Optional[int] = None
    extras: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict) -> "OpenTextConfig":
        max_length = _pick(raw, "max_length", "maxLength")
        return cls(
            max_length=int(max_length) if max_length not in (None, "") else None,
            extras={k: v for k, v in raw.items() if k not in ("max_length", "maxLength")},
        )

    def to_dict(self) -> dict:
        out = dict(self.extras)
        out["max_length"] = self.max_length
        return out

    def public_dict(self) -> dict:
        return self.to_dict()


QuestionConfig = Union[MultipleChoiceConfig, NumericConfig, GraphClickConfig, OpenTextConfig]

_CONFIG_TYPES: dict[QuestionType, type] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoiceConfig,
    QuestionType.NUMERIC: NumericConfig,
    QuestionType.GRAPH_CLICK: GraphClickConfig,
    QuestionType.OPEN_TEXT: OpenTextConfig,
}


def parse_type_config(question_type: Union[str, QuestionType], raw: Any) -> QuestionConfig:
    """question_type 태그에 맞는 설정 variant로 디코딩. 알 수 없는 유형은 ValueError."""
    qt = QuestionType(question_type)
    return _CONFIG_TYPES[qt].from_dict(raw if isinstance(raw, dict) else {})


@dataclass(frozen=True)
class ExamQuestion:
    """시험에 포함된 문항 1개 (시험별 배점 weight / 순서 order 포함)."""

    question_id: int
    question_type: QuestionType
    config: QuestionConfig
    weight: float = 1.0
    order: int = 0
    title: str = ""
    content: str = ""
    difficulty: Optional[str] = None

    def public_dict(self) -> dict:
        """응시자용: 정답 정보 제거."""
        return {
            "id": self.question_id,
            "title": self.title,
            "content": self.content,
            "question_type": self.question_type.value,
            "type_config": self.config.public_dict(),
            "question_order": self.order,
            "weight": self.weight,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.question_id,
            "title": self.title,
            "content": self.content,
            "question_type": self.question_type.value,
            "type_config": self.config.to_dict(),
            "question_order": self.order,
            "weight": self.weight,
            "difficulty": self.difficulty,
        }


@dataclass(frozen=True)
class ExamDefinition:
    """시험 정의 (소유 교사 + 순서가 고정된 문항 목록)."""

    exam_id: int
    teacher_id: int
    title: str
    questions: tuple[ExamQuestion, ...] = ()
    description: str = ""
    duration_minutes: Optional[int] = None
    config: dict = field(default_factory=dict)

    def question(self, question_id: int) -> Optional[ExamQuestion]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None

    def is_owned_by(self, teacher_id: int) -> bool:
        return self.teacher_id == teacher_id
