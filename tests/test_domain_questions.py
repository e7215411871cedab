import pytest

from academy.domain.assignments.questions import (
    GraphClickConfig,
    MultipleChoiceConfig,
    NumericConfig,
    OpenTextConfig,
    QuestionType,
    parse_type_config,
)

ANSWER_KEY_FIELDS = {
    "is_correct",
    "correct_value",
    "tolerance",
    "tolerance_type",
    "correct_point",
    "tolerance_radius",
    "correct_function_id",
    "correct_area",
}


def _walk_keys(value):
    if isinstance(value, dict):
        for k, v in value.items():
            yield k
            yield from _walk_keys(v)
    elif isinstance(value, list):
        for v in value:
            yield from _walk_keys(v)


def test_multiple_choice_accepts_camel_case_and_strips_answers():
    config = parse_type_config(
        "multiple_choice",
        {
            "options": [
                {"id": "a", "text": "1 m/s", "isCorrect": False, "order": 0},
                {"id": "b", "text": "2 m/s", "isCorrect": True, "order": 1},
            ],
            "allowMultiple": False,
            "shuffleOptions": False,
        },
    )
    assert isinstance(config, MultipleChoiceConfig)
    assert config.find_option("b").is_correct
    assert config.find_option("missing") is None
    assert config.shuffle_options is False

    public = config.public_dict()
    assert [o["id"] for o in public["options"]] == ["a", "b"]
    assert not ANSWER_KEY_FIELDS & set(_walk_keys(public))


def test_numeric_public_view_hides_key():
    config = parse_type_config(
        QuestionType.NUMERIC,
        {"correctValue": "9.81", "tolerance": 0.5, "toleranceType": "percentage", "unit": "m/s²"},
    )
    assert isinstance(config, NumericConfig)
    assert config.correct_value == pytest.approx(9.81)
    assert config.tolerance_type == "percentage"
    assert config.public_dict() == {"unit": "m/s²", "show_unit_input": False}


def test_graph_click_keeps_display_extras_only():
    config = parse_type_config(
        "graph_click",
        {
            "xRange": [0, 5],
            "yRange": [0, 10],
            "answerType": "point",
            "correctPoint": {"x": 1, "y": 2},
            "toleranceRadius": 0.3,
            "axisLabels": {"x": "t", "y": "v"},
        },
    )
    assert isinstance(config, GraphClickConfig)
    assert config.x_range == (0.0, 5.0)
    assert config.correct_point == {"x": 1, "y": 2}

    public = config.public_dict()
    assert public["axisLabels"] == {"x": "t", "y": "v"}
    assert not ANSWER_KEY_FIELDS & set(_walk_keys(public))
    assert "correctPoint" not in public


def test_open_text_config():
    config = parse_type_config("open_text", {"maxLength": 300, "placeholder": "..."})
    assert isinstance(config, OpenTextConfig)
    assert config.max_length == 300
    assert config.public_dict() == {"placeholder": "...", "max_length": 300}


def test_unknown_type_or_variant_rejected():
    with pytest.raises(ValueError):
        parse_type_config("essay", {})
    with pytest.raises(ValueError):
        parse_type_config("numeric", {"tolerance_type": "relative"})


def test_numeric_option_ids_keep_zero():
    config = parse_type_config(
        "multiple_choice",
        {"options": [{"id": 0, "text": "zero", "is_correct": True}, {"id": 1, "text": "one"}]},
    )
    assert [o.id for o in config.options] == ["0", "1"]
    assert config.find_option("0").is_correct
