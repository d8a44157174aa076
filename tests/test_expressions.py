from __future__ import annotations

import pytest

from choreo.diagnostics import Diagnostics
from choreo.expressions import EXPRESSION_ALIASES, EXPRESSION_PRESETS, expand_expression, resolve_expression
from choreo.models import FACIAL_FIELDS, FacialState
from choreo.vocabulary import VOCABULARIES

_FIELD_VOCAB = {
    "eye_state": "eye",
    "eyebrow_state": "eyebrow",
    "mouth_state": "mouth",
    "face_state": "face",
    "nose_state": "nose",
    "cheek_state": "cheek",
    "forehead_state": "forehead",
    "jaw_state": "jaw",
}


def test_override_always_wins():
    angry = expand_expression("angry")
    assert angry.mouth_state != "smile"
    expanded = expand_expression("angry", FacialState(mouth_state="smile"))
    assert expanded.mouth_state == "smile"
    assert expanded.eyebrow_state == angry.eyebrow_state


def test_aliases_resolve_case_insensitively():
    assert resolve_expression("Furious") == "angry"
    assert resolve_expression("in love") == "loving"
    assert resolve_expression("HEARTBROKEN") == "heartbroken"
    assert resolve_expression("very_happy") == "happy"


def test_unknown_mood_yields_overrides_and_warning():
    diagnostics = Diagnostics()
    overrides = FacialState(eye_state="wide")
    assert expand_expression("zorblax", overrides, diagnostics) == overrides
    assert diagnostics.codes() == ["unknown_expression"]
    assert expand_expression("zorblax").is_empty()


def test_alias_table_targets_exist():
    assert len(EXPRESSION_ALIASES) > 100
    assert set(EXPRESSION_ALIASES.values()) <= set(EXPRESSION_PRESETS)


@pytest.mark.parametrize("name", sorted(EXPRESSION_PRESETS))
def test_preset_values_are_in_vocabulary(name):
    preset = EXPRESSION_PRESETS[name]
    for field_name in FACIAL_FIELDS:
        value = getattr(preset, field_name)
        if value is not None:
            assert value in VOCABULARIES[_FIELD_VOCAB[field_name]]
