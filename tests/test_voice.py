from choreo.diagnostics import Diagnostics
from choreo.models import VoiceHint
from choreo.voice import pace_to_rate, parse_voice_hint


def test_compact_and_long_keys():
    hint = parse_voice_hint({"p": "Low", "tone": "warm", "vol": "soft", "pace": "fast", "mood": "calm", "int": "sincere"})
    assert hint == VoiceHint(pitch="low", tone="warm", volume="soft", pace="fast", mood="calm", intent="sincere")


def test_invalid_values_are_dropped_and_reported():
    diagnostics = Diagnostics()
    hint = parse_voice_hint({"p": "ultrasonic", "mood": "sad"}, diagnostics, "jung")
    assert hint == VoiceHint(mood="sad")
    (record,) = diagnostics.records()
    assert record.code == "invalid_voice_hint"
    assert record.field == "pitch"
    assert record.actor_id == "jung"


def test_nothing_valid_means_no_hint():
    assert parse_voice_hint({"p": "ultrasonic"}) is None
    assert parse_voice_hint("loud") is None
    assert parse_voice_hint(None) is None


def test_pace_to_rate():
    assert pace_to_rate("slow") == 0.8
    assert pace_to_rate(None) == 1.0
    assert pace_to_rate("unknown") == 1.0
