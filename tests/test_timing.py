from __future__ import annotations

import random

from choreo.config import SpeedQualifier, TimingConfig
from choreo.diagnostics import Diagnostics
from choreo.models import AnimationSegment, FacialState, TextReveal, VoiceHint
from choreo.timing import (
    TurnStyle,
    build_turn_segments,
    default_segments,
    non_talking_duration,
    parse_speed,
    pause_duration,
    repair_text_ranges,
    split_sentences,
    talking_duration,
)


def test_split_sentences():
    assert split_sentences("Hello. How are you?") == ["Hello.", "How are you?"]
    assert split_sentences("Wait!!! Really?! ok") == ["Wait!!!", "Really?!", "ok"]
    assert split_sentences("no punctuation here") == ["no punctuation here"]
    assert split_sentences("   ") == []


def test_talking_duration_scales_and_clamps():
    assert talking_duration("Hello.", SpeedQualifier.NORMAL) == 390
    assert talking_duration("Hello.", SpeedQualifier.SLOW) == 507
    assert talking_duration("Hi", SpeedQualifier.EXPLOSIVE) == 300
    assert talking_duration("x" * 1000, SpeedQualifier.NORMAL) == 10000


def test_pause_duration_is_seeded_and_in_range():
    low = pause_duration(SpeedQualifier.NORMAL, random.Random(7))
    assert low == pause_duration(SpeedQualifier.NORMAL, random.Random(7))
    assert 700 <= low <= 2000
    fast = pause_duration(SpeedQualifier.FAST, random.Random(7))
    assert fast == round(low * 0.7) or abs(fast - low * 0.7) <= 1


def test_non_talking_duration_uses_table_and_injected_overrides():
    assert non_talking_duration("wave", SpeedQualifier.NORMAL) == 1200
    assert non_talking_duration("meh", SpeedQualifier.NORMAL) == 1000
    config = TimingConfig(animation_durations_ms={"wave": 2000}, default_animation_ms=500)
    assert non_talking_duration("wave", SpeedQualifier.FAST, config) == 1400
    assert non_talking_duration("nod", SpeedQualifier.NORMAL, config) == 500


def test_parse_speed_unknown_is_normal_with_warning():
    diagnostics = Diagnostics()
    assert parse_speed("ludicrous", diagnostics) is SpeedQualifier.NORMAL
    assert parse_speed("Explosive") is SpeedQualifier.EXPLOSIVE
    assert diagnostics.codes() == ["unknown_speed"]


def test_build_turn_segments_two_sentences():
    content, segments = build_turn_segments("Hello. How are you?", TurnStyle(), rng=random.Random(1))
    assert content == "Hello.\nHow are you?"
    assert [s.is_talking for s in segments] == [True, False, True]
    assert segments[1].animation == "idle"
    assert segments[0].text_reveal == TextReveal(0, 6)
    assert segments[2].text_reveal == TextReveal(7, 19)


def test_turn_style_applies_to_every_segment_and_effect_once():
    style = TurnStyle(
        animation="talking",
        facial=FacialState(mouth_state="smirk"),
        look="left",
        effect="sparkles",
        speed=SpeedQualifier.FAST,
        voice=VoiceHint(pitch="low"),
    )
    _, segments = build_turn_segments("One. Two. Three.", style, rng=random.Random(3))
    assert all(s.complementary.facial.mouth_state == "smirk" for s in segments)
    assert all(s.complementary.look_direction == "left" for s in segments)
    assert all(s.complementary.speed == 1.35 for s in segments)
    assert [s.complementary.effect for s in segments if s.complementary.effect] == ["sparkles"]
    assert all(s.voice == VoiceHint(pitch="low") for s in segments if s.is_talking)
    assert all(s.voice is None for s in segments if not s.is_talking)


def test_action_caption_becomes_leading_gesture():
    _, segments = build_turn_segments("Hi there.", TurnStyle(), rng=random.Random(0), actions=("waves happily",))
    gesture = segments[0]
    assert gesture.animation == "wave"
    assert gesture.is_talking is False
    assert gesture.action_text == "waves happily"
    assert gesture.duration == 1200


def test_empty_text_is_one_non_talking_segment():
    content, segments = build_turn_segments("", TurnStyle(animation="shrug"))
    assert content == ""
    assert len(segments) == 1
    assert segments[0].animation == "shrug"
    assert not segments[0].is_talking


def test_repair_snaps_gaps_and_forces_final_end():
    segments = (
        AnimationSegment("talking", 500, is_talking=True, text_reveal=TextReveal(0, 4)),
        AnimationSegment("idle", 500),
        AnimationSegment("talking", 500, is_talking=True, text_reveal=TextReveal(9, 12)),
    )
    repaired = repair_text_ranges(segments, 20)
    assert repaired[0].text_reveal == TextReveal(0, 4)
    assert repaired[2].text_reveal == TextReveal(4, 20)


def test_repair_distributes_when_no_ranges():
    segments = (
        AnimationSegment("talking", 500, is_talking=True),
        AnimationSegment("talking", 500, is_talking=True),
    )
    repaired = repair_text_ranges(segments, 9)
    assert [s.text_reveal for s in repaired] == [TextReveal(0, 5), TextReveal(5, 9)]


def test_repair_without_talking_reveals_on_first_segment():
    repaired = repair_text_ranges((AnimationSegment("idle", 500),), 7)
    assert repaired[0].text_reveal == TextReveal(0, 7)


def test_default_segments():
    segments = default_segments("Short.")
    assert [s.animation for s in segments] == ["thinking", "talking", "idle"]
    assert [s.duration for s in segments] == [1500, 2000, 1000]
    assert segments[0].complementary.look_direction == "up"
    assert segments[1].text_reveal == TextReveal(0, 6)
    assert segments[2].complementary.facial.mouth_state == "smile"


def test_injected_ceiling_is_honoured_end_to_end():
    config = TimingConfig(max_segment_ms=20000)
    sentence = "x" * 250 + "."
    content, segments = build_turn_segments(sentence, TurnStyle(), config, random.Random(0))
    (talking,) = segments
    assert talking.duration == 16315
    assert talking_duration(sentence, SpeedQualifier.NORMAL) == 10000


def test_injected_floor_applies_to_fallback_turn():
    config = TimingConfig(min_segment_ms=1200)
    thinking, talking, idle = default_segments("Hi.", config)
    assert (thinking.duration, talking.duration, idle.duration) == (1500, 2000, 1200)
