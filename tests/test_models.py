from __future__ import annotations

import random

import pytest

from choreo.config import TimingConfig
from choreo.models import (
    AnimationSegment,
    CharacterTimeline,
    Complementary,
    FacialState,
    OrchestrationScene,
    Roster,
    SceneWarning,
    TextReveal,
    VoiceHint,
    scene_from_dict,
    segment_from_dict,
    timeline_from_dict,
)
from choreo.pipeline import orchestrate

ROSTER = Roster(("freud", "jung", "adler"), {"freud": "Sigmund Freud", "jung": "Carl Jung", "adler": "Alfred Adler"})


def test_segment_duration_is_rounded_not_clamped():
    assert AnimationSegment("idle", 1234.6).duration == 1235
    assert AnimationSegment("idle", 50).duration == 50
    assert AnimationSegment("idle", 16315).duration == 16315


@pytest.mark.parametrize("raw", ["abc", float("nan"), float("inf"), True, None])
def test_segment_duration_must_be_finite(raw):
    with pytest.raises(ValueError):
        AnimationSegment("idle", raw)


def test_roster_resolve():
    assert ROSTER.resolve("jung") == "jung"
    assert ROSTER.resolve("JUNG") == "jung"
    assert ROSTER.resolve("sigmund freud") == "freud"
    assert ROSTER.resolve("Adler") == "adler"
    assert ROSTER.resolve("Dr. Freud") == "freud"
    assert ROSTER.resolve("ju") is None
    assert ROSTER.resolve("Napoleon") is None
    assert ROSTER.resolve("") is None
    assert ROSTER.resolve(None) is None


def test_roster_helpers():
    assert "jung" in ROSTER
    assert len(ROSTER) == 3
    assert ROSTER.index_of("adler") == 2
    assert ROSTER.index_of("nobody") == -1
    assert Roster(("x",)).display_name("x") == "x"


def test_facial_merge():
    base = FacialState(eye_state="open", mouth_state="smirk")
    merged = FacialState(mouth_state="smile").merged_over(base)
    assert merged == FacialState(eye_state="open", mouth_state="smile")
    assert FacialState().is_empty()


def test_segment_wire_shape():
    segment = AnimationSegment(
        animation="talking",
        duration=1200,
        is_talking=True,
        complementary=Complementary(look_direction="left", facial=FacialState(mouth_state="smile"), speed=1.0),
        text_reveal=TextReveal(0, 6),
        voice=VoiceHint(pitch="low"),
    )
    assert segment.to_dict() == {
        "animation": "talking",
        "duration": 1200,
        "isTalking": True,
        "complementary": {"lookDirection": "left", "mouthState": "smile", "speed": 1.0},
        "textReveal": {"start": 0, "end": 6},
        "voice": {"pitch": "low"},
    }
    assert "complementary" not in AnimationSegment("idle", 1000).to_dict()


def test_segment_from_dict_accepts_index_aliases():
    segment = segment_from_dict(
        {"animation": "talking", "duration": 5, "isTalking": True, "textReveal": {"startIndex": 2, "endIndex": 9}}
    )
    assert segment.duration == 300
    assert segment.text_reveal == TextReveal(2, 9)


def test_inbound_non_finite_numbers_fall_back():
    timeline = timeline_from_dict(
        {
            "characterId": "freud",
            "startDelay": float("inf"),
            "segments": [
                {"animation": "talking", "duration": float("inf"), "textReveal": {"start": 0, "end": float("nan")}},
                {"animation": "idle", "duration": 50, "complementary": {"speed": float("-inf")}},
            ],
        }
    )
    assert timeline.start_delay == 0
    assert [s.duration for s in timeline.segments] == [1500, 300]
    assert timeline.segments[0].text_reveal is None
    assert timeline.segments[1].complementary.speed is None


def test_inbound_durations_use_given_config():
    config = TimingConfig(max_segment_ms=20000)
    assert segment_from_dict({"animation": "talking", "duration": 16315}, config).duration == 16315
    assert segment_from_dict({"animation": "talking", "duration": 16315}).duration == 10000


def test_timeline_start_delay_never_negative():
    timeline = CharacterTimeline(actor_id="freud", content="", segments=[AnimationSegment("idle", 1000)], start_delay=-50)
    assert timeline.start_delay == 0
    assert isinstance(timeline.segments, tuple)
    assert timeline.end_time == 1000


def test_scene_dict_round_trip():
    raw = '{"s":{"ch":[{"c":"freud","t":"Hello. How are you?","ord":1,"ex":"happy","v":{"p":"low"}},{"c":"jung","t":"Fine.","ord":2}]}}'
    scene = orchestrate(raw, ROSTER, rng=random.Random(3)).scene
    data = scene.to_dict()
    assert data["sceneDuration"] == scene.scene_duration
    assert scene_from_dict(data).to_dict() == data


def test_scene_from_dict_infers_roster():
    scene = scene_from_dict(
        {
            "timelines": [{"characterId": "jung", "content": "Hi.", "segments": [{"animation": "talking", "duration": 900}]}],
            "nonSpeakerBehavior": {"adler": {"characterId": "adler", "segments": [{"animation": "idle", "duration": 900}]}},
        }
    )
    assert scene.roster.actor_ids == ("jung", "adler")
    assert isinstance(scene, OrchestrationScene)


def test_scene_warning_str():
    assert str(SceneWarning("validating", "field_fallback", "m", actor_id="freud", value="x")) == "field_fallback:freud:x"
    assert str(SceneWarning("decoding", "structural", "m")) == "structural"
