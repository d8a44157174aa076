from __future__ import annotations

import random

import pytest

from choreo.config import TimingConfig
from choreo.models import AnimationSegment, CharacterTimeline, Roster
from choreo.reactions import build_reaction_timeline, fill_non_speakers, gaze_toward, is_mentioned

ROSTER = Roster(("freud", "jung", "adler"), {"freud": "Sigmund Freud", "jung": "Carl Jung", "adler": "Alfred Adler"})


def _timeline(actor_id, duration, start, content="Hello there."):
    return CharacterTimeline(
        actor_id=actor_id,
        content=content,
        segments=(AnimationSegment("talking", duration, is_talking=True),),
        start_delay=start,
    )


def test_gaze_follows_seating_order():
    assert gaze_toward("freud", "jung", ROSTER) == "at_left_character"
    assert gaze_toward("adler", "jung", ROSTER) == "at_right_character"
    assert gaze_toward("jung", "jung", ROSTER) == "center"


def test_is_mentioned_full_and_first_name():
    assert is_mentioned("Carl Jung", "What do you think, carl jung?")
    assert is_mentioned("Carl Jung", "Carl, your view?")
    assert not is_mentioned("Al Bo", "also")
    assert not is_mentioned("Carl Jung", "Scarlett thinks otherwise.")
    assert is_mentioned("Carl Jung", "Ask CARL.")
    assert not is_mentioned("", "anything")


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_reaction_spans_scene_and_respects_bounds(seed):
    config = TimingConfig()
    timelines = [_timeline("freud", 7300, 0), _timeline("adler", 4100, 7800)]
    reaction = build_reaction_timeline("jung", timelines, ROSTER, 11900, config, random.Random(seed))
    assert reaction.total_duration == 11900
    assert reaction.start_delay == 0
    assert reaction.content == ""
    assert all(config.min_segment_ms <= s.duration <= config.max_segment_ms for s in reaction.segments)
    assert not any(s.is_talking for s in reaction.segments)


def test_mention_triggers_lean_forward():
    timelines = [_timeline("freud", 3000, 0, content="Carl, tell us about dreams.")]
    reaction = build_reaction_timeline("jung", timelines, ROSTER, 3000, TimingConfig(), random.Random(5))
    first = reaction.segments[0]
    assert first.animation == "lean_forward"
    assert first.complementary.facial.mouth_state == "smile"
    assert first.complementary.look_direction == "at_left_character"


def test_leading_gap_and_long_trailing_idle_are_chunked():
    config = TimingConfig()
    timelines = [_timeline("freud", 1000, 1200)]
    reaction = build_reaction_timeline("jung", timelines, ROSTER, 25000, config, random.Random(2))
    assert reaction.segments[0].animation == "idle"
    assert reaction.segments[0].duration == 1200
    assert reaction.total_duration == 25000
    assert all(s.duration <= config.max_segment_ms for s in reaction.segments)


def test_overlapping_interruption_is_not_double_counted():
    timelines = [_timeline("freud", 5000, 0), _timeline("adler", 3000, 4600)]
    reaction = build_reaction_timeline("jung", timelines, ROSTER, 7600, TimingConfig(), random.Random(9))
    assert reaction.total_duration == 7600


def test_fill_non_speakers_covers_every_silent_actor():
    timelines = [_timeline("freud", 2000, 0)]
    behavior = fill_non_speakers(timelines, ROSTER, 2000, TimingConfig(), random.Random(1))
    assert sorted(behavior) == ["adler", "jung"]
    assert all(t.total_duration == 2000 for t in behavior.values())
