from __future__ import annotations

from choreo.config import TimingConfig
from choreo.decoder import RawDirective
from choreo.diagnostics import Diagnostics
from choreo.models import AnimationSegment, CharacterTimeline, Roster
from choreo.scheduler import assign_start_delays, enforce_turn_gaps, split_combined_directives

ROSTER = Roster(("freud", "jung", "adler"), {"freud": "Sigmund Freud", "jung": "Carl Jung", "adler": "Alfred Adler"})


def _timeline(actor_id, duration, start=0, interrupt=False):
    return CharacterTimeline(
        actor_id=actor_id,
        content="x",
        segments=(AnimationSegment("talking", duration, is_talking=True),),
        start_delay=start,
        is_interruption=interrupt,
    )


def test_first_regular_and_interrupting_delays():
    config = TimingConfig()
    scheduled = assign_start_delays(
        [_timeline("freud", 2000), _timeline("jung", 1000), _timeline("adler", 1500, interrupt=True)],
        config,
    )
    assert [t.start_delay for t in scheduled] == [0, 2500, 3100]


def test_interrupt_never_starts_before_zero():
    config = TimingConfig(overlap_ms=5000)
    scheduled = assign_start_delays([_timeline("freud", 1000), _timeline("jung", 1000, interrupt=True)], config)
    assert scheduled[1].start_delay == 0


def test_enforce_turn_gaps_pushes_regular_turns_only():
    timelines = [
        _timeline("freud", 2000, start=0),
        _timeline("jung", 1000, start=1000),
        _timeline("adler", 1000, start=1500, interrupt=True),
    ]
    enforced = enforce_turn_gaps(timelines, TimingConfig())
    assert [t.actor_id for t in enforced] == ["freud", "jung", "adler"]
    assert enforced[1].start_delay == 2500
    assert enforced[2].start_delay == 1500


def test_split_combined_directives():
    diagnostics = Diagnostics()
    directive = RawDirective(
        index=0,
        actor="freud",
        text="[Sigmund Freud]: Dreams matter. [Carl Jung]: Symbols matter more. [Nobody]: Hi.",
        animation="talking",
        interrupt=True,
    )
    split = split_combined_directives([directive], ROSTER, diagnostics)
    assert [(d.actor, d.text) for d in split] == [("freud", "Dreams matter."), ("jung", "Symbols matter more.")]
    assert [d.interrupt for d in split] == [True, False]
    assert all(d.animation == "talking" and d.index == 0 for d in split)
    assert diagnostics.codes() == ["unsplit_combined_text", "unresolved_actor"]


def test_single_header_is_left_alone():
    directive = RawDirective(index=0, actor="freud", text="[Freud]: Just me.")
    assert split_combined_directives([directive], ROSTER) == [directive]
