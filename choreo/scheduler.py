"""Start offsets for each turn, plus repair of merged multi-actor turns."""
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, TimingConfig
from .decoder import RawDirective
from .diagnostics import Diagnostics
from .models import CharacterTimeline, Roster
from .text_cleaning import name_headers, split_on_name_headers

STAGE = "scheduling"


def split_combined_directives(
    directives: Sequence[RawDirective],
    roster: Roster,
    diagnostics: Optional[Diagnostics] = None,
) -> List[RawDirective]:
    """Expand entries whose text holds several ``[Name]:`` headers.

    Each fragment becomes its own directive at the parent's ordering
    position; text before the first header stays with the parent actor.
    """
    result: List[RawDirective] = []
    for directive in directives:
        text = directive.text or ""
        if len(name_headers(text)) < 2:
            result.append(directive)
            continue
        if diagnostics is not None:
            diagnostics.warn(
                STAGE,
                "unsplit_combined_text",
                f"splitting turn with {len(name_headers(text))} speaker headers",
                actor_id=directive.actor,
            )
        fragments: List[RawDirective] = []
        for name, fragment in split_on_name_headers(text):
            if not fragment:
                continue
            actor_id = roster.resolve(name) if name else roster.resolve(directive.actor)
            if actor_id is None:
                if diagnostics is not None:
                    diagnostics.warn(
                        STAGE,
                        "unresolved_actor",
                        f'dropping fragment for unknown speaker "{name or directive.actor}"',
                        value=name or directive.actor,
                    )
                continue
            fragments.append(
                replace(directive, actor=actor_id, text=fragment, interrupt=directive.interrupt and not fragments)
            )
        result.extend(fragments)
    return result


def assign_start_delays(
    timelines: Sequence[CharacterTimeline],
    config: TimingConfig = DEFAULT_CONFIG,
) -> List[CharacterTimeline]:
    """Timelines are given in speaking order."""
    scheduled: List[CharacterTimeline] = []
    previous_end = 0
    for i, timeline in enumerate(timelines):
        if i == 0:
            delay = 0
        elif timeline.is_interruption:
            delay = max(0, previous_end - config.overlap_ms)
        else:
            delay = previous_end + config.min_turn_gap_ms
        timeline = replace(timeline, start_delay=delay)
        scheduled.append(timeline)
        previous_end = timeline.end_time
    return scheduled


def enforce_turn_gaps(
    timelines: Sequence[CharacterTimeline],
    config: TimingConfig = DEFAULT_CONFIG,
) -> List[CharacterTimeline]:
    """Push regular turns forward so none starts inside the previous one's gap.

    Interrupting turns are left where they are. Output keeps input order.
    """
    result = list(timelines)
    regular = sorted(
        (i for i, t in enumerate(result) if not t.is_interruption),
        key=lambda i: (result[i].start_delay, i),
    )
    previous_end: Optional[int] = None
    for i in regular:
        timeline = result[i]
        if previous_end is not None and timeline.start_delay < previous_end + config.min_turn_gap_ms:
            timeline = replace(timeline, start_delay=previous_end + config.min_turn_gap_ms)
            result[i] = timeline
        previous_end = timeline.end_time
    return result
