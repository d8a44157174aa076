"""Listening and reacting timelines for actors without a turn."""
from __future__ import annotations

import random
import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, TimingConfig
from .models import AnimationSegment, CharacterTimeline, Complementary, FacialState, Roster


@dataclass(frozen=True)
class SpeakerEvent:
    actor_id: str
    start: int
    end: int
    content: str


@dataclass
class _Piece:
    duration: int
    segment: AnimationSegment


def speaker_events(timelines: Sequence[CharacterTimeline]) -> List[SpeakerEvent]:
    events = [SpeakerEvent(t.actor_id, t.start_delay, t.end_time, t.content) for t in timelines]
    # sorted() is stable, so equal starts keep declared order
    return sorted(events, key=lambda e: e.start)


def gaze_toward(speaker_id: str, listener_id: str, roster: Roster) -> str:
    speaker_index = roster.index_of(speaker_id)
    listener_index = roster.index_of(listener_id)
    if speaker_index < listener_index:
        return "at_left_character"
    if speaker_index > listener_index:
        return "at_right_character"
    return "center"


def _mentions(name: str, text: str) -> bool:
    return re.search(r"\b" + re.escape(name) + r"\b", text, re.IGNORECASE) is not None


def is_mentioned(display_name: str, text: str) -> bool:
    """Whole-word, case-insensitive match on the full or first name."""
    name = " ".join((display_name or "").split())
    if not name:
        return False
    content = text or ""
    if _mentions(name, content):
        return True
    first_name = name.split()[0]
    return len(first_name) > 2 and _mentions(first_name, content)


def _normalize(pieces: List[_Piece], config: TimingConfig) -> List[AnimationSegment]:
    """Fold short pieces into a neighbour, then chunk long ones at the ceiling.

    The duration total is preserved exactly.
    """
    merged: List[_Piece] = []
    carry = 0
    for piece in pieces:
        duration = piece.duration + carry
        carry = 0
        if duration <= 0:
            continue
        if duration < config.min_segment_ms:
            if merged:
                merged[-1].duration += duration
            else:
                carry = duration
            continue
        merged.append(_Piece(duration, piece.segment))
    if carry:
        merged.append(_Piece(carry, AnimationSegment(animation="idle", duration=carry)))

    segments: List[AnimationSegment] = []
    for piece in merged:
        count = -(-piece.duration // config.max_segment_ms)
        base, extra = divmod(piece.duration, count)
        for n in range(count):
            segments.append(replace(piece.segment, duration=base + (1 if n < extra else 0)))
    return segments


def build_reaction_timeline(
    actor_id: str,
    timelines: Sequence[CharacterTimeline],
    roster: Roster,
    scene_duration: int,
    config: TimingConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
) -> CharacterTimeline:
    rng = rng or random.Random()
    low, high = config.reaction_chunk_ms
    display_name = roster.display_name(actor_id)
    pieces: List[_Piece] = []
    cursor = 0

    for event in speaker_events(timelines):
        if event.start > cursor:
            eye = "blink" if rng.random() < config.gap_blink_chance else "open"
            gap = event.start - cursor
            pieces.append(_Piece(gap, AnimationSegment("idle", gap, complementary=Complementary(facial=FacialState(eye_state=eye)))))
            cursor = event.start
        if event.end <= cursor:
            continue

        look = gaze_toward(event.actor_id, actor_id, roster)
        mentioned = is_mentioned(display_name, event.content)
        first = True
        while cursor < event.end:
            duration = min(event.end - cursor, int(round(rng.uniform(low, high))))
            animation = "idle"
            mouth = None
            if mentioned and first:
                animation = "lean_forward"
                mouth = "smile"
            elif rng.random() < config.nod_chance:
                animation = "nod"
            elif rng.random() < config.smile_chance:
                mouth = "smile"
            eye = "blink" if rng.random() < config.reaction_blink_chance else "open"
            complementary = Complementary(look_direction=look, facial=FacialState(eye_state=eye, mouth_state=mouth))
            pieces.append(_Piece(duration, AnimationSegment(animation, duration, complementary=complementary)))
            cursor += duration
            first = False

    if cursor < scene_duration:
        trailing = scene_duration - cursor
        pieces.append(_Piece(trailing, AnimationSegment("idle", trailing)))

    return CharacterTimeline(
        actor_id=actor_id,
        content="",
        segments=tuple(_normalize(pieces, config)),
        start_delay=0,
    )


def fill_non_speakers(
    timelines: Sequence[CharacterTimeline],
    roster: Roster,
    scene_duration: int,
    config: TimingConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
) -> Dict[str, CharacterTimeline]:
    rng = rng or random.Random()
    speakers = {t.actor_id for t in timelines}
    return {
        actor_id: build_reaction_timeline(actor_id, timelines, roster, scene_duration, config, rng)
        for actor_id in roster.actor_ids
        if actor_id not in speakers
    }
