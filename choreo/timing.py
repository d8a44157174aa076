"""Turn text plus a speed qualifier into timed segments."""
from __future__ import annotations

import random
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, SpeedQualifier, TimingConfig
from .diagnostics import Diagnostics
from .models import AnimationSegment, Complementary, FacialState, TextReveal, VoiceHint
from .vocabulary import closest_animation, normalize_token

STAGE = "timing"

_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")


@dataclass(frozen=True)
class TurnStyle:
    """Validated per-turn settings applied to every segment of a turn."""

    animation: str = "talking"
    facial: FacialState = field(default_factory=FacialState)
    look: Optional[str] = None
    effect: Optional[str] = None
    speed: SpeedQualifier = SpeedQualifier.NORMAL
    expression: Optional[str] = None
    voice: Optional[VoiceHint] = None


def parse_speed(value: Optional[str], diagnostics: Optional[Diagnostics] = None, actor_id: Optional[str] = None) -> SpeedQualifier:
    token = normalize_token(value)
    if not token:
        return SpeedQualifier.NORMAL
    try:
        return SpeedQualifier(token)
    except ValueError:
        if diagnostics is not None:
            diagnostics.warn(STAGE, "unknown_speed", f'unknown speed "{value}", using normal', actor_id=actor_id, field="speed", value=value)
        return SpeedQualifier.NORMAL


def split_sentences(text: str) -> List[str]:
    sentences = [m.strip() for m in _SENTENCE_RE.findall(text or "")]
    return [s for s in sentences if s]


def talking_duration(sentence: str, speed: SpeedQualifier, config: TimingConfig = DEFAULT_CONFIG) -> int:
    raw = round(len(sentence) * config.base_ms_per_char * config.speed_multiplier(speed))
    return config.clamp(max(config.min_segment_ms, raw))


def pause_duration(speed: SpeedQualifier, rng: random.Random, config: TimingConfig = DEFAULT_CONFIG) -> int:
    low, high = config.pause_range_ms
    return config.clamp(rng.uniform(low, high) * config.speed_multiplier(speed))


def non_talking_duration(animation: str, speed: SpeedQualifier, config: TimingConfig = DEFAULT_CONFIG) -> int:
    base = config.animation_durations_ms.get(animation, config.default_animation_ms)
    return config.clamp(base * config.speed_multiplier(speed))


def _complementary(style: TurnStyle, config: TimingConfig, with_effect: bool) -> Complementary:
    effect = style.effect if with_effect and style.effect not in (None, "none") else None
    return Complementary(
        look_direction=style.look,
        facial=style.facial,
        effect=effect,
        speed=config.playback_speed(style.speed),
        expression=style.expression,
    )


def _gesture_animation(caption: str, declared: str) -> str:
    matched = closest_animation(caption)
    if matched:
        return matched
    if declared not in ("talking", "idle"):
        return declared
    return "idle"


def build_turn_segments(
    text: str,
    style: TurnStyle,
    config: TimingConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
    actions: Sequence[str] = (),
) -> Tuple[str, Tuple[AnimationSegment, ...]]:
    """Return ``(content, segments)`` for one turn.

    ``content`` is the sentences joined with newlines; each sentence gets a
    talking segment whose reveal range covers it, with a randomized idle pause
    between sentences.
    """
    rng = rng or random.Random()
    sentences = split_sentences(text)
    segments: List[AnimationSegment] = []

    if actions:
        gesture = _gesture_animation(actions[0], style.animation)
        segments.append(
            AnimationSegment(
                animation=gesture,
                duration=non_talking_duration(gesture, style.speed, config),
                complementary=_complementary(style, config, with_effect=False),
                action_text=actions[0],
            )
        )

    if not sentences:
        animation = style.animation if style.animation != "talking" else "idle"
        if not segments:
            segments.append(
                AnimationSegment(
                    animation=animation,
                    duration=non_talking_duration(animation, style.speed, config),
                    complementary=_complementary(style, config, with_effect=True),
                )
            )
        return "", tuple(segments)

    content = "\n".join(sentences)
    position = 0
    for i, sentence in enumerate(sentences):
        if i > 0:
            segments.append(
                AnimationSegment(
                    animation="idle",
                    duration=pause_duration(style.speed, rng, config),
                    complementary=_complementary(style, config, with_effect=False),
                )
            )
        end = position + len(sentence)
        segments.append(
            AnimationSegment(
                animation=style.animation,
                duration=talking_duration(sentence, style.speed, config),
                is_talking=True,
                complementary=_complementary(style, config, with_effect=i == 0),
                text_reveal=TextReveal(position, end),
                voice=style.voice,
            )
        )
        # one extra character for the inserted line break
        position = end + 1
    return content, tuple(segments)


def repair_text_ranges(segments: Sequence[AnimationSegment], content_length: int) -> Tuple[AnimationSegment, ...]:
    """Make talking reveal ranges contiguous and cover ``[0, content_length)``."""
    result = list(segments)
    talking = [i for i, seg in enumerate(result) if seg.is_talking]
    if not talking:
        if result:
            result[0] = replace(result[0], text_reveal=TextReveal(0, content_length))
        return tuple(result)

    if not any(result[i].text_reveal for i in talking):
        per_segment = -(-content_length // len(talking))
        cursor = 0
        for i in talking:
            end = min(cursor + per_segment, content_length)
            result[i] = replace(result[i], text_reveal=TextReveal(cursor, end))
            cursor = end
    else:
        last_end = 0
        for i in talking:
            reveal = result[i].text_reveal
            if reveal is None:
                reveal = TextReveal(last_end, last_end)
            end = max(last_end, min(reveal.end, content_length))
            result[i] = replace(result[i], text_reveal=TextReveal(last_end, end))
            last_end = end

    last = talking[-1]
    reveal = result[last].text_reveal
    if reveal.end != content_length:
        result[last] = replace(result[last], text_reveal=TextReveal(reveal.start, content_length))
    return tuple(result)


def default_segments(content: str, config: TimingConfig = DEFAULT_CONFIG) -> Tuple[AnimationSegment, ...]:
    """Thinking, one talking segment revealing everything, then a smiling idle."""
    return (
        AnimationSegment(
            animation="thinking",
            duration=config.clamp(config.default_thinking_ms),
            complementary=Complementary(look_direction="up"),
        ),
        AnimationSegment(
            animation="talking",
            duration=config.clamp(max(2000, len(content) * config.base_ms_per_char)),
            is_talking=True,
            text_reveal=TextReveal(0, len(content)),
        ),
        AnimationSegment(
            animation="idle",
            duration=config.clamp(config.default_animation_ms),
            complementary=Complementary(facial=FacialState(mouth_state="smile")),
        ),
    )
