"""Timing constants injected into the scheduling stages."""
from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple


class SpeedQualifier(enum.Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"
    EXPLOSIVE = "explosive"


_DEFAULT_ANIMATION_DURATIONS: Mapping[str, int] = MappingProxyType(
    {
        "idle": 1000,
        "thinking": 1500,
        "talking": 1000,
        "wave": 1200,
        "nod": 800,
        "shake_head": 900,
        "shrug": 1000,
        "bow": 1400,
        "clap": 1200,
        "point": 900,
        "jump": 900,
        "surprise_jump": 1000,
        "surprise_happy": 1100,
        "lean_forward": 1000,
        "lean_back": 1000,
        "cross_arms": 1200,
        "facepalm": 1300,
        "laugh": 1600,
        "cry": 2000,
        "dance": 2400,
        "celebrate": 2000,
        "winning": 1800,
        "stretch": 1800,
        "yawn": 1600,
        "doze": 2500,
        "peek": 1200,
        "head_tilt": 900,
        "chin_stroke": 1500,
    }
)

_DEFAULT_SPEED_MULTIPLIERS: Mapping[str, float] = MappingProxyType(
    {"slow": 1.3, "normal": 1.0, "fast": 0.7, "explosive": 0.5}
)

# Renderer playback rate; faster qualifiers play gestures faster.
_DEFAULT_PLAYBACK_SPEEDS: Mapping[str, float] = MappingProxyType(
    {"slow": 0.75, "normal": 1.0, "fast": 1.35, "explosive": 1.75}
)


@dataclass(frozen=True)
class TimingConfig:
    min_segment_ms: int = 300
    max_segment_ms: int = 10000
    base_ms_per_char: float = 65.0
    default_thinking_ms: int = 1500
    pause_range_ms: Tuple[int, int] = (700, 2000)
    min_turn_gap_ms: int = 500
    overlap_ms: int = 400
    reaction_chunk_ms: Tuple[int, int] = (2000, 3000)
    gap_blink_chance: float = 0.3
    reaction_blink_chance: float = 0.15
    nod_chance: float = 0.2
    smile_chance: float = 0.1
    default_animation_ms: int = 1000
    animation_durations_ms: Mapping[str, int] = field(default_factory=lambda: _DEFAULT_ANIMATION_DURATIONS)
    speed_multipliers: Mapping[str, float] = field(default_factory=lambda: _DEFAULT_SPEED_MULTIPLIERS)
    playback_speeds: Mapping[str, float] = field(default_factory=lambda: _DEFAULT_PLAYBACK_SPEEDS)

    @classmethod
    def from_env(cls) -> "TimingConfig":
        return cls(
            min_segment_ms=int(os.getenv("CHOREO_MIN_SEGMENT_MS", "300")),
            max_segment_ms=int(os.getenv("CHOREO_MAX_SEGMENT_MS", "10000")),
            base_ms_per_char=float(os.getenv("CHOREO_BASE_MS_PER_CHAR", "65")),
            default_thinking_ms=int(os.getenv("CHOREO_THINKING_MS", "1500")),
            pause_range_ms=(
                int(os.getenv("CHOREO_PAUSE_MIN_MS", "700")),
                int(os.getenv("CHOREO_PAUSE_MAX_MS", "2000")),
            ),
            min_turn_gap_ms=int(os.getenv("CHOREO_MIN_TURN_GAP_MS", "500")),
            overlap_ms=int(os.getenv("CHOREO_OVERLAP_MS", "400")),
            reaction_chunk_ms=(
                int(os.getenv("CHOREO_REACTION_MIN_MS", "2000")),
                int(os.getenv("CHOREO_REACTION_MAX_MS", "3000")),
            ),
            default_animation_ms=int(os.getenv("CHOREO_DEFAULT_ANIMATION_MS", "1000")),
        )

    def with_overrides(self, **changes) -> "TimingConfig":
        return replace(self, **changes)

    def clamp(self, duration_ms: float) -> int:
        return int(max(self.min_segment_ms, min(self.max_segment_ms, round(duration_ms))))

    def speed_multiplier(self, speed: SpeedQualifier) -> float:
        return float(self.speed_multipliers.get(speed.value, 1.0))

    def playback_speed(self, speed: SpeedQualifier) -> float:
        return float(self.playback_speeds.get(speed.value, 1.0))


DEFAULT_CONFIG = TimingConfig()
