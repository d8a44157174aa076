"""Value objects handed to the renderer.

Everything here is immutable after construction; stages build new records
with ``dataclasses.replace`` instead of mutating. ``to_dict`` emits the
renderer's camelCase wire shape and the ``*_from_dict`` helpers read it back.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import DEFAULT_CONFIG, TimingConfig


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


FACIAL_FIELDS: Tuple[str, ...] = (
    "eye_state",
    "eyebrow_state",
    "mouth_state",
    "face_state",
    "nose_state",
    "cheek_state",
    "forehead_state",
    "jaw_state",
)

_WIRE_NAMES = {
    "eye_state": "eyeState",
    "eyebrow_state": "eyebrowState",
    "mouth_state": "mouthState",
    "face_state": "faceState",
    "nose_state": "noseState",
    "cheek_state": "cheekState",
    "forehead_state": "foreheadState",
    "jaw_state": "jawState",
}


@dataclass(frozen=True)
class FacialState:
    eye_state: Optional[str] = None
    eyebrow_state: Optional[str] = None
    mouth_state: Optional[str] = None
    face_state: Optional[str] = None
    nose_state: Optional[str] = None
    cheek_state: Optional[str] = None
    forehead_state: Optional[str] = None
    jaw_state: Optional[str] = None

    def merged_over(self, base: "FacialState") -> "FacialState":
        """Layer this bundle's set fields over ``base``."""
        values = {}
        for name in FACIAL_FIELDS:
            own = getattr(self, name)
            values[name] = own if own is not None else getattr(base, name)
        return FacialState(**values)

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in FACIAL_FIELDS)

    def to_dict(self) -> Dict[str, str]:
        return {_WIRE_NAMES[name]: getattr(self, name) for name in FACIAL_FIELDS if getattr(self, name) is not None}


@dataclass(frozen=True)
class VoiceHint:
    pitch: Optional[str] = None
    tone: Optional[str] = None
    volume: Optional[str] = None
    pace: Optional[str] = None
    mood: Optional[str] = None
    intent: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class Complementary:
    look_direction: Optional[str] = None
    facial: FacialState = field(default_factory=FacialState)
    effect: Optional[str] = None
    speed: Optional[float] = None
    expression: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.look_direction is None
            and self.facial.is_empty()
            and self.effect is None
            and self.speed is None
            and self.expression is None
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.look_direction is not None:
            out["lookDirection"] = self.look_direction
        out.update(self.facial.to_dict())
        if self.effect is not None:
            out["effect"] = self.effect
        if self.speed is not None:
            out["speed"] = self.speed
        if self.expression is not None:
            out["expression"] = self.expression
        return out


@dataclass(frozen=True)
class TextReveal:
    start: int
    end: int

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class AnimationSegment:
    animation: str
    duration: int
    is_talking: bool = False
    complementary: Complementary = field(default_factory=Complementary)
    text_reveal: Optional[TextReveal] = None
    voice: Optional[VoiceHint] = None
    action_text: Optional[str] = None

    def __post_init__(self) -> None:
        # stages clamp with their own TimingConfig
        if not _is_finite_number(self.duration):
            raise ValueError(f"segment duration must be a finite number, got {self.duration!r}")
        object.__setattr__(self, "duration", int(round(self.duration)))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "animation": self.animation,
            "duration": self.duration,
            "isTalking": self.is_talking,
        }
        if not self.complementary.is_empty():
            out["complementary"] = self.complementary.to_dict()
        if self.text_reveal is not None:
            out["textReveal"] = self.text_reveal.to_dict()
        if self.voice is not None:
            out["voice"] = self.voice.to_dict()
        if self.action_text:
            out["actionText"] = self.action_text
        return out


@dataclass(frozen=True)
class CharacterTimeline:
    actor_id: str
    content: str
    segments: Tuple[AnimationSegment, ...] = ()
    start_delay: int = 0
    is_interruption: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))
        object.__setattr__(self, "start_delay", max(0, int(self.start_delay)))

    @property
    def total_duration(self) -> int:
        return sum(seg.duration for seg in self.segments)

    @property
    def end_time(self) -> int:
        return self.start_delay + self.total_duration

    def talking_segments(self) -> List[AnimationSegment]:
        return [seg for seg in self.segments if seg.is_talking]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "characterId": self.actor_id,
            "content": self.content,
            "totalDuration": self.total_duration,
            "startDelay": self.start_delay,
            "isInterruption": self.is_interruption,
            "segments": [seg.to_dict() for seg in self.segments],
        }


def _normalize_name(value: str) -> str:
    return "_".join(value.lower().split())


@dataclass(frozen=True)
class Roster:
    """Ordered actor ids (seating order) plus display names."""

    actor_ids: Tuple[str, ...]
    display_names: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "actor_ids", tuple(self.actor_ids))
        object.__setattr__(self, "display_names", MappingProxyType(dict(self.display_names)))

    def __contains__(self, actor_id: object) -> bool:
        return actor_id in self.actor_ids

    def __len__(self) -> int:
        return len(self.actor_ids)

    def index_of(self, actor_id: str) -> int:
        return self.actor_ids.index(actor_id) if actor_id in self.actor_ids else -1

    def display_name(self, actor_id: str) -> str:
        return self.display_names.get(actor_id) or actor_id

    def resolve(self, reference: Optional[str]) -> Optional[str]:
        """Map a model-written actor reference onto a roster id, or None."""
        if not reference or not reference.strip():
            return None
        ref = reference.strip()
        if ref in self.actor_ids:
            return ref
        lowered = _normalize_name(ref)
        for actor_id in self.actor_ids:
            if actor_id.lower() == lowered:
                return actor_id
        for actor_id in self.actor_ids:
            name = self.display_names.get(actor_id)
            if name and _normalize_name(name) == lowered:
                return actor_id
        for actor_id in self.actor_ids:
            name = self.display_names.get(actor_id)
            if name and lowered == _normalize_name(name).split("_")[-1]:
                return actor_id
        if len(lowered) < 3:
            return None
        for actor_id in self.actor_ids:
            candidate = actor_id.lower()
            if lowered in candidate or candidate in lowered:
                return actor_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"actorIds": list(self.actor_ids), "displayNames": dict(self.display_names)}


@dataclass(frozen=True)
class OrchestrationScene:
    timelines: Tuple[CharacterTimeline, ...]
    roster: Roster
    non_speaker_behavior: Mapping[str, CharacterTimeline] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timelines", tuple(self.timelines))
        object.__setattr__(self, "non_speaker_behavior", MappingProxyType(dict(self.non_speaker_behavior)))

    @property
    def scene_duration(self) -> int:
        if not self.timelines:
            return 0
        return max(t.end_time for t in self.timelines)

    def speaker_ids(self) -> List[str]:
        return [t.actor_id for t in self.timelines]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timelines": [t.to_dict() for t in self.timelines],
            "sceneDuration": self.scene_duration,
            "nonSpeakerBehavior": {k: v.to_dict() for k, v in self.non_speaker_behavior.items()},
            "roster": self.roster.to_dict(),
        }


@dataclass(frozen=True)
class SceneWarning:
    stage: str
    code: str
    message: str
    actor_id: Optional[str] = None
    field: Optional[str] = None
    value: Optional[str] = None
    level: str = "warning"

    def __str__(self) -> str:
        detail = self.actor_id or self.field or ""
        if self.value is not None:
            detail = f"{detail}:{self.value}" if detail else str(self.value)
        return f"{self.code}:{detail}" if detail else self.code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "code": self.code,
            "message": self.message,
            "actorId": self.actor_id,
            "field": self.field,
            "value": self.value,
            "level": self.level,
        }


@dataclass(frozen=True)
class OrchestrationResult:
    scene: Optional[OrchestrationScene]
    warnings: Tuple[SceneWarning, ...] = ()
    reasoning: Optional[Dict[str, Any]] = None
    fallback_used: bool = False

    def codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scene": self.scene.to_dict() if self.scene is not None else None,
            "warnings": [w.to_dict() for w in self.warnings],
            "reasoning": self.reasoning,
            "fallbackUsed": self.fallback_used,
        }


# ---------------------------------------------------------------------------
# Inbound (renderer/tool-server) shape
# ---------------------------------------------------------------------------


def segment_from_dict(data: Mapping[str, Any], config: TimingConfig = DEFAULT_CONFIG) -> AnimationSegment:
    comp = data.get("complementary") or {}
    facial = FacialState(**{name: _opt_str(comp.get(wire)) for name, wire in _WIRE_NAMES.items()})
    speed = comp.get("speed")
    complementary = Complementary(
        look_direction=_opt_str(comp.get("lookDirection")),
        facial=facial,
        effect=_opt_str(comp.get("effect")),
        speed=float(speed) if _is_finite_number(speed) else None,
        expression=_opt_str(comp.get("expression")),
    )
    reveal = data.get("textReveal")
    text_reveal = None
    if isinstance(reveal, Mapping):
        start = reveal.get("start", reveal.get("startIndex"))
        end = reveal.get("end", reveal.get("endIndex"))
        if _is_finite_number(start) and _is_finite_number(end):
            text_reveal = TextReveal(int(start), int(end))
    voice_data = data.get("voice")
    voice = VoiceHint(**{k: _opt_str(voice_data.get(k)) for k in VoiceHint.__dataclass_fields__}) if isinstance(voice_data, Mapping) else None
    duration = data.get("duration")
    if not _is_finite_number(duration):
        duration = config.default_thinking_ms
    return AnimationSegment(
        animation=str(data.get("animation") or "idle"),
        duration=config.clamp(duration),
        is_talking=bool(data.get("isTalking")),
        complementary=complementary,
        text_reveal=text_reveal,
        voice=voice,
        action_text=_opt_str(data.get("actionText")),
    )


def timeline_from_dict(data: Mapping[str, Any], config: TimingConfig = DEFAULT_CONFIG) -> CharacterTimeline:
    segments = [segment_from_dict(s, config) for s in data.get("segments") or [] if isinstance(s, Mapping)]
    start_delay = data.get("startDelay") or 0
    return CharacterTimeline(
        actor_id=str(data.get("characterId") or ""),
        content=str(data.get("content") or ""),
        segments=tuple(segments),
        start_delay=int(start_delay) if _is_finite_number(start_delay) else 0,
        is_interruption=bool(data.get("isInterruption")),
    )


def scene_from_dict(data: Mapping[str, Any], config: TimingConfig = DEFAULT_CONFIG) -> OrchestrationScene:
    roster_data = data.get("roster") or {}
    timelines = [timeline_from_dict(t, config) for t in data.get("timelines") or [] if isinstance(t, Mapping)]
    behavior = {
        str(actor_id): timeline_from_dict(t, config)
        for actor_id, t in (data.get("nonSpeakerBehavior") or {}).items()
        if isinstance(t, Mapping)
    }
    actor_ids: Iterable[str] = roster_data.get("actorIds") or _ids_in_order(timelines, behavior)
    roster = Roster(tuple(str(a) for a in actor_ids), dict(roster_data.get("displayNames") or {}))
    return OrchestrationScene(timelines=tuple(timelines), roster=roster, non_speaker_behavior=behavior)


def _ids_in_order(timelines: List[CharacterTimeline], behavior: Mapping[str, CharacterTimeline]) -> List[str]:
    ids: List[str] = []
    for actor_id in [t.actor_id for t in timelines] + list(behavior):
        if actor_id and actor_id not in ids:
            ids.append(actor_id)
    return ids


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
