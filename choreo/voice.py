"""Per-turn voice annotations passed through to the speech collaborator."""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .diagnostics import Diagnostics
from .models import VoiceHint
from .vocabulary import normalize_token

PITCHES: Tuple[str, ...] = ("high", "medium", "low", "deep", "shrill")
TONES: Tuple[str, ...] = (
    "smooth", "warm", "crisp", "gravelly", "breathy", "nasally", "husky", "brassy", "raspy", "silky",
)
VOLUMES: Tuple[str, ...] = ("whispered", "soft", "normal", "loud", "booming")
PACES: Tuple[str, ...] = ("slow", "normal", "fast")
MOODS: Tuple[str, ...] = (
    "neutral", "angry", "sad", "joyful", "sarcastic", "nervous", "confident",
    "excited", "calm", "melancholic", "hopeful", "frustrated", "amused",
)
INTENTS: Tuple[str, ...] = (
    "neutral", "commanding", "pleading", "seductive", "mocking", "reassuring",
    "questioning", "explaining", "warning", "encouraging", "dismissive", "sincere",
)

# field -> (accepted keys, vocabulary); compact key first
_VOICE_FIELDS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    "pitch": (("p", "pitch"), PITCHES),
    "tone": (("t", "tone"), TONES),
    "volume": (("vol", "volume"), VOLUMES),
    "pace": (("pace",), PACES),
    "mood": (("mood",), MOODS),
    "intent": (("int", "intent"), INTENTS),
}

# Renderer TTS rate for each pace.
PACE_RATES: Dict[str, float] = {"slow": 0.8, "normal": 1.0, "fast": 1.3}


def parse_voice_hint(
    data: Any,
    diagnostics: Optional[Diagnostics] = None,
    actor_id: Optional[str] = None,
) -> Optional[VoiceHint]:
    if not isinstance(data, dict):
        return None
    values: Dict[str, str] = {}
    for name, (keys, vocabulary) in _VOICE_FIELDS.items():
        raw = next((data[k] for k in keys if data.get(k)), None)
        if raw is None:
            continue
        token = normalize_token(str(raw))
        if token in vocabulary:
            values[name] = token
        elif diagnostics is not None:
            diagnostics.warn(
                "validating",
                "invalid_voice_hint",
                f'dropping voice {name} "{raw}"',
                actor_id=actor_id,
                field=name,
                value=raw,
            )
    if not values:
        return None
    return VoiceHint(**values)


def pace_to_rate(pace: Optional[str]) -> float:
    return PACE_RATES.get(pace or "normal", 1.0)
