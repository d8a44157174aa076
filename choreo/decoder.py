"""Map an extracted payload onto raw per-actor directives.

Only the compact shape (``{"s": {"ch": [...]}}`` with a numeric ``ord`` and
no literal ``d``) is accepted. Every field is kept as an optional string;
interpretation happens in the validating stage.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import SceneDecodeError

COMPACT = "compact"
LEGACY = "legacy"
AMBIGUOUS = "ambiguous"
UNKNOWN = "unknown"

# compact key -> RawDirective attribute
_STRING_KEYS: Dict[str, str] = {
    "c": "actor",
    "t": "text",
    "a": "animation",
    "sp": "speed",
    "lk": "look",
    "ex": "expression",
    "ey": "eye",
    "eb": "eyebrow",
    "m": "mouth",
    "fc": "face",
    "n": "nose",
    "ck": "cheek",
    "fh": "forehead",
    "j": "jaw",
    "fx": "effect",
}


@dataclass(frozen=True)
class RawDirective:
    index: int
    actor: Optional[str] = None
    text: Optional[str] = None
    order: Optional[float] = None
    animation: Optional[str] = None
    speed: Optional[str] = None
    look: Optional[str] = None
    expression: Optional[str] = None
    eye: Optional[str] = None
    eyebrow: Optional[str] = None
    mouth: Optional[str] = None
    face: Optional[str] = None
    nose: Optional[str] = None
    cheek: Optional[str] = None
    forehead: Optional[str] = None
    jaw: Optional[str] = None
    effect: Optional[str] = None
    interrupt: bool = False
    voice: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class DecodedScene:
    directives: Tuple[RawDirective, ...]
    reasoning: Optional[Dict[str, Any]] = None


def _is_number(value: Any) -> bool:
    # json.loads maps 1e400 to inf and accepts NaN
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _entries(payload: Any) -> Optional[List[Any]]:
    if not isinstance(payload, dict):
        return None
    scene = payload.get("s")
    if not isinstance(scene, dict):
        return None
    entries = scene.get("ch")
    return entries if isinstance(entries, list) else None


def detect_format(payload: Any) -> str:
    entries = _entries(payload)
    if entries is None:
        verbose = payload.get("scene") if isinstance(payload, dict) else None
        if isinstance(verbose, dict) and isinstance(verbose.get("characters"), list):
            return LEGACY
        return UNKNOWN
    first = next((e for e in entries if isinstance(e, dict)), None)
    if first is None:
        return UNKNOWN
    has_order = _is_number(first.get("ord"))
    has_delay = "d" in first
    if has_order and has_delay:
        return AMBIGUOUS
    if has_order:
        return COMPACT
    if has_delay or "tl" in first:
        return LEGACY
    return UNKNOWN


def _opt_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return None
    text = str(value)
    return text if text.strip() else None


def _directive(index: int, entry: Dict[str, Any]) -> RawDirective:
    values: Dict[str, Any] = {attr: _opt_text(entry.get(key)) for key, attr in _STRING_KEYS.items()}
    # Dialogue keeps surrounding whitespace decisions to the cleaning stage.
    text = entry.get("t")
    values["text"] = text if isinstance(text, str) else _opt_text(text)
    order = entry.get("ord")
    voice = entry.get("v")
    return RawDirective(
        index=index,
        order=float(order) if _is_number(order) else None,
        interrupt=entry.get("int") is True,
        voice=voice if isinstance(voice, dict) else None,
        **values,
    )


def decode_scene(payload: Any) -> DecodedScene:
    detected = detect_format(payload)
    if detected != COMPACT:
        raise SceneDecodeError(f"unsupported payload format: {detected}", detected_format=detected)
    directives = []
    for index, entry in enumerate(_entries(payload) or []):
        if isinstance(entry, dict):
            directives.append(_directive(index, entry))
    reasoning = payload.get("reasoning")
    return DecodedScene(
        directives=tuple(directives),
        reasoning=reasoning if isinstance(reasoning, dict) else None,
    )


def ordered(directives: Tuple[RawDirective, ...]) -> List[RawDirective]:
    """Speaking order: by ``ord``, entries without one last, ties by appearance."""
    return sorted(
        directives,
        key=lambda d: (d.order is None, d.order if d.order is not None else 0.0, d.index),
    )


def first_dialogue(payload: Any) -> Tuple[Optional[str], str]:
    """``(actor, text)`` of the first entry in a compact or verbose payload.

    Used by the fallback scene when a payload was found but rejected.
    """
    entries = _entries(payload)
    if entries is None and isinstance(payload, dict) and isinstance(payload.get("scene"), dict):
        characters = payload["scene"].get("characters")
        entries = characters if isinstance(characters, list) else None
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        text = next((entry[k] for k in ("t", "content", "text") if isinstance(entry.get(k), str)), "")
        actor = _opt_text(entry.get("c", entry.get("characterId")))
        return actor, text
    return None, ""
