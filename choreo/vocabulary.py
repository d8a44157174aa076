"""Closed vocabularies for every renderer-facing field and their validators.

Every raw field read from the model goes through one of the ``validate_*``
functions here. Nothing raises: an exact hit is returned as-is, a
bidirectional substring hit is returned with a ``field_close_match`` record,
anything else falls back to the field default with a ``field_fallback``
record.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .config import DEFAULT_CONFIG, TimingConfig
from .diagnostics import Diagnostics

STAGE = "validating"

ANIMATIONS: Tuple[str, ...] = (
    "idle", "thinking", "talking", "confused", "happy", "excited",
    "winning", "walking", "jump", "surprise_jump", "surprise_happy",
    "lean_back", "lean_forward", "cross_arms", "nod", "shake_head",
    "shrug", "wave", "point", "clap", "bow",
    "facepalm", "dance", "laugh", "cry", "angry", "nervous",
    "celebrate", "peek", "doze", "stretch",
    "kick_ground", "meh", "foot_tap", "look_around", "yawn", "fidget",
    "rub_eyes", "weight_shift", "head_tilt", "chin_stroke",
)

LOOK_DIRECTIONS: Tuple[str, ...] = (
    "center", "left", "right", "up", "down",
    "at_left_character", "at_right_character", "away",
)

EYE_STATES: Tuple[str, ...] = (
    "open", "closed", "wink_left", "wink_right", "blink", "surprised_blink",
    "wide", "narrow", "soft", "half_closed", "tearful",
)

EYEBROW_STATES: Tuple[str, ...] = (
    "normal", "raised", "furrowed", "sad", "worried", "one_raised", "wiggle",
    "asymmetrical", "slightly_raised", "deeply_furrowed", "arched_high", "relaxed_upward",
)

MOUTH_STATES: Tuple[str, ...] = (
    "closed", "open", "smile", "wide_smile", "surprised", "smirk", "slight_smile",
    "grimace", "tense", "kiss", "teeth_showing", "big_grin", "o_shape", "sad_smile",
)

FACE_STATES: Tuple[str, ...] = (
    "normal", "blush", "sweat_drop", "sparkle_eyes", "heart_eyes",
    "spiral_eyes", "tears", "anger_vein", "shadow_face",
)

NOSE_STATES: Tuple[str, ...] = ("neutral", "wrinkled", "flared", "twitching")

CHEEK_STATES: Tuple[str, ...] = ("neutral", "flushed", "sunken", "puffed", "dimpled")

FOREHEAD_STATES: Tuple[str, ...] = ("smooth", "wrinkled", "tense", "raised")

JAW_STATES: Tuple[str, ...] = ("relaxed", "clenched", "protruding", "slack")

EFFECTS: Tuple[str, ...] = (
    "none", "confetti", "spotlight", "sparkles", "hearts", "fire",
    "stars", "music_notes", "tears", "anger", "snow", "rainbow",
)

LOOK_SYNONYMS: Mapping[str, str] = MappingProxyType(
    {
        "at_other": "at_left_character",
        "at_speaker": "at_left_character",
        "at_listener": "at_left_character",
    }
)

VOCABULARIES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "animation": ANIMATIONS,
        "look": LOOK_DIRECTIONS,
        "eye": EYE_STATES,
        "eyebrow": EYEBROW_STATES,
        "mouth": MOUTH_STATES,
        "face": FACE_STATES,
        "nose": NOSE_STATES,
        "cheek": CHEEK_STATES,
        "forehead": FOREHEAD_STATES,
        "jaw": JAW_STATES,
        "effect": EFFECTS,
    }
)

# None means "no override" so expression presets still apply.
FIELD_DEFAULTS: Mapping[str, Optional[str]] = MappingProxyType(
    {
        "animation": "idle",
        "look": "center",
        "effect": "none",
    }
)

_SEPARATORS_RE = re.compile(r"[\s\-]+")
MIN_CLOSE_MATCH_LEN = 3


def normalize_token(value: Optional[str]) -> str:
    if value is None:
        return ""
    return _SEPARATORS_RE.sub("_", str(value).strip().lower()).strip("_")


def match_vocabulary(value: Optional[str], vocabulary: Tuple[str, ...]) -> Tuple[Optional[str], bool]:
    """Return ``(term, exact)`` for ``value`` or ``(None, False)``.

    Exact membership wins; otherwise the first vocabulary term that contains
    the input, or is contained by it, is returned. Inputs shorter than three
    characters never substring-match.
    """
    token = normalize_token(value)
    if not token:
        return None, False
    if token in vocabulary:
        return token, True
    if len(token) < MIN_CLOSE_MATCH_LEN:
        return None, False
    for term in vocabulary:
        if token in term or (len(term) >= MIN_CLOSE_MATCH_LEN and term in token):
            return term, False
    return None, False


def validate_field(
    field_name: str,
    value: Optional[str],
    diagnostics: Optional[Diagnostics] = None,
    actor_id: Optional[str] = None,
) -> Optional[str]:
    vocabulary = VOCABULARIES[field_name]
    default = FIELD_DEFAULTS.get(field_name)
    token = normalize_token(value)
    if not token:
        return default if field_name == "animation" else None

    if field_name == "look" and token in LOOK_SYNONYMS:
        return LOOK_SYNONYMS[token]

    term, exact = match_vocabulary(token, vocabulary)
    if term is not None:
        if not exact and diagnostics is not None:
            diagnostics.warn(
                STAGE,
                "field_close_match",
                f'mapped unknown {field_name} "{value}" to "{term}"',
                actor_id=actor_id,
                field=field_name,
                value=value,
            )
        return term

    if diagnostics is not None:
        diagnostics.warn(
            STAGE,
            "field_fallback",
            f'unknown {field_name} "{value}", using {default or "no override"}',
            actor_id=actor_id,
            field=field_name,
            value=value,
        )
    return default


def validate_animation(value: Optional[str], diagnostics: Optional[Diagnostics] = None, actor_id: Optional[str] = None) -> str:
    return validate_field("animation", value, diagnostics, actor_id) or "idle"


def validate_look(value, diagnostics=None, actor_id=None):
    return validate_field("look", value, diagnostics, actor_id)


def validate_eye(value, diagnostics=None, actor_id=None):
    return validate_field("eye", value, diagnostics, actor_id)


def validate_eyebrow(value, diagnostics=None, actor_id=None):
    return validate_field("eyebrow", value, diagnostics, actor_id)


def validate_mouth(value, diagnostics=None, actor_id=None):
    return validate_field("mouth", value, diagnostics, actor_id)


def validate_face(value, diagnostics=None, actor_id=None):
    return validate_field("face", value, diagnostics, actor_id)


def validate_nose(value, diagnostics=None, actor_id=None):
    return validate_field("nose", value, diagnostics, actor_id)


def validate_cheek(value, diagnostics=None, actor_id=None):
    return validate_field("cheek", value, diagnostics, actor_id)


def validate_forehead(value, diagnostics=None, actor_id=None):
    return validate_field("forehead", value, diagnostics, actor_id)


def validate_jaw(value, diagnostics=None, actor_id=None):
    return validate_field("jaw", value, diagnostics, actor_id)


def validate_effect(value, diagnostics=None, actor_id=None):
    return validate_field("effect", value, diagnostics, actor_id)


def closest_animation(caption: str) -> Optional[str]:
    """Best body animation for a free-text stage direction, or None."""
    words = [normalize_token(w) for w in re.split(r"[^A-Za-z_\-]+", caption or "")]
    words = [w for w in words if len(w) >= MIN_CLOSE_MATCH_LEN]
    joined = "_".join(words)
    for term in ANIMATIONS:
        if term in ("idle", "talking"):
            continue
        if term == joined or (len(term) > MIN_CLOSE_MATCH_LEN and term in joined):
            return term
    for word in words:
        stem = word[:-1] if word.endswith("s") and len(word) > MIN_CLOSE_MATCH_LEN else word
        for term in ANIMATIONS:
            if term in ("idle", "talking"):
                continue
            if stem == term or term.startswith(stem + "_") or stem.startswith(term):
                return term
    return None


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------


def prompt_vocabulary() -> Dict[str, str]:
    return {name: ", ".join(values) for name, values in VOCABULARIES.items()}


def timing_guidelines(config: TimingConfig = DEFAULT_CONFIG) -> str:
    multipliers = ", ".join(f"{k}={v}" for k, v in config.speed_multipliers.items())
    return "\n".join(
        [
            "TIMING GUIDELINES:",
            f"- Talking: about {config.base_ms_per_char:g}ms per character of text",
            f"- Segments are clamped to {config.min_segment_ms}-{config.max_segment_ms}ms",
            f"- Thinking pause: {config.default_thinking_ms}ms",
            f"- Gap between turns: {config.min_turn_gap_ms}ms unless int=true (overlap up to {config.overlap_ms}ms)",
            f"- Speed qualifiers (sp): {multipliers}",
            "- Use ord for speaking order; never send literal start delays",
        ]
    )
