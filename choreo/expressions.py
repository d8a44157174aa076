"""Mood presets: one named mood expands into a bundle of facial sub-states."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .diagnostics import Diagnostics
from .models import FacialState
from .vocabulary import normalize_token

STAGE = "expanding"


def _preset(eye=None, eyebrow=None, mouth=None, face=None, nose=None, cheek=None, forehead=None, jaw=None) -> FacialState:
    return FacialState(
        eye_state=eye,
        eyebrow_state=eyebrow,
        mouth_state=mouth,
        face_state=face,
        nose_state=nose,
        cheek_state=cheek,
        forehead_state=forehead,
        jaw_state=jaw,
    )


EXPRESSION_PRESETS: Mapping[str, FacialState] = MappingProxyType(
    {
        # positive
        "joyful": _preset("open", "raised", "big_grin", "sparkle_eyes", cheek="flushed", jaw="relaxed"),
        "happy": _preset("open", "normal", "smile", cheek="dimpled", jaw="relaxed"),
        "excited": _preset("wide", "raised", "wide_smile", "sparkle_eyes", cheek="flushed", forehead="raised"),
        "ecstatic": _preset("wide", "arched_high", "big_grin", "sparkle_eyes", nose="flared", cheek="flushed", forehead="raised"),
        "loving": _preset("soft", "relaxed_upward", "slight_smile", "heart_eyes", cheek="flushed", jaw="relaxed"),
        "proud": _preset("narrow", "slightly_raised", "smirk", cheek="dimpled", jaw="protruding"),
        "playful": _preset("wink_left", "wiggle", "smirk", cheek="dimpled"),
        "amused": _preset("soft", "slightly_raised", "slight_smile", cheek="dimpled", forehead="smooth"),
        "confident": _preset("open", "slightly_raised", "smirk", jaw="protruding", forehead="smooth"),
        "hysterical": _preset("closed", "arched_high", "teeth_showing", "tears", nose="wrinkled", cheek="flushed", jaw="slack"),
        # negative
        "sad": _preset("soft", "sad", "sad_smile", cheek="sunken", forehead="wrinkled"),
        "angry": _preset("narrow", "furrowed", "grimace", "anger_vein", nose="flared", forehead="tense", jaw="clenched"),
        "frustrated": _preset("narrow", "deeply_furrowed", "tense", nose="flared", forehead="tense", jaw="clenched"),
        "annoyed": _preset("half_closed", "furrowed", "tense", nose="wrinkled", jaw="clenched"),
        "disappointed": _preset("half_closed", "sad", "sad_smile", cheek="sunken", forehead="wrinkled"),
        "devastated": _preset("tearful", "sad", "open", "tears", cheek="sunken", forehead="wrinkled", jaw="slack"),
        "heartbroken": _preset("tearful", "worried", "sad_smile", "tears", cheek="sunken", forehead="wrinkled"),
        "pained": _preset("closed", "deeply_furrowed", "grimace", nose="wrinkled", forehead="tense", jaw="clenched"),
        "disgusted": _preset("narrow", "furrowed", "grimace", nose="wrinkled", cheek="puffed", forehead="tense"),
        "defiant": _preset("narrow", "furrowed", "tense", cheek="puffed", forehead="tense", jaw="protruding"),
        # thinking
        "thoughtful": _preset("half_closed", "slightly_raised", "closed", forehead="wrinkled"),
        "curious": _preset("wide", "one_raised", "o_shape", forehead="raised"),
        "confused": _preset("open", "asymmetrical", "tense", "spiral_eyes", forehead="wrinkled"),
        "skeptical": _preset("narrow", "one_raised", "smirk", forehead="wrinkled"),
        "focused": _preset("narrow", "furrowed", "closed", forehead="tense", jaw="relaxed"),
        # surprise
        "surprised": _preset("wide", "raised", "surprised", forehead="raised", jaw="slack"),
        "shocked": _preset("wide", "arched_high", "o_shape", "shadow_face", forehead="raised", jaw="slack"),
        "amazed": _preset("wide", "arched_high", "open", "sparkle_eyes", forehead="raised"),
        "terrified": _preset("wide", "worried", "grimace", "sweat_drop", nose="flared", cheek="sunken", jaw="slack"),
        # nervous
        "nervous": _preset("open", "worried", "tense", "sweat_drop", forehead="tense"),
        "worried": _preset("open", "worried", "tense", forehead="wrinkled"),
        "embarrassed": _preset("half_closed", "worried", "slight_smile", "blush", cheek="flushed"),
        "shy": _preset("soft", "relaxed_upward", "slight_smile", "blush", cheek="flushed"),
        "pleading": _preset("tearful", "worried", "sad_smile", forehead="raised"),
        # neutral / low energy
        "neutral": _preset("open", "normal", "closed", nose="neutral", cheek="neutral", forehead="smooth", jaw="relaxed"),
        "calm": _preset("soft", "normal", "slight_smile", forehead="smooth", jaw="relaxed"),
        "serious": _preset("open", "furrowed", "closed", forehead="tense", jaw="clenched"),
        "sleepy": _preset("half_closed", "relaxed_upward", "o_shape", jaw="slack"),
        "bored": _preset("half_closed", "normal", "tense", jaw="slack"),
        "dizzy": _preset("half_closed", "asymmetrical", "open", "spiral_eyes", jaw="slack"),
        # sassy
        "smug": _preset("half_closed", "one_raised", "smirk", cheek="dimpled"),
        "mischievous": _preset("narrow", "wiggle", "smirk", cheek="dimpled"),
        "sassy": _preset("half_closed", "arched_high", "smirk", cheek="puffed"),
        "unimpressed": _preset("half_closed", "normal", "tense", jaw="relaxed"),
        "judging": _preset("narrow", "one_raised", "closed", forehead="wrinkled"),
        "teasing": _preset("wink_right", "wiggle", "big_grin", cheek="dimpled"),
        "eye_roll": _preset("half_closed", "asymmetrical", "smirk", forehead="raised"),
    }
)

EXPRESSION_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        # joyful / happy
        "joy": "joyful", "joyous": "joyful", "jubilant": "joyful", "elated": "joyful", "overjoyed": "ecstatic",
        "cheerful": "happy", "glad": "happy", "pleased": "happy", "content": "happy", "delighted": "happy",
        "smiling": "happy", "smile": "happy", "grinning": "happy", "grin": "happy", "hapy": "happy", "happpy": "happy",
        "thrilled": "excited", "eager": "excited", "pumped": "excited", "hyped": "excited", "enthusiastic": "excited",
        "exited": "excited", "excitement": "excited", "euphoric": "ecstatic", "blissful": "ecstatic", "overexcited": "ecstatic",
        "in_love": "loving", "love": "loving", "affectionate": "loving", "adoring": "loving", "tender": "loving",
        "warm": "loving", "caring": "loving", "romantic": "loving", "smitten": "loving",
        "triumphant": "proud", "accomplished": "proud", "pride": "proud",
        "silly": "playful", "goofy": "playful", "cheeky": "playful", "fun": "playful", "funny": "playful",
        "entertained": "amused", "laughing": "amused", "chuckling": "amused", "humored": "amused",
        "cocky": "confident", "assured": "confident", "self_assured": "confident", "bold": "confident", "determined": "confident",
        "cackling": "hysterical", "crying_laughing": "hysterical", "rofl": "hysterical", "lol": "hysterical",
        # sad
        "unhappy": "sad", "down": "sad", "blue": "sad", "gloomy": "sad", "melancholy": "sad", "melancholic": "sad",
        "sorrowful": "sad", "depressed": "sad", "glum": "sad", "sadness": "sad", "sorry": "sad", "apologetic": "sad",
        "crushed": "devastated", "despair": "devastated", "despairing": "devastated", "crying": "devastated", "sobbing": "devastated",
        "grieving": "heartbroken", "heart_broken": "heartbroken", "hurt": "heartbroken", "lonely": "heartbroken",
        "let_down": "disappointed", "disapointed": "disappointed", "dissatisfied": "disappointed", "dismayed": "disappointed",
        # anger
        "mad": "angry", "furious": "angry", "enraged": "angry", "livid": "angry", "irate": "angry", "rage": "angry",
        "anger": "angry", "outraged": "angry", "fuming": "angry", "angery": "angry",
        "irritated": "annoyed", "bothered": "annoyed", "grumpy": "annoyed", "cranky": "annoyed", "exasperated": "frustrated",
        "fed_up": "frustrated", "agitated": "frustrated", "impatient": "frustrated", "stressed": "frustrated",
        "in_pain": "pained", "hurting": "pained", "wincing": "pained", "ouch": "pained",
        "grossed_out": "disgusted", "repulsed": "disgusted", "revolted": "disgusted", "disgust": "disgusted", "eww": "disgusted",
        "stubborn": "defiant", "rebellious": "defiant", "resolute": "defiant",
        # thinking
        "pensive": "thoughtful", "contemplative": "thoughtful", "reflective": "thoughtful", "thinking": "thoughtful",
        "pondering": "thoughtful", "wondering": "curious", "intrigued": "curious", "inquisitive": "curious", "interested": "curious",
        "puzzled": "confused", "perplexed": "confused", "baffled": "confused", "bewildered": "confused", "lost": "confused",
        "doubtful": "skeptical", "suspicious": "skeptical", "unconvinced": "skeptical", "sceptical": "skeptical", "dubious": "skeptical",
        "concentrated": "focused", "attentive": "focused", "intent": "focused", "analytical": "focused",
        # surprise
        "surprise": "surprised", "startled": "surprised", "suprised": "surprised", "astonished": "amazed",
        "awed": "amazed", "impressed": "amazed", "wowed": "amazed", "in_awe": "amazed", "stunned": "shocked",
        "flabbergasted": "shocked", "speechless": "shocked", "aghast": "shocked",
        "scared": "terrified", "afraid": "terrified", "frightened": "terrified", "horrified": "terrified", "panicked": "terrified",
        "fearful": "terrified", "fear": "terrified",
        # nervous
        "anxious": "nervous", "tense": "nervous", "uneasy": "nervous", "jittery": "nervous", "nervious": "nervous",
        "concerned": "worried", "troubled": "worried", "apprehensive": "worried",
        "ashamed": "embarrassed", "awkward": "embarrassed", "flustered": "embarrassed", "blushing": "embarrassed", "sheepish": "embarrassed",
        "bashful": "shy", "timid": "shy", "coy": "shy",
        "begging": "pleading", "puppy_eyes": "pleading", "desperate": "pleading",
        # neutral / low energy
        "normal": "neutral", "default": "neutral", "blank": "neutral", "plain": "neutral", "none": "neutral",
        "relaxed": "calm", "peaceful": "calm", "serene": "calm", "chill": "calm", "composed": "calm", "gentle": "calm",
        "stern": "serious", "grave": "serious", "solemn": "serious", "earnest": "serious", "sincere": "serious",
        "tired": "sleepy", "drowsy": "sleepy", "exhausted": "sleepy", "weary": "sleepy", "yawning": "sleepy",
        "uninterested": "bored", "disinterested": "bored", "indifferent": "bored", "meh": "bored", "apathetic": "bored",
        "dazed": "dizzy", "woozy": "dizzy", "confounded": "dizzy",
        # sassy
        "self_satisfied": "smug", "superior": "smug", "arrogant": "smug", "smirking": "smug", "condescending": "smug",
        "sneaky": "mischievous", "devious": "mischievous", "scheming": "mischievous", "impish": "mischievous",
        "sarcastic": "sassy", "snarky": "sassy", "witty": "sassy", "ironic": "sassy",
        "not_impressed": "unimpressed", "deadpan": "unimpressed", "dry": "unimpressed",
        "judgmental": "judging", "judgemental": "judging", "critical": "judging", "disapproving": "judging",
        "mocking": "teasing", "taunting": "teasing", "flirty": "teasing", "flirtatious": "teasing",
        "eyeroll": "eye_roll", "rolling_eyes": "eye_roll", "exasperated_eye_roll": "eye_roll", "whatever": "eye_roll",
    }
)


def resolve_expression(mood: Optional[str]) -> Optional[str]:
    key = normalize_token(mood)
    if not key:
        return None
    if key in EXPRESSION_PRESETS:
        return key
    alias = EXPRESSION_ALIASES.get(key)
    if alias is not None:
        return alias
    # One bidirectional substring pass over canonical names, e.g. "very_happy".
    if len(key) >= 4:
        for name in EXPRESSION_PRESETS:
            if name in key or key in name:
                return name
    return None


def expand_expression(
    mood: Optional[str],
    overrides: Optional[FacialState] = None,
    diagnostics: Optional[Diagnostics] = None,
    actor_id: Optional[str] = None,
) -> FacialState:
    """Preset fields for ``mood`` with ``overrides`` layered on top."""
    overrides = overrides or FacialState()
    if not normalize_token(mood):
        return overrides
    canonical = resolve_expression(mood)
    if canonical is None:
        if diagnostics is not None:
            diagnostics.warn(
                STAGE,
                "unknown_expression",
                f'unknown expression "{mood}", using overrides only',
                actor_id=actor_id,
                field="expression",
                value=mood,
            )
        return overrides
    return overrides.merged_over(EXPRESSION_PRESETS[canonical])
