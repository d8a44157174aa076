"""End-to-end orchestration: raw model text in, playable scene out."""
from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, TimingConfig
from .decoder import RawDirective, decode_scene, first_dialogue, ordered
from .diagnostics import Diagnostics, LoggerLike
from .errors import ChoreoError, SceneDecodeError
from .expressions import expand_expression, resolve_expression
from .extract import extract_json_object, strip_code_fences
from .models import CharacterTimeline, FacialState, OrchestrationResult, OrchestrationScene, Roster
from .reactions import fill_non_speakers
from .scheduler import assign_start_delays, enforce_turn_gaps, split_combined_directives
from .text_cleaning import clean_dialogue, strip_name_prefix
from .timing import TurnStyle, build_turn_segments, default_segments, parse_speed
from .validators import validate_scene
from .vocabulary import (
    validate_animation,
    validate_cheek,
    validate_effect,
    validate_eye,
    validate_eyebrow,
    validate_face,
    validate_forehead,
    validate_jaw,
    validate_look,
    validate_mouth,
    validate_nose,
)
from .voice import parse_voice_hint


def _turn_style(directive: RawDirective, actor_id: str, diagnostics: Diagnostics) -> TurnStyle:
    overrides = FacialState(
        eye_state=validate_eye(directive.eye, diagnostics, actor_id),
        eyebrow_state=validate_eyebrow(directive.eyebrow, diagnostics, actor_id),
        mouth_state=validate_mouth(directive.mouth, diagnostics, actor_id),
        face_state=validate_face(directive.face, diagnostics, actor_id),
        nose_state=validate_nose(directive.nose, diagnostics, actor_id),
        cheek_state=validate_cheek(directive.cheek, diagnostics, actor_id),
        forehead_state=validate_forehead(directive.forehead, diagnostics, actor_id),
        jaw_state=validate_jaw(directive.jaw, diagnostics, actor_id),
    )
    return TurnStyle(
        animation=validate_animation(directive.animation or "talking", diagnostics, actor_id),
        facial=expand_expression(directive.expression, overrides, diagnostics, actor_id),
        look=validate_look(directive.look, diagnostics, actor_id),
        effect=validate_effect(directive.effect, diagnostics, actor_id),
        speed=parse_speed(directive.speed, diagnostics, actor_id),
        expression=resolve_expression(directive.expression),
        voice=parse_voice_hint(directive.voice, diagnostics, actor_id),
    )


def _build_timeline(
    directive: RawDirective,
    actor_id: str,
    roster: Roster,
    config: TimingConfig,
    rng: random.Random,
    diagnostics: Diagnostics,
) -> CharacterTimeline:
    style = _turn_style(directive, actor_id, diagnostics)
    names = list(roster.actor_ids) + [roster.display_name(a) for a in roster.actor_ids]
    cleaned = clean_dialogue(strip_name_prefix(directive.text or "", names))
    content, segments = build_turn_segments(cleaned.text, style, config, rng, cleaned.actions)
    return CharacterTimeline(
        actor_id=actor_id,
        content=content,
        segments=segments,
        is_interruption=directive.interrupt,
    )


def _log_reasoning(reasoning: Optional[dict], diagnostics: Diagnostics) -> None:
    if not reasoning:
        diagnostics.info("decoding", "missing_reasoning", "payload carries no reasoning block")
        return
    if diagnostics.logger is not None:
        checks = reasoning.get("formatValidation") or {}
        failed = sorted(k for k, v in checks.items() if v is False) if isinstance(checks, dict) else []
        decision = str(reasoning.get("decision") or "not provided")
        diagnostics.logger.log(f"reasoning: decision={decision} failed_checks={','.join(failed) or 'none'}")


def orchestrate(
    raw_text: str,
    roster: Roster,
    config: Optional[TimingConfig] = None,
    rng: Optional[random.Random] = None,
    logger: Optional[LoggerLike] = None,
) -> OrchestrationResult:
    config = config or DEFAULT_CONFIG
    rng = rng or random.Random()
    diagnostics = Diagnostics(logger)

    try:
        decoded = decode_scene(extract_json_object(raw_text))
    except SceneDecodeError as ex:
        diagnostics.warn("decoding", "structural", str(ex), value=ex.detected_format)
        return OrchestrationResult(scene=None, warnings=diagnostics.records())
    except ChoreoError as ex:
        diagnostics.warn("decoding", "structural", str(ex))
        return OrchestrationResult(scene=None, warnings=diagnostics.records())

    _log_reasoning(decoded.reasoning, diagnostics)
    directives = split_combined_directives(ordered(decoded.directives), roster, diagnostics)

    timelines: List[CharacterTimeline] = []
    for directive in directives:
        actor_id = roster.resolve(directive.actor)
        if actor_id is None:
            diagnostics.warn(
                "validating",
                "unresolved_actor",
                f'dropping entry for unknown actor "{directive.actor}"',
                value=directive.actor,
            )
            continue
        timelines.append(_build_timeline(directive, actor_id, roster, config, rng, diagnostics))

    if not timelines:
        diagnostics.warn("decoding", "structural", "payload has no usable actor entries")
        return OrchestrationResult(scene=None, warnings=diagnostics.records(), reasoning=decoded.reasoning)

    timelines = enforce_turn_gaps(assign_start_delays(timelines, config), config)
    scene_duration = max(t.end_time for t in timelines)
    behavior = fill_non_speakers(timelines, roster, scene_duration, config, rng)
    scene = OrchestrationScene(timelines=tuple(timelines), roster=roster, non_speaker_behavior=behavior)

    diagnostics.extend(validate_scene(scene, config))
    if logger is not None:
        logger.log(
            f"scene: timelines={len(scene.timelines)} reactions={len(scene.non_speaker_behavior)} "
            f"duration_ms={scene.scene_duration} warnings={len(diagnostics)}"
        )
    return OrchestrationResult(scene=scene, warnings=diagnostics.records(), reasoning=decoded.reasoning)


def build_fallback_scene(
    responses: Sequence[Tuple[str, str]],
    roster: Roster,
    config: Optional[TimingConfig] = None,
    rng: Optional[random.Random] = None,
) -> OrchestrationScene:
    """Sequential default turns for ``(actor_id, text)`` pairs."""
    config = config or DEFAULT_CONFIG
    timelines: List[CharacterTimeline] = []
    delay = 0
    for actor_id, text in responses:
        content = clean_dialogue(strip_name_prefix(text)).text
        timeline = CharacterTimeline(
            actor_id=actor_id,
            content=content,
            segments=default_segments(content, config),
            start_delay=delay,
        )
        timelines.append(timeline)
        delay = timeline.end_time + config.min_turn_gap_ms
    duration = max((t.end_time for t in timelines), default=0)
    behavior = fill_non_speakers(timelines, roster, duration, config, rng)
    return OrchestrationScene(timelines=tuple(timelines), roster=roster, non_speaker_behavior=behavior)


def _fallback_dialogue(raw_text: str) -> Tuple[Optional[str], str]:
    """Dialogue of the first payload entry, or the bare text when there is no payload."""
    try:
        payload = extract_json_object(raw_text)
    except ChoreoError:
        return None, strip_code_fences(raw_text)
    return first_dialogue(payload)


def orchestrate_with_fallback(
    raw_text: str,
    roster: Roster,
    config: Optional[TimingConfig] = None,
    rng: Optional[random.Random] = None,
    logger: Optional[LoggerLike] = None,
    fallback_actor: Optional[str] = None,
) -> OrchestrationResult:
    """Like :func:`orchestrate`, but always returns a playable scene."""
    result = orchestrate(raw_text, roster, config=config, rng=rng, logger=logger)
    if result.scene is not None:
        return result
    entry_actor, text = _fallback_dialogue(raw_text)
    actor_id = roster.resolve(fallback_actor) if fallback_actor else None
    if actor_id is None:
        actor_id = roster.resolve(entry_actor)
    if actor_id is None and roster.actor_ids:
        actor_id = roster.actor_ids[0]
    responses = [(actor_id, text)] if actor_id else []
    scene = build_fallback_scene(responses, roster, config, rng)
    if logger is not None:
        logger.log(f"fallback: actor={actor_id} duration_ms={scene.scene_duration}")
    return OrchestrationResult(
        scene=scene,
        warnings=result.warnings,
        reasoning=result.reasoning,
        fallback_used=True,
    )
