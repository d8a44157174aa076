"""Post-hoc guideline checks for a finished scene. These never modify it."""
import re
from collections import Counter
from typing import List, Optional

from .config import DEFAULT_CONFIG, TimingConfig
from .models import CharacterTimeline, OrchestrationScene, SceneWarning

STAGE = "guidelines"

_NAME_PREFIX_RE = re.compile(r"^\[[^\]\n]+\]:")
_NAME_HEADER_RE = re.compile(r"\[[^\]\n]+\]:")


def _warning(code: str, message: str, actor_id: Optional[str] = None, value: Optional[str] = None) -> SceneWarning:
    return SceneWarning(stage=STAGE, code=code, message=message, actor_id=actor_id, value=value)


def validate_timeline(timeline: CharacterTimeline, config: TimingConfig = DEFAULT_CONFIG) -> List[SceneWarning]:
    warnings: List[SceneWarning] = []
    actor_id = timeline.actor_id
    content = timeline.content or ""

    if _NAME_PREFIX_RE.match(content.strip()):
        warnings.append(_warning("name_prefix_in_text", "content starts with a [Name]: prefix", actor_id))
    headers = _NAME_HEADER_RE.findall(content)
    if len(headers) > 1:
        warnings.append(
            _warning("unsplit_combined_text", f"content holds {len(headers)} speaker headers", actor_id, str(len(headers)))
        )
    if not content.strip():
        warnings.append(_warning("empty_dialogue", "empty dialogue", actor_id))

    for index, seg in enumerate(timeline.segments):
        if not config.min_segment_ms <= seg.duration <= config.max_segment_ms:
            warnings.append(
                _warning("segment_out_of_bounds", f"segment {index} lasts {seg.duration}ms", actor_id, str(seg.duration))
            )

    cursor = 0
    talking = [seg for seg in timeline.segments if seg.is_talking and seg.text_reveal is not None]
    for seg in talking:
        # a single line break between sentences is not revealed
        if seg.text_reveal.start == cursor + 1 and content[cursor : cursor + 1] == "\n":
            cursor += 1
        if seg.text_reveal.start != cursor:
            warnings.append(
                _warning("text_range_gap", f"range starts at {seg.text_reveal.start}, expected {cursor}", actor_id, str(seg.text_reveal.start))
            )
        cursor = seg.text_reveal.end
    if talking and cursor != len(content):
        warnings.append(_warning("text_range_incomplete", f"ranges end at {cursor} of {len(content)}", actor_id, str(cursor)))
    return warnings


def validate_scene(scene: OrchestrationScene, config: TimingConfig = DEFAULT_CONFIG) -> List[SceneWarning]:
    warnings: List[SceneWarning] = []
    counts = Counter(t.actor_id for t in scene.timelines)
    for actor_id, count in counts.items():
        if count > 1:
            warnings.append(_warning("duplicate_actor", f"{actor_id} speaks {count} times", actor_id, str(count)))

    for timeline in scene.timelines:
        if timeline.actor_id not in scene.roster:
            warnings.append(_warning("actor_outside_roster", "speaker is not in the roster", timeline.actor_id))
        warnings.extend(validate_timeline(timeline, config))

    duration = scene.scene_duration
    for actor_id, reaction in scene.non_speaker_behavior.items():
        if actor_id not in scene.roster:
            warnings.append(_warning("actor_outside_roster", "reacting actor is not in the roster", actor_id))
        if reaction.total_duration != duration:
            warnings.append(
                _warning(
                    "reaction_span_mismatch",
                    f"reaction spans {reaction.total_duration} of {duration}",
                    actor_id,
                    str(reaction.total_duration),
                )
            )
    return warnings


def scene_errors(scene: OrchestrationScene, config: TimingConfig = DEFAULT_CONFIG) -> List[str]:
    return [str(w) for w in validate_scene(scene, config)]
