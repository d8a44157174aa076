"""Rescale finished timelines to externally measured speech durations."""
from __future__ import annotations

import os
import random
from dataclasses import replace
from typing import Dict, Mapping, Optional

from .config import DEFAULT_CONFIG, TimingConfig
from .models import CharacterTimeline, OrchestrationScene
from .reactions import fill_non_speakers
from .scheduler import assign_start_delays, enforce_turn_gaps

BASE_MS_PER_WORD = 350
MIN_SPEECH_MS = 1000
RMS_FRAME_MS = 20


def reconcile_timeline(
    timeline: CharacterTimeline,
    target_ms: float,
    config: TimingConfig = DEFAULT_CONFIG,
) -> CharacterTimeline:
    """Scale every segment by ``target / total``; segments keep the floor.

    The new total may land slightly off ``target_ms`` because of the floor
    and rounding.
    """
    current = timeline.total_duration
    if current <= 0 or target_ms is None or target_ms <= 0:
        return timeline
    scale = float(target_ms) / float(current)
    segments = tuple(
        replace(seg, duration=config.clamp(max(config.min_segment_ms, round(seg.duration * scale))))
        for seg in timeline.segments
    )
    return replace(timeline, segments=segments)


def reconcile_scene(
    scene: OrchestrationScene,
    durations_ms: Mapping[str, float],
    config: TimingConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
) -> OrchestrationScene:
    timelines = [
        reconcile_timeline(t, durations_ms[t.actor_id], config) if t.actor_id in durations_ms else t
        for t in scene.timelines
    ]
    # scene.timelines is in speaking order
    timelines = enforce_turn_gaps(assign_start_delays(timelines, config), config)
    duration = max((t.end_time for t in timelines), default=0)
    behavior = fill_non_speakers(timelines, scene.roster, duration, config, rng)
    return OrchestrationScene(timelines=tuple(timelines), roster=scene.roster, non_speaker_behavior=behavior)


def estimate_speech_ms(text: str, rate: float = 1.0) -> int:
    if not text or not text.strip():
        return MIN_SPEECH_MS
    words = len(text.split())
    return max(int(round(words * BASE_MS_PER_WORD / max(rate, 0.1))), MIN_SPEECH_MS)


def estimate_scene_speech(scene: OrchestrationScene, rate: float = 1.0) -> Dict[str, int]:
    return {t.actor_id: estimate_speech_ms(t.content, rate) for t in scene.timelines}


def measure_audio_ms(path: str, trim_silence: bool = True) -> int:
    """Duration of an audio file in ms, optionally without leading/trailing silence."""
    import numpy as np
    import soundfile as sf

    data, sr = sf.read(path, dtype="float32", always_2d=False)
    arr = np.asarray(data, dtype=np.float32)
    if arr.ndim > 1:
        arr = arr.mean(axis=1)
    sr = int(sr or 1)
    if not trim_silence or arr.size == 0:
        return int(round(arr.shape[0] * 1000.0 / sr))

    threshold = float(os.getenv("CHOREO_SILENCE_RMS", "0.005"))
    frame = max(int(sr * RMS_FRAME_MS / 1000), 1)
    count = int(np.ceil(arr.shape[0] / frame))
    padded = np.zeros(count * frame, dtype=np.float32)
    padded[: arr.shape[0]] = arr
    rms = np.sqrt(np.mean(np.square(padded.reshape(count, frame)), axis=1))
    voiced = np.nonzero(rms >= threshold)[0]
    if voiced.size == 0:
        return 0
    start = int(voiced[0]) * frame
    end = min((int(voiced[-1]) + 1) * frame, arr.shape[0])
    return int(round((end - start) * 1000.0 / sr))
