"""
Choreography service: wraps the orchestration engine for tool callers.
Scenes cross this boundary as plain dicts in the renderer's wire shape.
"""
import os
import random
import uuid
from typing import Any, Dict, List, Optional

from choreo.config import TimingConfig
from choreo.expressions import EXPRESSION_PRESETS
from choreo.models import Roster, scene_from_dict
from choreo.pipeline import orchestrate_with_fallback
from choreo.reconcile import estimate_scene_speech, reconcile_scene
from choreo.run_logger import RunLogger
from choreo.validators import scene_errors
from choreo.vocabulary import prompt_vocabulary, timing_guidelines


class ChoreoService:
    def __init__(self, run_root: Optional[str] = None, config: Optional[TimingConfig] = None) -> None:
        self.run_root = run_root or os.getenv("CHOREO_RUN_ROOT")
        self.config = config or TimingConfig.from_env()

    def _logger(self, step: str) -> Optional[RunLogger]:
        if not self.run_root:
            return None
        return RunLogger(os.path.join(self.run_root, f"{step}-{uuid.uuid4().hex[:12]}"))

    def choreo_orchestrate(
        self,
        raw_text: str,
        roster: List[str],
        display_names: Optional[Dict[str, str]] = None,
        seed: Optional[int] = None,
    ) -> Dict[str, Any]:
        cast = Roster(tuple(roster), display_names or {})
        logger = self._logger("orchestrate")
        result = orchestrate_with_fallback(
            raw_text,
            cast,
            config=self.config,
            rng=random.Random(seed),
            logger=logger,
        )
        payload = result.to_dict()
        if logger is not None:
            logger.write_json(logger.artifact_path("scene.json"), payload)
            logger.save_result("orchestrate", result)
        return payload

    def choreo_reconcile(
        self,
        scene: Dict[str, Any],
        durations_ms: Optional[Dict[str, float]] = None,
        seed: Optional[int] = None,
    ) -> Dict[str, Any]:
        parsed = scene_from_dict(scene, self.config)
        targets = durations_ms if durations_ms else estimate_scene_speech(parsed)
        reconciled = reconcile_scene(parsed, targets, self.config, random.Random(seed))
        return {
            "scene": reconciled.to_dict(),
            "targets_ms": {k: float(v) for k, v in targets.items()},
            "errors": scene_errors(reconciled, self.config),
        }

    def choreo_vocabulary(self) -> Dict[str, Any]:
        return {
            "vocabularies": prompt_vocabulary(),
            "expressions": ", ".join(EXPRESSION_PRESETS),
            "timing_guidelines": timing_guidelines(self.config),
        }
