"""Per-run log file and manifest for CLI and tool-server orchestrations."""
import json
import os
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .models import OrchestrationResult, OrchestrationScene, SceneWarning


def format_warning(record: SceneWarning) -> str:
    """One ``run.log`` line: ``level:stage:code:detail: message``."""
    return f"{record.level}:{record.stage}:{record}: {record.message}"


def scene_summary(scene: Optional[OrchestrationScene]) -> Dict[str, Any]:
    if scene is None:
        return {"playable": False}
    return {
        "playable": True,
        "duration_ms": scene.scene_duration,
        "speakers": scene.speaker_ids(),
        "reacting": sorted(scene.non_speaker_behavior),
        "interruptions": sum(1 for t in scene.timelines if t.is_interruption),
    }


class RunLogger:
    def __init__(self, run_dir: str) -> None:
        self.run_dir = run_dir
        os.makedirs(self.run_dir, exist_ok=True)
        self.log_path = os.path.join(self.run_dir, "run.log")
        self.manifest_path = os.path.join(self.run_dir, "run_manifest.json")
        self.manifest: Dict[str, Any] = {}
        if os.path.exists(self.manifest_path):
            try:
                with open(self.manifest_path, "r", encoding="utf-8") as f:
                    self.manifest = json.load(f)
            except (OSError, json.JSONDecodeError):
                self.manifest = {}
        if not self.manifest:
            self.manifest = {
                "run_id": os.path.basename(os.path.normpath(run_dir)),
                "started_at": _now(),
                "steps": {},
            }
        else:
            self.manifest.setdefault("run_id", os.path.basename(os.path.normpath(run_dir)))
            self.manifest.setdefault("steps", {})

    def log(self, message: str) -> None:
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(f"[{_now()}] {message}\n")

    def save_step(self, step: str, payload: Dict[str, Any]) -> None:
        self.manifest["steps"].setdefault(step, {}).update(payload)
        self._flush()

    def save_result(
        self,
        step: str,
        result: OrchestrationResult,
        scene: Optional[OrchestrationScene] = None,
        **extra: Any,
    ) -> None:
        """Record a scene summary and warning counts under ``step``.

        ``scene`` overrides ``result.scene``, e.g. after reconciliation.
        """
        final = scene if scene is not None else result.scene
        payload: Dict[str, Any] = {
            "fallback_used": result.fallback_used,
            "scene": scene_summary(final),
            "warning_counts": dict(Counter(w.code for w in result.warnings)),
            "warnings": [str(w) for w in result.warnings],
        }
        if result.reasoning:
            payload["decision"] = str(result.reasoning.get("decision") or "")
        payload.update(extra)
        self.save_step(step, payload)

    def write_json(self, path: str, data: Any) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=True, indent=2)

    def artifact_path(self, name: str, step: Optional[str] = None) -> str:
        base = os.path.join(self.run_dir, step) if step else self.run_dir
        os.makedirs(base, exist_ok=True)
        return os.path.join(base, name)

    def _flush(self) -> None:
        self.manifest["updated_at"] = _now()
        with open(self.manifest_path, "w", encoding="utf-8") as f:
            json.dump(self.manifest, f, ensure_ascii=True, indent=2)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
