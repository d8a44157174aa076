"""CLI entrypoint: orchestrate one saved model response into a scene file."""
import argparse
import json
import os
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import TimingConfig
from .models import OrchestrationResult, Roster
from .pipeline import orchestrate_with_fallback
from .reconcile import estimate_scene_speech, measure_audio_ms, reconcile_scene
from .roster import load_character_bible, roster_from_bible
from .run_logger import RunLogger


def _load_roster(args: argparse.Namespace) -> Roster:
    actor_ids = [a.strip() for a in args.roster.split(",") if a.strip()]
    if args.names:
        with open(args.names, "r", encoding="utf-8") as f:
            names = json.load(f)
        return Roster(tuple(actor_ids), {k: v for k, v in names.items() if k in actor_ids})
    bible = load_character_bible(args.bible) if args.bible else None
    return roster_from_bible(actor_ids, bible)


def _target_durations(args: argparse.Namespace, result: OrchestrationResult) -> Dict[str, float]:
    targets: Dict[str, float] = {}
    if args.estimate_tts and result.scene is not None:
        targets.update(estimate_scene_speech(result.scene))
    if args.tts_durations:
        with open(args.tts_durations, "r", encoding="utf-8") as f:
            targets.update({k: float(v) for k, v in json.load(f).items()})
    for item in args.audio or []:
        actor_id, _, path = item.partition("=")
        if not actor_id or not path:
            raise SystemExit(f"--audio expects actor_id=path, got {item!r}")
        targets[actor_id] = float(measure_audio_ms(path))
    return targets


def run_orchestration(args: argparse.Namespace) -> Dict[str, Any]:
    with open(args.input, "r", encoding="utf-8") as f:
        raw_text = f.read()
    roster = _load_roster(args)
    config = TimingConfig.from_env()
    rng = random.Random(args.seed)
    run_dir = args.run_dir or os.path.join(
        os.getenv("DATA_ROOT", "data"), "runs", datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    )
    logger = RunLogger(run_dir)
    logger.log(f"orchestrate: input={args.input} roster={','.join(roster.actor_ids)} seed={args.seed}")

    result = orchestrate_with_fallback(raw_text, roster, config=config, rng=rng, logger=logger)
    scene = result.scene
    targets = _target_durations(args, result)
    if targets and scene is not None:
        scene = reconcile_scene(scene, targets, config, rng)
        logger.log(f"reconcile: targets={json.dumps(targets, sort_keys=True)} duration_ms={scene.scene_duration}")

    payload = result.to_dict()
    payload["scene"] = scene.to_dict() if scene is not None else None
    out_path = os.path.abspath(args.output or os.path.join(run_dir, "scene.json"))
    logger.write_json(out_path, payload)
    logger.save_result("orchestrate", result, scene, output=out_path, reconciled=sorted(targets))
    print(out_path)
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn a model response into an animation scene")
    parser.add_argument("--input", required=True, help="File holding the raw model response")
    parser.add_argument("--roster", required=True, help="Comma-separated actor ids in seating order")
    parser.add_argument("--names", default=None, help="JSON file mapping actor id to display name")
    parser.add_argument("--bible", default=None, help="Character bible JSON (default: CHOREO_CHARACTER_BIBLE)")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--tts-durations", default=None, help="JSON file mapping actor id to speech ms")
    parser.add_argument("--audio", action="append", default=None, help="actor_id=path to measured speech audio")
    parser.add_argument("--estimate-tts", action="store_true", help="Reconcile to word-count speech estimates")
    parser.add_argument("--run-dir", default=None)
    parser.add_argument("--output", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    run_orchestration(args)


if __name__ == "__main__":
    main()
