from __future__ import annotations

import json
import os

from mcp_servers.choreo.server import ChoreoService

RAW = '{"s":{"ch":[{"c":"freud","t":"Dreams are wishes.","ord":1},{"c":"adler","t":"Or goals.","ord":2}]}}'


def test_orchestrate_returns_wire_payload(monkeypatch):
    monkeypatch.delenv("CHOREO_RUN_ROOT", raising=False)
    service = ChoreoService()
    res = service.choreo_orchestrate(RAW, ["freud", "jung", "adler"], {"jung": "Carl Jung"}, seed=7)
    assert res["fallbackUsed"] is False
    assert [t["characterId"] for t in res["scene"]["timelines"]] == ["freud", "adler"]
    assert "jung" in res["scene"]["nonSpeakerBehavior"]
    assert res == service.choreo_orchestrate(RAW, ["freud", "jung", "adler"], {"jung": "Carl Jung"}, seed=7)
    json.dumps(res)


def test_orchestrate_writes_run_artifacts(tmp_path):
    service = ChoreoService(run_root=str(tmp_path))
    service.choreo_orchestrate("no json here", ["freud"], seed=1)
    (run_dir,) = os.listdir(tmp_path)
    assert run_dir.startswith("orchestrate-")
    with open(os.path.join(tmp_path, run_dir, "scene.json"), "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["fallbackUsed"] is True
    assert os.path.exists(os.path.join(tmp_path, run_dir, "run.log"))
    with open(os.path.join(tmp_path, run_dir, "run_manifest.json"), "r", encoding="utf-8") as f:
        step = json.load(f)["steps"]["orchestrate"]
    assert step["fallback_used"] is True
    assert step["scene"]["speakers"] == ["freud"]
    assert step["warning_counts"]["structural"] >= 1


def test_reconcile_with_and_without_durations(monkeypatch):
    monkeypatch.delenv("CHOREO_RUN_ROOT", raising=False)
    service = ChoreoService()
    scene = service.choreo_orchestrate(RAW, ["freud", "jung", "adler"], seed=3)["scene"]

    res = service.choreo_reconcile(scene, {"freud": 5000}, seed=3)
    freud, adler = res["scene"]["timelines"]
    assert freud["totalDuration"] == 5000
    assert adler["startDelay"] >= 5500
    assert res["scene"]["nonSpeakerBehavior"]["jung"]["totalDuration"] == res["scene"]["sceneDuration"]
    assert res["errors"] == []

    estimated = service.choreo_reconcile(scene, seed=3)
    assert set(estimated["targets_ms"]) == {"freud", "adler"}


def test_vocabulary():
    res = ChoreoService(run_root="").choreo_vocabulary()
    assert "lean_forward" in res["vocabularies"]["animation"]
    assert "smug" in res["expressions"]
    assert "ms per character" in res["timing_guidelines"]
