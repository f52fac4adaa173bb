# tests/core/traceability/test_manifest_lifecycle.py
"""
Testes do Manifest de execução (traceability).

Os testes garantem que:
- `create_manifest` não emite eventos
- eventos são registrados na ordem das chamadas
- durações e artefatos dos estágios são registrados
- save/load preservam o conteúdo (JSON determinístico)
"""

from datetime import datetime, timedelta, timezone

from build_bridge.core.traceability import (
    add_event,
    create_manifest,
    execution_finished,
    load_manifest,
    save_manifest,
    stage_failed,
    stage_finished,
    stage_skipped,
    stage_started,
)

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _manifest():
    return create_manifest(
        execution_id="exec-1",
        job_id="job-42",
        started_at=T0,
        config_hash="abc",
        trigger={"ref": "refs/heads/master"},
    )


def test_create_manifest_has_no_events():
    m = _manifest()
    assert m.events == []
    assert m.execution["status"] == "running"
    assert m.execution["trigger"] == {"ref": "refs/heads/master"}
    assert m.inputs == {"config_hash": "abc"}


def test_stage_lifecycle_records_duration_and_artifact():
    m = _manifest()
    stage_started(m, stage_id="build", ts=T0)
    stage_finished(
        m,
        stage_id="build",
        ts=T0 + timedelta(milliseconds=1500),
        result={
            "status": "succeeded",
            "summary": "Compilation Succeeded",
            "artifact": {"name": "BuildOutput", "prefix": "p/", "files": ["a.jar"], "digest": "d"},
        },
    )

    s = m.stages["build"]
    assert s["status"] == "succeeded"
    assert s["duration_ms"] == 1500
    assert s["artifact"]["name"] == "BuildOutput"
    assert m.event_types() == ["stage_started", "stage_finished"]


def test_failure_skip_and_finish_events():
    m = _manifest()
    add_event(m, event_type="execution_started", ts=T0)
    stage_started(m, stage_id="build", ts=T0)
    stage_failed(m, stage_id="build", ts=T0, error={"type": "BUILD_FAILURE", "message": "Compilation Failed"})
    stage_skipped(m, stage_id="publish", ts=T0, reason="skipped due to failed predecessor")
    execution_finished(m, status="failed", ts=T0)

    assert m.event_types() == [
        "execution_started",
        "stage_started",
        "stage_failed",
        "stage_skipped",
        "execution_finished",
    ]
    assert m.stages["build"]["error"]["message"] == "Compilation Failed"
    assert m.execution["status"] == "failed"


def test_save_and_load_round_trip(tmp_path):
    m = _manifest()
    stage_started(m, stage_id="source", ts=T0)
    path = tmp_path / "nested" / "exec-1.json"

    save_manifest(m, path)
    restored = load_manifest(path)

    assert restored.to_dict() == m.to_dict()
