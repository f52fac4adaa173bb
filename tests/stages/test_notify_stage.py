# tests/stages/test_notify_stage.py
"""
Testes do estágio Notify executado diretamente sobre um RunContext.

Invariantes:
    - o job da execução é registrado no JobLedger antes da bridge
    - report de sucesso conclui o estágio, mesmo com upstream falho
    - report de falha ou ausência de report falham o estágio
"""

from build_bridge.core.engine import JobLedger
from build_bridge.core.exceptions import ReportError
from build_bridge.core.pipeline import ExecutionStatus, StageStatus
from build_bridge.gate import GateRegistry, GateState
from build_bridge.notifier import LedgerJobReporter, LocalGateSignaller, NotifierBridge
from build_bridge.stages import NotifyStage


class SilentReporter:
    def report_success(self, job_id):
        raise ReportError(message="Orchestrator unreachable")

    def report_failure(self, job_id, failure):
        raise ReportError(message="Orchestrator unreachable")


def _wiring(clock, reporter=None):
    registry = GateRegistry(base_url="http://gate.test", clock=clock)
    gate = registry.create(timeout=300)
    ledger = JobLedger()
    bridge = NotifierBridge(
        signaller=LocalGateSignaller(registry),
        reporter=reporter if reporter is not None else LedgerJobReporter(ledger),
    )
    return gate, ledger, NotifyStage(bridge=bridge, ledger=ledger, gate_handle=gate.handle)


def test_success_upstream_fires_gate(run_ctx, clock):
    gate, ledger, stage = _wiring(clock)
    run_ctx.upstream_status = ExecutionStatus.SUCCEEDED

    result = stage.run(run_ctx)

    assert result.status is StageStatus.SUCCEEDED
    assert gate.state is GateState.FIRED_SUCCESS
    assert gate.outcome().signal.unique_id == "job-42"
    assert ledger.get("job-42").succeeded


def test_failed_upstream_sends_failure_and_stage_succeeds(run_ctx, clock):
    gate, _, stage = _wiring(clock)
    run_ctx.upstream_status = ExecutionStatus.FAILED
    run_ctx.upstream_reason = "Compilation Failed"

    result = stage.run(run_ctx)

    assert result.status is StageStatus.SUCCEEDED
    assert gate.state is GateState.FIRED_FAILURE
    assert gate.outcome().reason == "Compilation Failed"
    assert result.payload["job"]["execution_status"] == "failed"


def test_expired_gate_fails_stage(run_ctx, clock):
    gate, ledger, stage = _wiring(clock)
    clock.advance(301)

    result = stage.run(run_ctx)

    assert result.status is StageStatus.FAILED
    assert result.payload["error"]["type"] == "SIGNAL_DELIVERY_ERROR"
    assert result.summary == "Gate expired"
    assert ledger.get("job-42").failure == {"message": "Gate expired", "type": "JobFailed"}
    assert gate.state is GateState.EXPIRED


def test_missing_report_fails_stage(run_ctx, clock):
    gate, ledger, stage = _wiring(clock, reporter=SilentReporter())

    result = stage.run(run_ctx)

    assert result.status is StageStatus.FAILED
    assert result.payload["error"]["type"] == "REPORT_ERROR"
    assert result.summary == "Orchestrator unreachable"
    assert ledger.get("job-42") is None
    assert gate.state is GateState.FIRED_SUCCESS
