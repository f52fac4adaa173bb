"""Estágio canônico: notify.

Único estágio `always_run`: executa após sucesso ou falha upstream, pois
é o único canal de volta ao Completion Gate. Não consome artefato; recebe
o status terminal upstream pelo RunContext.

Fluxo:
- registra o job da execução no JobLedger
- invoca a Notifier Bridge com o NotifyJob
- lê o report do job: sucesso conclui o estágio; report de falha ou
  ausência de report falham o estágio
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from build_bridge.core.engine.jobs import JobLedger
from build_bridge.core.errors import REPORT_ERROR, SIGNAL_DELIVERY_ERROR, BridgeErrorPayload
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.types import ExecutionStatus, StageName, StageResult, StageStatus
from build_bridge.notifier.bridge import NotifierBridge, NotifyJob


@dataclass
class NotifyStage:
    bridge: NotifierBridge
    ledger: JobLedger
    gate_handle: str
    id: StageName = StageName.NOTIFY
    input_artifact: Optional[str] = None
    output_artifact: Optional[str] = None
    always_run: bool = True

    def run(self, ctx: RunContext) -> StageResult:
        job = NotifyJob(
            execution_id=ctx.execution_id,
            job_id=ctx.job_id,
            gate_handle=self.gate_handle,
            execution_status=ctx.upstream_status or ExecutionStatus.SUCCEEDED,
            reason=ctx.upstream_reason,
        )
        self.ledger.register(job.job_id)
        outcome = self.bridge.handle(job)
        report = self.ledger.get(job.job_id)

        payload = {"job": job.to_dict(), "bridge": outcome.to_dict()}

        if report is not None and report.succeeded:
            ctx.log(stage_id=self.id.value, level="info", message="job succeeded", job_id=job.job_id)
            return StageResult(
                stage_id=self.id,
                status=StageStatus.SUCCEEDED,
                summary="gate signalled",
                payload=payload,
            )

        if report is None:
            error = BridgeErrorPayload(
                type=REPORT_ERROR,
                message=outcome.report_error or "Job report missing",
                details={"job_id": job.job_id, "signal_error": outcome.signal_error},
                hint="A bridge não conseguiu reportar ao Orchestrator; o gate pode expirar por timeout.",
            )
        else:
            error = BridgeErrorPayload(
                type=SIGNAL_DELIVERY_ERROR,
                message=report.failure.get("message") or "Job failed",
                details={"job_id": job.job_id, "failure_type": report.failure.get("type")},
                hint="Verifique o handle do gate e se ele já disparou ou expirou.",
            )

        ctx.log(stage_id=self.id.value, level="error", message="job failed", job_id=job.job_id, reason=error.message)
        payload["error"] = error.to_dict()
        return StageResult(
            stage_id=self.id,
            status=StageStatus.FAILED,
            summary=error.message,
            payload=payload,
        )
