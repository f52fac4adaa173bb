"""
Pipeline Orchestrator do Build Bridge.

Executa a sequência fixa Source → Build → Publish → Notify para cada
gatilho aceito e leva a PipelineExecution a um status terminal.

Regras de execução:
    - Estágios rodam estritamente em sequência
    - O artefato do estágio *n* é a única entrada do estágio *n+1*
    - Após a primeira falha, estágios seguintes que não são `always_run`
      são registrados `skipped` e nunca executam
    - O Notify (`always_run`) recebe no RunContext o status upstream e a
      razão da primeira falha
    - Status terminal: `failed` se qualquer estágio falhou (inclusive o
      Notify), senão `succeeded`
    - Sem retry automático

Guardrails:
    - StageResult é frozen: enriquecimento gera nova instância (replace)
    - Exceções que escapam de um estágio viram BridgeErrorPayload em
      `StageResult.payload["error"]`, sem stack trace para o operador
    - Cada execução possui Manifest próprio, persistido em JSON quando
      `engine.manifest_dir` está configurado
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from build_bridge.core.config.hashing import compute_config_hash
from build_bridge.core.config.settings import BridgeConfig
from build_bridge.core.errors import (
    ARTIFACT_NOT_FOUND,
    BUILD_FAILURE,
    ENGINE_CONFIGURATION_ERROR,
    ENGINE_EXECUTION_ERROR,
    PUBLISH_FAILURE,
    REPORT_ERROR,
    SIGNAL_DELIVERY_ERROR,
    SOURCE_FAILURE,
    BridgeErrorPayload,
    artifact_not_found,
    engine_execution_error,
)
from build_bridge.core.exceptions import (
    ArtifactNotFound,
    BridgeException,
    BuildFailure,
    EngineConfigurationError,
    PublishFailure,
    ReportError,
    SignalDeliveryError,
    SourceFailure,
)
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.execution import PipelineExecution, Trigger
from build_bridge.core.pipeline.stage import Stage
from build_bridge.core.pipeline.types import (
    ExecutionStatus,
    StageName,
    StageResult,
    StageStatus,
)
from build_bridge.core.traceability.manifest import (
    ExecutionManifest,
    add_event,
    create_manifest,
    execution_finished,
    save_manifest,
    stage_failed,
    stage_finished,
    stage_skipped,
    stage_started,
)

from .jobs import JobLedger
from .planner import plan_stages


_EXCEPTION_TYPES = {
    SourceFailure: SOURCE_FAILURE,
    BuildFailure: BUILD_FAILURE,
    PublishFailure: PUBLISH_FAILURE,
    ArtifactNotFound: ARTIFACT_NOT_FOUND,
    SignalDeliveryError: SIGNAL_DELIVERY_ERROR,
    ReportError: REPORT_ERROR,
    EngineConfigurationError: ENGINE_CONFIGURATION_ERROR,
}

SKIP_REASON = "skipped due to failed predecessor"


class UnknownExecutionError(KeyError):
    """Nenhuma execução registrada com o id informado."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PipelineOrchestrator:
    """Orchestrator canônico: valida a cadeia uma vez e executa cada gatilho."""

    def __init__(
        self,
        *,
        stages: Sequence[Stage],
        config: BridgeConfig,
        store: Any,
        ledger: Optional[JobLedger] = None,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self.stages: List[Stage] = plan_stages(stages)
        self.config = config
        self.store = store
        self.ledger = ledger if ledger is not None else JobLedger()
        self.config_hash = compute_config_hash(config.to_dict())
        self._id_factory = id_factory

        self._lock = threading.Lock()
        self._executions: Dict[str, PipelineExecution] = {}
        self._manifests: Dict[str, ExecutionManifest] = {}
        self._contexts: Dict[str, RunContext] = {}

    # ------------------------------------------------------------------
    # Consulta
    # ------------------------------------------------------------------
    def get(self, execution_id: str) -> PipelineExecution:
        with self._lock:
            if execution_id not in self._executions:
                raise UnknownExecutionError(execution_id)
            return self._executions[execution_id]

    def manifest_for(self, execution_id: str) -> ExecutionManifest:
        with self._lock:
            if execution_id not in self._manifests:
                raise UnknownExecutionError(execution_id)
            return self._manifests[execution_id]

    def context_for(self, execution_id: str) -> RunContext:
        with self._lock:
            if execution_id not in self._contexts:
                raise UnknownExecutionError(execution_id)
            return self._contexts[execution_id]

    @property
    def executions(self) -> List[PipelineExecution]:
        with self._lock:
            return list(self._executions.values())

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    def create_execution(self, trigger: Trigger) -> PipelineExecution:
        """Cria uma execução nova (ids novos, histórico vazio) sem executá-la."""
        execution = PipelineExecution(
            execution_id=self._id_factory(),
            job_id=self._id_factory(),
            trigger=trigger,
        )
        manifest = create_manifest(
            execution_id=execution.execution_id,
            job_id=execution.job_id,
            started_at=execution.created_at,
            config_hash=self.config_hash,
            trigger=trigger.to_dict(),
        )
        ctx = RunContext(
            execution_id=execution.execution_id,
            job_id=execution.job_id,
            created_at=execution.created_at,
            config=self.config,
            store=self.store,
            meta={"trigger": trigger.to_dict()},
        )
        with self._lock:
            self._executions[execution.execution_id] = execution
            self._manifests[execution.execution_id] = manifest
            self._contexts[execution.execution_id] = ctx
        return execution

    def start(self, trigger: Trigger) -> PipelineExecution:
        """Cria e executa uma execução até o status terminal."""
        return self.run(self.create_execution(trigger))

    def run(self, execution: PipelineExecution) -> PipelineExecution:
        manifest = self.manifest_for(execution.execution_id)
        ctx = self.context_for(execution.execution_id)

        add_event(
            manifest,
            event_type="execution_started",
            ts=_now(),
            payload={"trigger": execution.trigger.to_dict()},
        )
        ctx.log(stage_id="-", level="info", message="execution started", ref=execution.trigger.ref)

        failure_reason: Optional[str] = None
        failed = False

        for stage in self.stages:
            sid = stage.id

            if failed and not stage.always_run:
                execution.record(StageResult(stage_id=sid, status=StageStatus.SKIPPED, summary=SKIP_REASON))
                stage_skipped(manifest, stage_id=sid.value, ts=_now(), reason=SKIP_REASON)
                ctx.log(stage_id=sid.value, level="info", message="stage skipped")
                continue

            if stage.always_run:
                ctx.upstream_status = ExecutionStatus.FAILED if failed else ExecutionStatus.SUCCEEDED
                ctx.upstream_reason = failure_reason

            execution.mark_running(sid)
            stage_started(manifest, stage_id=sid.value, ts=_now())
            ctx.log(stage_id=sid.value, level="info", message="stage started")

            result = self._run_stage(stage, ctx)
            execution.record(result)
            if result.artifact is not None:
                ctx.set_artifact(result.artifact)

            if result.status is StageStatus.FAILED:
                failed = True
                if failure_reason is None:
                    failure_reason = result.error_message or result.summary
                stage_failed(
                    manifest,
                    stage_id=sid.value,
                    ts=_now(),
                    error=dict(result.payload.get("error") or {"message": result.summary}),
                )
                ctx.log(stage_id=sid.value, level="error", message="stage failed", reason=result.summary)
            else:
                stage_finished(manifest, stage_id=sid.value, ts=_now(), result=result.to_dict())
                ctx.log(stage_id=sid.value, level="info", message="stage finished")

        final = ExecutionStatus.FAILED if failed else ExecutionStatus.SUCCEEDED
        execution.finish(final)
        execution_finished(manifest, status=final.value, ts=_now())
        ctx.log(stage_id="-", level="info", message="execution finished", status=final.value)

        if self.config.manifest_dir:
            save_manifest(manifest, Path(self.config.manifest_dir) / f"{execution.execution_id}.json")

        return execution

    # ------------------------------------------------------------------
    # Execução de um estágio
    # ------------------------------------------------------------------
    def _exception_to_error(self, exc: Exception, *, stage: StageName) -> BridgeErrorPayload:
        if isinstance(exc, ArtifactNotFound):
            return artifact_not_found(
                artifact=str(exc.details.get("artifact") or exc.details.get("prefix")),
                required_by=stage.value,
            )
        if isinstance(exc, BridgeException):
            return BridgeErrorPayload(
                type=_EXCEPTION_TYPES.get(type(exc), exc.__class__.__name__),
                message=str(exc) or "Erro de execução",
                details=dict(exc.details or {}),
                hint=exc.hint,
            )
        return engine_execution_error(
            stage=stage.value,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    def _enrich(self, *, stage: Stage, result: StageResult, ctx: RunContext) -> StageResult:
        merged: List[str] = []
        for msg in list(result.warnings) + list(ctx.warnings.get(stage.id.value, [])):
            if msg not in merged:
                merged.append(msg)
        return replace(result, stage_id=stage.id, warnings=merged)

    def _run_stage(self, stage: Stage, ctx: RunContext) -> StageResult:
        sid = stage.id
        try:
            result = stage.run(ctx)
            if not isinstance(result, StageResult):
                error = BridgeErrorPayload(
                    type=ENGINE_CONFIGURATION_ERROR,
                    message="Estágio retornou tipo inválido",
                    details={"stage_id": sid.value, "expected": "StageResult", "received": type(result).__name__},
                    hint="Ajuste o estágio para retornar StageResult",
                )
                return StageResult(
                    stage_id=sid,
                    status=StageStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )
            if not result.status.is_terminal or result.status is StageStatus.SKIPPED:
                raise EngineConfigurationError(
                    message=f"Stage returned non-final status: {result.status.value}",
                    details={"stage_id": sid.value},
                )
            return self._enrich(stage=stage, result=result, ctx=ctx)
        except Exception as e:
            error = self._exception_to_error(e, stage=sid)
            ctx.log(
                stage_id=sid.value,
                level="error",
                message="stage raised",
                error_type=error.type,
                error_message=error.message,
            )
            return self._enrich(
                stage=stage,
                result=StageResult(
                    stage_id=sid,
                    status=StageStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                ),
                ctx=ctx,
            )
