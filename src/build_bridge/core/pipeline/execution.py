# src/build_bridge/core/pipeline/execution.py
"""
PipelineExecution: uma run da sequência fixa de estágios.

Uma execução nasce de um webhook aceito (ou de um start manual) com
histórico de estágios vazio, é mutada apenas pelo Orchestrator à medida
que os estágios terminam e torna-se imutável ao atingir um status
terminal.

Invariantes:
    - Todos os estágios iniciam em `pending`
    - Um estágio só vai a `running` a partir de `pending`
    - Um estágio em estado terminal nunca muda de estado
    - Após `finish`, qualquer mutação levanta ExecutionFinalizedError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .types import (
    STAGE_ORDER,
    ArtifactRef,
    ExecutionStatus,
    StageName,
    StageResult,
    StageStatus,
)


class ExecutionFinalizedError(RuntimeError):
    """Tentativa de mutar uma execução que já atingiu status terminal."""


class InvalidStageTransitionError(RuntimeError):
    """Transição de estado de estágio fora de pending → running → terminal."""


@dataclass(frozen=True)
class Trigger:
    """Origem de uma execução: ref e commit do push que a disparou."""
    ref: str
    commit: Optional[str] = None
    source: str = "webhook"
    pusher: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ref": self.ref,
            "commit": self.commit,
            "source": self.source,
            "pusher": self.pusher,
        }


@dataclass
class PipelineExecution:
    """Estado mutável (até o fim) de uma execução do pipeline."""

    execution_id: str
    job_id: str
    trigger: Trigger
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: ExecutionStatus = ExecutionStatus.RUNNING
    current_stage: Optional[StageName] = None
    stages: Dict[StageName, StageStatus] = field(
        default_factory=lambda: {name: StageStatus.PENDING for name in STAGE_ORDER}
    )
    results: Dict[StageName, StageResult] = field(default_factory=dict)
    artifacts: Dict[str, ArtifactRef] = field(default_factory=dict)
    finished_at: Optional[datetime] = None

    def _ensure_open(self) -> None:
        if self.status.is_terminal:
            raise ExecutionFinalizedError(
                f"Execution {self.execution_id} is already {self.status.value}"
            )

    def mark_running(self, stage: StageName) -> None:
        self._ensure_open()
        current = self.stages.get(stage, StageStatus.PENDING)
        if current is not StageStatus.PENDING:
            raise InvalidStageTransitionError(
                f"Stage {stage.value} cannot start from {current.value}"
            )
        self.stages[stage] = StageStatus.RUNNING
        self.current_stage = stage

    def record(self, result: StageResult) -> None:
        self._ensure_open()
        if not result.status.is_terminal:
            raise InvalidStageTransitionError(
                f"Stage {result.stage_id.value} result must be terminal, got {result.status.value}"
            )
        current = self.stages.get(result.stage_id, StageStatus.PENDING)
        if current.is_terminal:
            raise InvalidStageTransitionError(
                f"Stage {result.stage_id.value} already finished as {current.value}"
            )
        self.stages[result.stage_id] = result.status
        self.results[result.stage_id] = result
        if result.artifact is not None:
            self.artifacts[result.artifact.name] = result.artifact

    def finish(self, status: ExecutionStatus) -> None:
        self._ensure_open()
        if not status.is_terminal:
            raise ValueError("finish() requires a terminal status")
        self.status = status
        self.current_stage = None
        self.finished_at = datetime.now(timezone.utc)

    @property
    def failed_stage(self) -> Optional[StageName]:
        for name in STAGE_ORDER:
            if self.stages.get(name) is StageStatus.FAILED:
                return name
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "job_id": self.job_id,
            "trigger": self.trigger.to_dict(),
            "status": self.status.value,
            "current_stage": self.current_stage.value if self.current_stage else None,
            "stages": {name.value: status.value for name, status in self.stages.items()},
            "artifacts": {name: ref.to_dict() for name, ref in self.artifacts.items()},
            "created_at": self.created_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
