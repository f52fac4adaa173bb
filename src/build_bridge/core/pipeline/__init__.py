# src/build_bridge/core/pipeline/__init__.py
"""
# Pipeline Core: Build Bridge

Contratos e estruturas fundamentais da sequência fixa
Source → Build → Publish → Notify.

## Componentes

- **types**: `StageName`, `StageStatus`, `ExecutionStatus`, `ArtifactRef`, `StageResult`
- **stage**: `Stage` (Protocol), contrato mínimo de um estágio
- **context**: `RunContext`, contexto de execução compartilhado
- **execution**: `PipelineExecution` e `Trigger`

## Invariantes

- O artefato produzido pelo estágio *n* é a única entrada do estágio *n+1*
- Estágios não executam fora do controle do Orchestrator
- Uma execução terminal é imutável
"""

from .context import RunContext
from .execution import (
    ExecutionFinalizedError,
    InvalidStageTransitionError,
    PipelineExecution,
    Trigger,
)
from .stage import Stage
from .types import (
    BUILD_ARTIFACT,
    SOURCE_ARTIFACT,
    STAGE_ORDER,
    ArtifactRef,
    ExecutionStatus,
    StageName,
    StageResult,
    StageStatus,
)

__all__ = [
    "ArtifactRef",
    "BUILD_ARTIFACT",
    "ExecutionFinalizedError",
    "ExecutionStatus",
    "InvalidStageTransitionError",
    "PipelineExecution",
    "RunContext",
    "SOURCE_ARTIFACT",
    "STAGE_ORDER",
    "Stage",
    "StageName",
    "StageResult",
    "StageStatus",
    "Trigger",
]
