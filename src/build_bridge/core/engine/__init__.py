"""
Engine do Build Bridge.

Este pacote planeja e executa a sequência fixa de estágios e guarda os
reports de job que chegam pela Notifier Bridge.

Componentes principais:
    - planner      → validação estrutural da cadeia linear de estágios
    - orchestrator → execução sequencial com skip após falha e Manifest
    - jobs         → JobLedger (primeiro report por job vence)

Invariantes:
    - Estágios só executam após o predecessor terminar
    - Cada estágio executa no máximo uma vez por execução
    - Uma execução terminal nunca volta a mudar
"""

from .jobs import JobLedger, JobReport, UnknownJobError
from .orchestrator import PipelineOrchestrator, UnknownExecutionError
from .planner import (
    AlwaysRunError,
    ArtifactChainError,
    DuplicateStageError,
    StageOrderError,
    StagePlanError,
    plan_stages,
)

__all__ = [
    "AlwaysRunError",
    "ArtifactChainError",
    "DuplicateStageError",
    "JobLedger",
    "JobReport",
    "PipelineOrchestrator",
    "StageOrderError",
    "StagePlanError",
    "UnknownExecutionError",
    "UnknownJobError",
    "plan_stages",
]
