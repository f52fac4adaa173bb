# src/build_bridge/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura passada a todos os
estágios de uma PipelineExecution.

O RunContext é o único meio permitido de:
    - passar o artefato de um estágio ao seguinte (por nome convencional)
    - acessar a configuração e o Artifact Store da implantação
    - registrar logs estruturados de execução
    - coletar warnings não fatais por estágio
    - entregar ao Notify o status terminal upstream da execução

Invariantes:
    - Cada execução possui um RunContext próprio
    - Artefatos são indexados por nome explícito
    - Logs sempre incluem `execution_id` e `stage_id`

Limites explícitos:
    - Não executa estágios
    - Não persiste dados automaticamente
    - Não registra eventos no Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from build_bridge.core.config.settings import BridgeConfig
from build_bridge.core.exceptions import ArtifactNotFound

from .types import ArtifactRef, ExecutionStatus


@dataclass
class RunContext:
    """
    Contexto de execução de uma PipelineExecution.

    O RunContext consolida:
        - identidade da execução (execution_id, job_id, created_at)
        - configuração da implantação (`BridgeConfig`)
        - o Artifact Store compartilhado entre estágios
        - referências aos artefatos produzidos nesta execução
        - logs estruturados e warnings por estágio
        - o status upstream preenchido pelo Orchestrator antes do Notify

    Decisões arquiteturais:
        - Estágios interagem apenas via RunContext
        - O store é injetado; o contexto nunca cria clientes de storage
    """
    execution_id: str
    job_id: str
    created_at: datetime
    config: BridgeConfig
    store: Any
    meta: Dict[str, Any] = field(default_factory=dict)

    upstream_status: Optional[ExecutionStatus] = None
    upstream_reason: Optional[str] = None

    _artifacts: Dict[str, ArtifactRef] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artefatos nomeados
    # -----------------------------
    def set_artifact(self, ref: ArtifactRef) -> None:
        self._artifacts[ref.name] = ref

    def has_artifact(self, name: str) -> bool:
        return name in self._artifacts

    def get_artifact(self, name: str, *, required_by: Optional[str] = None) -> ArtifactRef:
        if name not in self._artifacts:
            raise ArtifactNotFound(
                message=f"Missing input artifact: {name}",
                details={"artifact": name, "required_by": required_by},
            )
        return self._artifacts[name]

    @property
    def artifacts(self) -> Dict[str, ArtifactRef]:
        return dict(self._artifacts)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, stage_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "execution_id": self.execution_id,
            "stage_id": stage_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, stage_id: str, message: str) -> None:
        if stage_id not in self.warnings:
            self.warnings[stage_id] = []
        self.warnings[stage_id].append(message)
