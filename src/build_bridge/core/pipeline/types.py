# src/build_bridge/core/pipeline/types.py
"""
Tipos canônicos do pipeline do Build Bridge.

Este módulo define as estruturas e enums que padronizam a comunicação
entre estágios, Orchestrator e a camada de rastreabilidade.

Componentes principais:
    - StageName      → identidade dos quatro estágios fixos
    - StageStatus    → estados de um estágio dentro de uma execução
    - ExecutionStatus→ estado de uma PipelineExecution
    - ArtifactRef    → referência imutável a um artefato no Artifact Store
    - StageResult    → resultado imutável produzido por um estágio

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (valores textuais canônicos)
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - StageResult e ArtifactRef são imutáveis após a criação
    - Nomes de artefatos são convenções fixas, não descobertas dinamicamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# Nomes de artefatos fixados por convenção entre estágios consecutivos.
SOURCE_ARTIFACT = "SourceOutput"
BUILD_ARTIFACT = "BuildOutput"


class StageName(str, Enum):
    """
    Identidade dos estágios da sequência fixa Source → Build → Publish → Notify.

    A ordem de declaração deste enum é a ordem de execução.
    """
    SOURCE = "source"
    BUILD = "build"
    PUBLISH = "publish"
    NOTIFY = "notify"


STAGE_ORDER: Tuple[StageName, ...] = tuple(StageName)


class StageStatus(str, Enum):
    """
    Estados de um estágio dentro de uma execução.

    Transições permitidas: pending → running → {succeeded, failed}.
    `skipped` é o estado registrado para um estágio que nunca saiu de
    `pending` porque um predecessor falhou; é terminal como os demais.
    """
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (StageStatus.SUCCEEDED, StageStatus.FAILED, StageStatus.SKIPPED)


class ExecutionStatus(str, Enum):
    """Estado de uma PipelineExecution. `succeeded` e `failed` são terminais."""
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ExecutionStatus.RUNNING


@dataclass(frozen=True)
class ArtifactRef:
    """
    Referência a um artefato gravado no Artifact Store.

    Campos:
        - name: nome convencional do artefato (ex.: "BuildOutput")
        - prefix: localização no Artifact Store
        - files: nomes dos objetos gravados sob o prefixo (ordenados)
        - digest: SHA-256 do conteúdo (endereçamento por conteúdo)
    """
    name: str
    prefix: str
    files: Tuple[str, ...] = ()
    digest: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "prefix": self.prefix,
            "files": list(self.files),
            "digest": self.digest,
        }


@dataclass(frozen=True)
class StageResult:
    """
    Resultado imutável da execução de um estágio.

    Campos:
        - stage_id: identidade do estágio
        - status: estado final (succeeded, failed ou skipped)
        - summary: resumo textual; em falhas, a mensagem humana do erro
        - artifact: artefato produzido (entrada do próximo estágio), se houver
        - metrics: métricas numéricas (ex.: arquivos publicados)
        - warnings: avisos não fatais
        - payload: dados adicionais; em falhas contém `error`

    Invariantes:
        - Uma instância nunca é alterada após criada
        - O enriquecimento pelo Orchestrator cria uma nova instância
    """
    stage_id: StageName
    status: StageStatus
    summary: str
    artifact: Optional[ArtifactRef] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def error_message(self) -> Optional[str]:
        error = self.payload.get("error") if isinstance(self.payload, dict) else None
        if isinstance(error, dict):
            return error.get("message")
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage_id": self.stage_id.value,
            "status": self.status.value,
            "summary": self.summary,
            "artifact": self.artifact.to_dict() if self.artifact else None,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "payload": dict(self.payload),
        }
