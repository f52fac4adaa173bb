# src/build_bridge/core/pipeline/stage.py
"""
Contrato canônico de estágio do Build Bridge.

Um estágio é a menor unidade executável do pipeline. Ele consome no
máximo um artefato nomeado (produzido pelo predecessor) e produz no
máximo um artefato nomeado (consumido pelo sucessor).

Princípios fundamentais:
    - Estágios não conhecem o Orchestrator nem o planner
    - Estágios não controlam ordem de execução
    - Comunicação entre estágios é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .context import RunContext
from .types import StageName, StageResult


@runtime_checkable
class Stage(Protocol):
    """
    Contrato canônico de um estágio.

    Atributos obrigatórios:
        - id: identidade do estágio (`StageName`)
        - input_artifact: nome do artefato de entrada, ou None
        - output_artifact: nome do artefato produzido, ou None
        - always_run: se True, o estágio executa mesmo após falha upstream

    Invariantes:
        - `run` é executado no máximo uma vez por execução
        - O retorno de `run` é sempre um `StageResult`

    Limites explícitos:
        - Não define retry
        - Não registra eventos no Manifest diretamente
    """
    id: StageName
    input_artifact: Optional[str]
    output_artifact: Optional[str]
    always_run: bool

    def run(self, ctx: RunContext) -> StageResult:
        """Executa o estágio uma única vez usando exclusivamente o RunContext."""
        ...
