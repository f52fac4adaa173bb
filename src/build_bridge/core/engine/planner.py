"""
Planejador da sequência de estágios do Build Bridge.

Diferente de um planejador de DAG genérico, o Build Bridge executa
exatamente uma cadeia linear por implantação: Source → Build → Publish →
Notify. O planner valida essa cadeia antes de qualquer execução.

Validações:
    - ids são `StageName`, únicos e na ordem canônica
    - o artefato de entrada de cada estágio é o artefato de saída do
      predecessor (o primeiro estágio não consome artefato)
    - apenas o último estágio é `always_run` (o Notify precisa reportar
      também as execuções que falharam)

Limites explícitos:
    - Não executa estágios
    - Não interage com RunContext ou Manifest
    - Não reordena estágios: a ordem declarada precisa já ser a canônica
"""

from __future__ import annotations

from typing import Iterable, List

from build_bridge.core.pipeline.stage import Stage
from build_bridge.core.pipeline.types import STAGE_ORDER, StageName


class StagePlanError(ValueError):
    """Erro estrutural na definição da sequência de estágios."""


class DuplicateStageError(StagePlanError):
    """Dois estágios declaram o mesmo id."""


class StageOrderError(StagePlanError):
    """
    A sequência declarada não corresponde a Source → Build → Publish → Notify.

    Cobre estágios ausentes, estágios extras e ordem trocada.
    """


class ArtifactChainError(StagePlanError):
    """O artefato de entrada de um estágio não é o artefato de saída do predecessor."""


class AlwaysRunError(StagePlanError):
    """`always_run` declarado fora do último estágio, ou ausente nele."""


def plan_stages(stages: Iterable[Stage]) -> List[Stage]:
    """
    Valida a cadeia linear de estágios e a devolve na ordem de execução.

    Args:
        stages: estágios declarados, já na ordem canônica.

    Returns:
        Lista de estágios pronta para o Orchestrator.

    Raises:
        DuplicateStageError, StageOrderError, ArtifactChainError, AlwaysRunError
    """
    stage_list = list(stages)

    seen = set()
    for s in stage_list:
        sid = getattr(s, "id", None)
        if not isinstance(sid, StageName):
            raise StageOrderError(f"stage.id must be a StageName, got {sid!r}")
        if sid in seen:
            raise DuplicateStageError(f"Duplicate stage id: {sid.value}")
        seen.add(sid)

    declared = tuple(s.id for s in stage_list)
    if declared != STAGE_ORDER:
        raise StageOrderError(
            "Stages must be "
            + " -> ".join(n.value for n in STAGE_ORDER)
            + ", got "
            + (" -> ".join(n.value for n in declared) or "<empty>")
        )

    previous_output = None
    for s in stage_list:
        expected = previous_output
        actual = getattr(s, "input_artifact", None)
        if actual != expected:
            raise ArtifactChainError(
                f"Stage '{s.id.value}' consumes {actual!r} but predecessor produces {expected!r}"
            )
        previous_output = getattr(s, "output_artifact", None)

    *head, last = stage_list
    for s in head:
        if getattr(s, "always_run", False):
            raise AlwaysRunError(f"Only the last stage may be always_run, got '{s.id.value}'")
    if not getattr(last, "always_run", False):
        raise AlwaysRunError(f"Last stage '{last.id.value}' must be always_run")

    return stage_list
