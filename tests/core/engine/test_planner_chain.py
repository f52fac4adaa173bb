# tests/core/engine/test_planner_chain.py
"""
Testes estruturais do planner da cadeia linear de estágios.

Este módulo valida que o planner aceita exatamente a cadeia
Source → Build → Publish → Notify e rejeita, antes de qualquer execução:
- ids duplicados ou fora da ordem canônica
- artefatos de entrada que não são a saída do predecessor
- `always_run` fora do último estágio

Limites explícitos:
    - Não executa estágios
"""

import pytest

from build_bridge.core.engine import (
    AlwaysRunError,
    ArtifactChainError,
    DuplicateStageError,
    StageOrderError,
    plan_stages,
)
from build_bridge.core.pipeline import BUILD_ARTIFACT, SOURCE_ARTIFACT, StageName


class DummyStage:
    """Estágio mínimo por duck typing; nunca é executado pelo planner."""

    def __init__(self, sid, input_artifact=None, output_artifact=None, always_run=False):
        self.id = sid
        self.input_artifact = input_artifact
        self.output_artifact = output_artifact
        self.always_run = always_run

    def run(self, ctx):  # pragma: no cover
        raise AssertionError("planner must not run stages")


def _chain():
    return [
        DummyStage(StageName.SOURCE, None, SOURCE_ARTIFACT),
        DummyStage(StageName.BUILD, SOURCE_ARTIFACT, BUILD_ARTIFACT),
        DummyStage(StageName.PUBLISH, BUILD_ARTIFACT, None),
        DummyStage(StageName.NOTIFY, None, None, always_run=True),
    ]


def test_valid_chain_is_returned_in_order():
    stages = _chain()
    assert plan_stages(stages) == stages


def test_duplicate_stage():
    stages = _chain()
    stages[1] = DummyStage(StageName.SOURCE, None, SOURCE_ARTIFACT)
    with pytest.raises(DuplicateStageError):
        plan_stages(stages)


def test_wrong_order():
    stages = _chain()
    stages[1], stages[2] = stages[2], stages[1]
    with pytest.raises(StageOrderError):
        plan_stages(stages)


def test_missing_stage():
    with pytest.raises(StageOrderError):
        plan_stages(_chain()[:3])


def test_string_ids_are_rejected():
    stages = _chain()
    stages[0].id = "source"
    with pytest.raises(StageOrderError):
        plan_stages(stages)


def test_broken_artifact_chain():
    stages = _chain()
    stages[2].input_artifact = SOURCE_ARTIFACT
    with pytest.raises(ArtifactChainError):
        plan_stages(stages)


def test_notify_must_be_always_run():
    stages = _chain()
    stages[3].always_run = False
    with pytest.raises(AlwaysRunError):
        plan_stages(stages)


def test_only_notify_may_be_always_run():
    stages = _chain()
    stages[1].always_run = True
    with pytest.raises(AlwaysRunError):
        plan_stages(stages)
