"""
Montagem de uma implantação do Build Bridge a partir de um BridgeConfig.

Uma implantação tem exatamente:
    - um Completion Gate (criado uma vez, com o timeout configurado)
    - um pipeline linear Source → Build → Publish → Notify
    - um Source Intake ligado ao Orchestrator
    - um JobLedger que recebe os reports da Notifier Bridge

Por padrão o sinal e o report trafegam em processo (LocalGateSignaller,
LedgerJobReporter). Canais HTTP podem ser injetados para o cenário em
que gate e Orchestrator vivem em outro plano de controle.

`run_inline=True` executa a execução dentro da chamada do webhook; com
`run_inline=False` o Intake apenas cria a execução e quem recebeu o
webhook (o servidor HTTP) agenda `run_execution`.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from build_bridge.collaborators import BuildRunner, SourceProvider, SubprocessBuildRunner
from build_bridge.core.config.loader import load_config
from build_bridge.core.config.settings import BridgeConfig
from build_bridge.core.engine.jobs import JobLedger
from build_bridge.core.engine.orchestrator import PipelineOrchestrator
from build_bridge.core.pipeline.execution import PipelineExecution, Trigger
from build_bridge.gate.completion_gate import CompletionGate, GateRegistry
from build_bridge.intake.webhook import SourceIntake
from build_bridge.notifier.bridge import NotifierBridge
from build_bridge.notifier.reporters import JobReporter, LedgerJobReporter
from build_bridge.notifier.signallers import GateSignaller, LocalGateSignaller
from build_bridge.provisioning import BlockingProvisioner
from build_bridge.stages import BuildStage, NotifyStage, PublishStage, SourceStage
from build_bridge.storage.artifact_store import ArtifactStore, InMemoryArtifactStore

DEFAULT_DEPENDENTS = ("stream-application",)


@dataclass
class Deployment:
    config: BridgeConfig
    store: ArtifactStore
    registry: GateRegistry
    gate: CompletionGate
    ledger: JobLedger
    bridge: NotifierBridge
    orchestrator: PipelineOrchestrator
    provisioner: BlockingProvisioner
    run_inline: bool = True
    intake: Optional[SourceIntake] = None

    def __post_init__(self) -> None:
        if self.intake is None:
            self.intake = SourceIntake(config=self.config, start_execution=self.start_execution)

    def start_execution(self, trigger: Trigger) -> str:
        execution = self.orchestrator.create_execution(trigger)
        if self.run_inline:
            self.orchestrator.run(execution)
        return execution.execution_id

    def run_execution(self, execution_id: str) -> PipelineExecution:
        return self.orchestrator.run(self.orchestrator.get(execution_id))


def build_deployment(
    config: BridgeConfig,
    *,
    source_provider: SourceProvider,
    build_runner: Optional[BuildRunner] = None,
    store: Optional[ArtifactStore] = None,
    signaller: Optional[GateSignaller] = None,
    reporter: Optional[JobReporter] = None,
    clock: Callable[[], float] = time.monotonic,
    id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    dependents: Sequence[str] = DEFAULT_DEPENDENTS,
    run_inline: bool = True,
) -> Deployment:
    store = store if store is not None else InMemoryArtifactStore()
    registry = GateRegistry(base_url=config.gate_base_url, clock=clock)
    gate = registry.create(timeout=config.gate_timeout)
    ledger = JobLedger()

    bridge = NotifierBridge(
        signaller=signaller if signaller is not None else LocalGateSignaller(registry),
        reporter=reporter if reporter is not None else LedgerJobReporter(ledger),
    )
    stages = [
        SourceStage(provider=source_provider),
        BuildStage(runner=build_runner if build_runner is not None else SubprocessBuildRunner()),
        PublishStage(),
        NotifyStage(bridge=bridge, ledger=ledger, gate_handle=gate.handle),
    ]
    orchestrator = PipelineOrchestrator(
        stages=stages,
        config=config,
        store=store,
        ledger=ledger,
        id_factory=id_factory,
    )
    return Deployment(
        config=config,
        store=store,
        registry=registry,
        gate=gate,
        ledger=ledger,
        bridge=bridge,
        orchestrator=orchestrator,
        provisioner=BlockingProvisioner(gate=gate, dependents=dependents),
        run_inline=run_inline,
    )


def load_deployment(
    *,
    defaults_path: Union[str, Path],
    local_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    **kwargs,
) -> Deployment:
    """Resolve defaults ← local ← overrides e monta a implantação."""
    cfg = load_config(defaults_path=defaults_path, local_path=local_path, overrides=overrides)
    return build_deployment(BridgeConfig.from_dict(cfg), **kwargs)
