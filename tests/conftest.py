"""
Fixtures compartilhados para testes do Build Bridge.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração mínima e determinística (dict e `BridgeConfig`)
- relógio controlável para o Completion Gate
- colaboradores falsos (checkout e build runner)
- RunContext isolado sobre um Artifact Store em memória
- fábrica de implantações completas

Decisões arquiteturais:
    - Fixtures são simples e explícitas
    - Colaboradores falsos usam duck typing, sem herança
    - Nenhuma fixture faz I/O de rede ou executa subprocessos

Invariantes:
    - Dados retornados são determinísticos e isolados por teste
    - Nenhuma fixture executa pipeline automaticamente

Limites explícitos:
    - Não substituem testes de integração com um build real
"""

import io
import zipfile
from datetime import datetime, timezone

import pytest

from build_bridge.collaborators import BuildOutcome, StaticSourceProvider
from build_bridge.core.config.settings import BridgeConfig
from build_bridge.core.pipeline.context import RunContext
from build_bridge.deployment import build_deployment
from build_bridge.storage.artifact_store import InMemoryArtifactStore


SECRET = "s3cr3t"


@pytest.fixture
def bridge_config_dict() -> dict:
    """
    Configuração efetiva mínima de uma implantação.

    Espelha o formato do arquivo YAML (`source`, `build`, `publish`,
    `gate`) com valores fixos. O timeout é curto para que testes de
    expiração com relógio real terminem rápido.

    Invariantes:
        - Contém todas as chaves obrigatórias
        - `source.branch` é "master"
    """
    return {
        "source": {
            "repo_owner": "aws-samples",
            "repo_name": "beam-taxi-consumer",
            "branch": "master",
            "shared_secret": SECRET,
        },
        "build": {"command": "mvn clean package -B"},
        "publish": {"artifact_name_pattern": "artifact-*.jar", "prefix": "artifacts/"},
        "gate": {"timeout_seconds": 300, "base_url": "http://gate.test"},
    }


@pytest.fixture
def bridge_config(bridge_config_dict) -> BridgeConfig:
    return BridgeConfig.from_dict(bridge_config_dict)


class FakeClock:
    """Relógio monotônico manual: só avança quando o teste chama `advance`."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class FakeBuildRunner:
    """
    Build runner falso.

    Devolve sempre o mesmo `BuildOutcome` e registra o comando e o
    workspace recebidos, para que os testes verifiquem que o Build
    consumiu exatamente o artefato do Source.
    """

    def __init__(self, *, exit_code: int = 0, files=None, raises: Exception = None):
        self.exit_code = exit_code
        self.files = dict(files or {})
        self.raises = raises
        self.calls = []

    def run(self, *, command, workspace):
        self.calls.append({"command": command, "workspace": dict(workspace)})
        if self.raises is not None:
            raise self.raises
        return BuildOutcome(exit_code=self.exit_code, files=dict(self.files), log="")


@pytest.fixture
def source_files() -> dict:
    return {
        "pom.xml": b"<project/>",
        "src/main/java/App.java": b"class App {}",
    }


@pytest.fixture
def source_provider(source_files) -> StaticSourceProvider:
    return StaticSourceProvider(source_files)


@pytest.fixture
def build_outputs() -> dict:
    return {
        "target/artifact-1.0.jar": b"JAR",
        "target/classes/App.class": b"CLASS",
    }


@pytest.fixture
def zip_bytes():
    """Fábrica de arquivos .zip em memória a partir de {caminho: bytes}."""

    def _make(entries: dict) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            for name, content in entries.items():
                zf.writestr(name, content)
        return buf.getvalue()

    return _make


@pytest.fixture
def store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def run_ctx(bridge_config, store) -> RunContext:
    """
    RunContext isolado com ids fixos.

    Usado por testes de estágio que executam `stage.run(ctx)` diretamente,
    sem Orchestrator.
    """
    return RunContext(
        execution_id="exec-1",
        job_id="job-42",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        config=bridge_config,
        store=store,
        meta={"trigger": {"ref": "refs/heads/master", "commit": "abc123"}},
    )


@pytest.fixture
def make_deployment(bridge_config, source_provider, build_outputs, clock):
    """
    Fábrica de implantações completas em processo.

    Os ids são gerados em sequência (`exec-1`, `job-42`, `exec-2`,
    `job-43`, ...) para que os testes possam afirmar o `UniqueId` do sinal.
    """

    def _make(*, runner=None, config=None, **kwargs):
        counter = {"n": 0}

        def ids():
            counter["n"] += 1
            n = counter["n"]
            return f"exec-{(n + 1) // 2}" if n % 2 else f"job-{40 + n // 2 + 1}"

        kwargs.setdefault("clock", clock)
        return build_deployment(
            config or bridge_config,
            source_provider=source_provider,
            build_runner=runner if runner is not None else FakeBuildRunner(files=build_outputs),
            id_factory=ids,
            **kwargs,
        )

    return _make


@pytest.fixture
def fake_runner_cls():
    return FakeBuildRunner
