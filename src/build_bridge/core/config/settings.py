"""
Configuração tipada de uma implantação do Build Bridge.

`BridgeConfig` é o valor explícito passado a cada componente (Source
Intake, Orchestrator, estágios, gate) no momento da construção. Nenhum
componente lê configuração de forma ambiente.

Formato esperado (YAML):

    source:
      repo_owner: aws-samples
      repo_name: amazon-kinesis-analytics-beam-taxi-consumer
      branch: master
      shared_secret: "..."
    build:
      command: mvn clean package -B
    publish:
      artifact_name_pattern: "beam-taxi-count-*.jar"
      prefix: artifacts/
    gate:
      timeout_seconds: 300
      base_url: http://localhost:8000
    engine:
      manifest_dir: runs/

Todas as chaves de `source`, `build.command`, `publish.artifact_name_pattern`
e `gate.timeout_seconds` são obrigatórias; apenas `source.branch` tem
default ("master"). `publish.prefix`, `gate.base_url` e
`engine.manifest_dir` são suplementares e têm defaults próprios.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidConfigValueError, MissingConfigKeyError

DEFAULT_BRANCH = "master"
DEFAULT_PUBLISH_PREFIX = "artifacts/"
DEFAULT_GATE_BASE_URL = "http://localhost:8000"


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name)
    if value is None:
        raise MissingConfigKeyError(f"Missing required config section: {name}")
    if not isinstance(value, dict):
        raise InvalidConfigValueError(f"Config section '{name}' must be a mapping")
    return value


def _required_str(section: Dict[str, Any], key: str, path: str) -> str:
    if key not in section or section[key] is None:
        raise MissingConfigKeyError(f"Missing required config: {path}")
    value = section[key]
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfigValueError(f"Invalid config: {path} must be a non-empty string")
    return value


@dataclass(frozen=True)
class BridgeConfig:
    """Superfície de configuração resolvida e validada."""

    repo_owner: str
    repo_name: str
    shared_secret: str
    artifact_name_pattern: str
    build_command: str
    gate_timeout: float
    branch: str = DEFAULT_BRANCH
    publish_prefix: str = DEFAULT_PUBLISH_PREFIX
    gate_base_url: str = DEFAULT_GATE_BASE_URL
    manifest_dir: Optional[str] = None

    @property
    def branch_ref(self) -> str:
        return f"refs/heads/{self.branch}"

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "BridgeConfig":
        """
        Valida a configuração efetiva e produz um `BridgeConfig`.

        Raises:
            MissingConfigKeyError: Se uma chave obrigatória estiver ausente.
            InvalidConfigValueError: Se um valor tiver tipo ou faixa inválidos.
        """
        if not isinstance(cfg, dict):
            raise InvalidConfigValueError("Config root must be a mapping")

        source = _section(cfg, "source")
        build = _section(cfg, "build")
        publish = _section(cfg, "publish")
        gate = _section(cfg, "gate")
        engine = cfg.get("engine") or {}
        if not isinstance(engine, dict):
            raise InvalidConfigValueError("Config section 'engine' must be a mapping")

        branch = source.get("branch", DEFAULT_BRANCH)
        if branch is None:
            branch = DEFAULT_BRANCH
        if not isinstance(branch, str) or not branch.strip():
            raise InvalidConfigValueError("Invalid config: source.branch must be a non-empty string")

        if "timeout_seconds" not in gate or gate["timeout_seconds"] is None:
            raise MissingConfigKeyError("Missing required config: gate.timeout_seconds")
        timeout = gate["timeout_seconds"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidConfigValueError("Invalid config: gate.timeout_seconds must be a positive number")

        prefix = publish.get("prefix", DEFAULT_PUBLISH_PREFIX)
        if not isinstance(prefix, str):
            raise InvalidConfigValueError("Invalid config: publish.prefix must be a string")

        base_url = gate.get("base_url", DEFAULT_GATE_BASE_URL)
        if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
            raise InvalidConfigValueError("Invalid config: gate.base_url must be an http(s) URL")

        manifest_dir = engine.get("manifest_dir")
        if manifest_dir is not None and not isinstance(manifest_dir, str):
            raise InvalidConfigValueError("Invalid config: engine.manifest_dir must be a string")

        return cls(
            repo_owner=_required_str(source, "repo_owner", "source.repo_owner"),
            repo_name=_required_str(source, "repo_name", "source.repo_name"),
            shared_secret=_required_str(source, "shared_secret", "source.shared_secret"),
            artifact_name_pattern=_required_str(
                publish, "artifact_name_pattern", "publish.artifact_name_pattern"
            ),
            build_command=_required_str(build, "command", "build.command"),
            gate_timeout=float(timeout),
            branch=branch,
            publish_prefix=prefix,
            gate_base_url=base_url.rstrip("/"),
            manifest_dir=manifest_dir,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Forma aninhada equivalente à do arquivo de configuração."""
        return {
            "source": {
                "repo_owner": self.repo_owner,
                "repo_name": self.repo_name,
                "branch": self.branch,
                "shared_secret": self.shared_secret,
            },
            "build": {"command": self.build_command},
            "publish": {
                "artifact_name_pattern": self.artifact_name_pattern,
                "prefix": self.publish_prefix,
            },
            "gate": {
                "timeout_seconds": self.gate_timeout,
                "base_url": self.gate_base_url,
            },
            "engine": {"manifest_dir": self.manifest_dir},
        }
