"""Colaboradores externos consumidos pelos estágios Source e Build.

O Build Bridge não faz checkout nem compila código: ele delega a dois
colaboradores, especificados aqui apenas pelas interfaces que o core
consome.

- `SourceProvider.fetch(...)` materializa o checkout de um ref como
  `{caminho relativo: bytes}`
- `BuildRunner.run(...)` executa um comando fixo sobre esse workspace em
  ambiente isolado e devolve `BuildOutcome` (exit code + arquivos de saída)

Implementações incluídas:
- `StaticSourceProvider` / `DirectorySourceProvider`
- `SubprocessBuildRunner`: diretório temporário + subprocess, sem shell

Limites explícitos:
- Sem cache de dependências entre builds
- Sem paralelismo: um build por invocação, sem estado entre invocações
"""

from __future__ import annotations

import fnmatch
import shlex
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable


@runtime_checkable
class SourceProvider(Protocol):
    def fetch(
        self,
        *,
        owner: str,
        repo: str,
        ref: str,
        commit: Optional[str] = None,
    ) -> Dict[str, bytes]:
        ...


@dataclass(frozen=True)
class BuildOutcome:
    """Resultado bruto de uma invocação do Build Runner."""
    exit_code: int
    files: Dict[str, bytes] = field(default_factory=dict)
    log: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@runtime_checkable
class BuildRunner(Protocol):
    def run(self, *, command: str, workspace: Mapping[str, bytes]) -> BuildOutcome:
        ...


class StaticSourceProvider:
    """Devolve sempre o mesmo conjunto de arquivos, registrando cada fetch."""

    def __init__(self, files: Mapping[str, bytes]):
        self._files = dict(files)
        self.fetches: list = []

    def fetch(self, *, owner: str, repo: str, ref: str, commit: Optional[str] = None) -> Dict[str, bytes]:
        self.fetches.append({"owner": owner, "repo": repo, "ref": ref, "commit": commit})
        return dict(self._files)


class DirectorySourceProvider:
    """Lê um checkout já existente em disco (ignora `.git/`)."""

    def __init__(self, *, root: Union[str, Path]):
        self.root = Path(root)

    def fetch(self, *, owner: str, repo: str, ref: str, commit: Optional[str] = None) -> Dict[str, bytes]:
        if not self.root.is_dir():
            raise FileNotFoundError(f"Source checkout not found: {self.root}")
        files: Dict[str, bytes] = {}
        for path in sorted(self.root.rglob("*")):
            rel = path.relative_to(self.root)
            if not path.is_file() or rel.parts[0] == ".git":
                continue
            files[rel.as_posix()] = path.read_bytes()
        return files


class SubprocessBuildRunner:
    """
    Executa o comando de build em um diretório temporário isolado.

    Os arquivos de saída são os arquivos novos ou alterados após o
    comando; se `output_patterns` for informado, apenas os que casam com
    algum padrão (fnmatch sobre o caminho relativo) são coletados.
    """

    def __init__(
        self,
        *,
        output_patterns: Sequence[str] = (),
        timeout_seconds: float = 1800.0,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.output_patterns = tuple(output_patterns)
        self.timeout_seconds = timeout_seconds
        self.env = dict(env) if env is not None else None

    def _collect(self, workdir: Path, before: Mapping[str, bytes]) -> Dict[str, bytes]:
        out: Dict[str, bytes] = {}
        for path in sorted(workdir.rglob("*")):
            if not path.is_file():
                continue
            rel = path.relative_to(workdir).as_posix()
            if self.output_patterns:
                if not any(fnmatch.fnmatch(rel, pat) for pat in self.output_patterns):
                    continue
            content = path.read_bytes()
            if not self.output_patterns and before.get(rel) == content:
                continue
            out[rel] = content
        return out

    def run(self, *, command: str, workspace: Mapping[str, bytes]) -> BuildOutcome:
        argv = shlex.split(command)
        if not argv:
            raise ValueError("Build command must not be empty")

        with tempfile.TemporaryDirectory(prefix="build-bridge-") as tmp:
            workdir = Path(tmp)
            for rel, content in workspace.items():
                target = workdir / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)

            try:
                proc = subprocess.run(
                    argv,
                    cwd=workdir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout_seconds,
                    env=self.env,
                )
            except subprocess.TimeoutExpired as e:
                return BuildOutcome(exit_code=-1, files={}, log=f"build timed out after {e.timeout}s")
            except FileNotFoundError as e:
                return BuildOutcome(exit_code=127, files={}, log=str(e))

            log = (proc.stdout or "") + (proc.stderr or "")
            if proc.returncode != 0:
                return BuildOutcome(exit_code=proc.returncode, files={}, log=log)
            return BuildOutcome(exit_code=0, files=self._collect(workdir, workspace), log=log)


__all__ = [
    "BuildOutcome",
    "BuildRunner",
    "DirectorySourceProvider",
    "SourceProvider",
    "StaticSourceProvider",
    "SubprocessBuildRunner",
]
