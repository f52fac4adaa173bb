"""Artifact Store (colaborador externo): interface consumida pelo pipeline.

O pipeline só depende de duas operações:

- `put(prefix, files)`: grava um conjunto de objetos sob um prefixo
- `get(prefix)`: lê de volta todos os objetos sob um prefixo

Duas implementações acompanham o pacote:

- `InMemoryArtifactStore`: testes e execuções efêmeras
- `LocalArtifactStore`: diretório no filesystem (um "bucket" local)

Decisões (v1):
- Prefixos são normalizados para terminar em "/" (exceto o prefixo vazio)
- Nomes de objetos são relativos ao prefixo e não podem escapar dele ("..")
- `get` de um prefixo sem objetos levanta ArtifactNotFound

Limites explícitos:
- Não versiona objetos
- Não implementa listagem paginada nem ACLs
"""

from __future__ import annotations

import threading
from pathlib import Path, PurePosixPath
from typing import Dict, List, Mapping, Protocol, Union, runtime_checkable

from build_bridge.core.exceptions import ArtifactNotFound


def normalize_prefix(prefix: str) -> str:
    p = (prefix or "").strip().lstrip("/")
    if p and not p.endswith("/"):
        p += "/"
    return p


def _safe_name(name: str) -> str:
    pure = PurePosixPath(name.replace("\\", "/"))
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise ValueError(f"Invalid object name: {name!r}")
    return pure.as_posix()


@runtime_checkable
class ArtifactStore(Protocol):
    def put(self, prefix: str, files: Mapping[str, bytes]) -> List[str]:
        """Grava `files` sob `prefix`; retorna as chaves completas gravadas."""
        ...

    def get(self, prefix: str) -> Dict[str, bytes]:
        """Retorna {nome relativo: conteúdo} de todos os objetos sob `prefix`."""
        ...


class InMemoryArtifactStore:
    """Store em memória, thread-safe."""

    def __init__(self) -> None:
        self._objects: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, prefix: str, files: Mapping[str, bytes]) -> List[str]:
        p = normalize_prefix(prefix)
        keys: List[str] = []
        with self._lock:
            for name in sorted(files):
                key = p + _safe_name(name)
                self._objects[key] = bytes(files[name])
                keys.append(key)
        return keys

    def get(self, prefix: str) -> Dict[str, bytes]:
        p = normalize_prefix(prefix)
        with self._lock:
            found = {k[len(p):]: v for k, v in self._objects.items() if k.startswith(p)}
        if not found:
            raise ArtifactNotFound(
                message=f"No objects under prefix: {p}",
                details={"prefix": p},
            )
        return found

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._objects)


class LocalArtifactStore:
    """Store em diretório local; cada chave vira um arquivo sob `root`."""

    def __init__(self, *, root: Union[str, Path]):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root.joinpath(*PurePosixPath(key).parts)

    def put(self, prefix: str, files: Mapping[str, bytes]) -> List[str]:
        p = normalize_prefix(prefix)
        keys: List[str] = []
        for name in sorted(files):
            key = p + _safe_name(name)
            path = self._path(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(bytes(files[name]))
            keys.append(key)
        return keys

    def get(self, prefix: str) -> Dict[str, bytes]:
        p = normalize_prefix(prefix)
        base = self._path(p) if p else self.root
        if not base.is_dir():
            raise ArtifactNotFound(
                message=f"No objects under prefix: {p}",
                details={"prefix": p, "root": str(self.root)},
            )
        found = {
            path.relative_to(base).as_posix(): path.read_bytes()
            for path in sorted(base.rglob("*"))
            if path.is_file()
        }
        if not found:
            raise ArtifactNotFound(
                message=f"No objects under prefix: {p}",
                details={"prefix": p, "root": str(self.root)},
            )
        return found


__all__ = [
    "ArtifactStore",
    "InMemoryArtifactStore",
    "LocalArtifactStore",
    "normalize_prefix",
]
