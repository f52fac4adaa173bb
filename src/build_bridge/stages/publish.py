"""Estágio canônico: publish.

Copia para o Artifact Store, sob o prefixo de publicação, os arquivos de
`BuildOutput` cujo nome base casa com `publish.artifact_name_pattern`.

Regras:
- todo arquivo `.zip` de `BuildOutput` é extraído; o próprio `.zip` nunca
  é publicado
- todos os caminhos (inclusive entradas de zip) são achatados para o nome base
- o padrão (fnmatch) é aplicado ao nome base já achatado
- dois arquivos selecionados com o mesmo nome base são um erro

Falhas ("Publish Failed: ..."):
- nenhum arquivo casa com o padrão
- arquivo `.zip` inválido
- colisão de nomes após o achatamento
- erro do Artifact Store ao gravar
"""

from __future__ import annotations

import fnmatch
import io
import zipfile
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterator, Mapping, Optional, Tuple

from build_bridge.core.config.hashing import compute_content_digest
from build_bridge.core.errors import publish_failure
from build_bridge.core.exceptions import PublishFailure
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.types import (
    BUILD_ARTIFACT,
    ArtifactRef,
    StageName,
    StageResult,
    StageStatus,
)
from build_bridge.storage.artifact_store import normalize_prefix


def _basename(path: str) -> str:
    return PurePosixPath(path.replace("\\", "/")).name


def _add(out: Dict[str, bytes], name: str, content: bytes, origin: str) -> None:
    if name in out:
        raise PublishFailure(
            message=f"duplicate file name after flattening: {name}",
            details={"name": name, "origin": origin},
        )
    out[name] = content


def _expand(path: str, content: bytes) -> Iterator[Tuple[str, bytes, str]]:
    """Entradas achatadas de um arquivo de `BuildOutput`: `(nome base, bytes, origem)`."""
    base = _basename(path)
    if not base.lower().endswith(".zip"):
        yield base, content, path
        return
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            entries = [(info.filename, archive.read(info)) for info in archive.infolist() if not info.is_dir()]
    except zipfile.BadZipFile as e:
        raise PublishFailure(
            message=f"invalid archive: {base}",
            details={"path": path, "exc_message": str(e)},
        ) from e
    for name, data in entries:
        yield _basename(name), data, f"{path}!{name}"


def select_and_flatten(files: Mapping[str, bytes], pattern: str) -> Dict[str, bytes]:
    """
    Extrai os `.zip`, achata os caminhos e seleciona por `pattern`.

    O padrão casa com o nome base de cada entrada já achatada, nunca com o
    nome do arquivo `.zip` que a contém.

    Raises:
        PublishFailure: zip inválido ou colisão de nomes.
    """
    out: Dict[str, bytes] = {}
    for path in sorted(files):
        for name, content, origin in _expand(path, files[path]):
            if fnmatch.fnmatch(name, pattern):
                _add(out, name, content, origin)
    return out


@dataclass
class PublishStage:
    id: StageName = StageName.PUBLISH
    input_artifact: Optional[str] = BUILD_ARTIFACT
    output_artifact: Optional[str] = None
    always_run: bool = False

    def _failed(self, ctx: RunContext, reason: str) -> StageResult:
        error = publish_failure(
            reason=reason,
            pattern=ctx.config.artifact_name_pattern,
            prefix=ctx.config.publish_prefix,
        )
        ctx.log(stage_id=self.id.value, level="error", message="publish failed", reason=reason)
        return StageResult(
            stage_id=self.id,
            status=StageStatus.FAILED,
            summary=error.message,
            payload={"error": error.to_dict()},
        )

    def run(self, ctx: RunContext) -> StageResult:
        cfg = ctx.config
        build = ctx.get_artifact(BUILD_ARTIFACT, required_by=self.id.value)

        try:
            selected = select_and_flatten(ctx.store.get(build.prefix), cfg.artifact_name_pattern)
        except PublishFailure as e:
            return self._failed(ctx, e.message)

        if not selected:
            return self._failed(ctx, f"no file matches {cfg.artifact_name_pattern}")

        prefix = normalize_prefix(cfg.publish_prefix)
        try:
            keys = ctx.store.put(prefix, selected)
        except Exception as e:
            return self._failed(ctx, f"{e.__class__.__name__}: {e}")

        published = ArtifactRef(
            name="Published",
            prefix=prefix,
            files=tuple(sorted(selected)),
            digest=compute_content_digest(selected),
        )
        ctx.log(stage_id=self.id.value, level="info", message="artifacts published", prefix=prefix, files=len(keys))
        return StageResult(
            stage_id=self.id,
            status=StageStatus.SUCCEEDED,
            summary="artifacts published",
            metrics={"files": len(keys)},
            payload={"published": published.to_dict(), "keys": list(keys)},
        )
