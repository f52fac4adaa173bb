"""Helpers compartilhados pelos estágios que gravam artefatos intermediários."""

from __future__ import annotations

from typing import Mapping

from build_bridge.core.config.hashing import compute_content_digest
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.types import ArtifactRef


def artifact_prefix(ctx: RunContext, name: str) -> str:
    return f"pipeline/{ctx.execution_id}/{name}/"


def store_artifact(ctx: RunContext, name: str, files: Mapping[str, bytes]) -> ArtifactRef:
    """Grava `files` no Artifact Store e devolve a referência nomeada."""
    prefix = artifact_prefix(ctx, name)
    ctx.store.put(prefix, files)
    return ArtifactRef(
        name=name,
        prefix=prefix,
        files=tuple(sorted(files)),
        digest=compute_content_digest(files),
    )
