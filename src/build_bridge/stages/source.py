"""Estágio canônico: source.

Responsabilidades:
- materializar o checkout do ref que disparou a execução (via SourceProvider)
- gravar o checkout no Artifact Store como `SourceOutput`

Limites explícitos:
- NÃO faz polling do repositório (o gatilho é sempre o webhook)
- NÃO interpreta o conteúdo do checkout
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from build_bridge.collaborators import SourceProvider
from build_bridge.core.errors import SOURCE_FAILURE, BridgeErrorPayload
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.types import SOURCE_ARTIFACT, StageName, StageResult, StageStatus

from ._store import store_artifact


@dataclass
class SourceStage:
    """Busca o checkout do repositório configurado e publica `SourceOutput`."""

    provider: SourceProvider
    id: StageName = StageName.SOURCE
    input_artifact: Optional[str] = None
    output_artifact: Optional[str] = SOURCE_ARTIFACT
    always_run: bool = False

    def run(self, ctx: RunContext) -> StageResult:
        cfg = ctx.config
        trigger = ctx.meta.get("trigger") or {}
        ref = trigger.get("ref") or cfg.branch_ref

        try:
            files = self.provider.fetch(
                owner=cfg.repo_owner,
                repo=cfg.repo_name,
                ref=ref,
                commit=trigger.get("commit"),
            )
            if not files:
                raise ValueError("checkout is empty")
        except Exception as e:
            error = BridgeErrorPayload(
                type=SOURCE_FAILURE,
                message="Source Failed",
                details={
                    "repository": f"{cfg.repo_owner}/{cfg.repo_name}",
                    "ref": ref,
                    "exc_type": e.__class__.__name__,
                    "exc_message": str(e) or None,
                },
                hint="Verifique o acesso ao repositório e se o ref ainda existe.",
            )
            ctx.log(stage_id=self.id.value, level="error", message="source fetch failed", ref=ref)
            return StageResult(
                stage_id=self.id,
                status=StageStatus.FAILED,
                summary=error.message,
                payload={"error": error.to_dict()},
            )

        artifact = store_artifact(ctx, SOURCE_ARTIFACT, files)
        ctx.log(
            stage_id=self.id.value,
            level="info",
            message="source materialized",
            ref=ref,
            files=len(files),
        )
        return StageResult(
            stage_id=self.id,
            status=StageStatus.SUCCEEDED,
            summary="source materialized",
            artifact=artifact,
            metrics={"files": len(files)},
            payload={"ref": ref, "commit": trigger.get("commit")},
        )
