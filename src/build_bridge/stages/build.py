"""Estágio canônico: build.

Responsabilidades:
- ler `SourceOutput` do Artifact Store
- invocar o Build Runner com o comando fixo da configuração
- gravar os arquivos de saída como `BuildOutput`

Falhas (sempre "Compilation Failed"):
- exit code não-zero
- build sem nenhum arquivo de saída
- erro ao invocar o Build Runner
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from build_bridge.collaborators import BuildRunner
from build_bridge.core.errors import build_failure
from build_bridge.core.pipeline.context import RunContext
from build_bridge.core.pipeline.types import (
    BUILD_ARTIFACT,
    SOURCE_ARTIFACT,
    StageName,
    StageResult,
    StageStatus,
)

from ._store import store_artifact


@dataclass
class BuildStage:
    runner: BuildRunner
    id: StageName = StageName.BUILD
    input_artifact: Optional[str] = SOURCE_ARTIFACT
    output_artifact: Optional[str] = BUILD_ARTIFACT
    always_run: bool = False

    def _failed(self, ctx: RunContext, **details) -> StageResult:
        error = build_failure(command=ctx.config.build_command, **details)
        ctx.log(stage_id=self.id.value, level="error", message="build failed", **details)
        return StageResult(
            stage_id=self.id,
            status=StageStatus.FAILED,
            summary=error.message,
            payload={"error": error.to_dict()},
        )

    def run(self, ctx: RunContext) -> StageResult:
        source = ctx.get_artifact(SOURCE_ARTIFACT, required_by=self.id.value)
        workspace = ctx.store.get(source.prefix)

        try:
            outcome = self.runner.run(command=ctx.config.build_command, workspace=workspace)
        except Exception as e:
            ctx.add_warning(stage_id=self.id.value, message=f"build runner raised {e.__class__.__name__}: {e}")
            return self._failed(ctx)

        if not outcome.succeeded:
            return self._failed(ctx, exit_code=outcome.exit_code)
        if not outcome.files:
            return self._failed(ctx, exit_code=outcome.exit_code, missing_output=True)

        artifact = store_artifact(ctx, BUILD_ARTIFACT, outcome.files)
        ctx.log(stage_id=self.id.value, level="info", message="build succeeded", files=len(outcome.files))
        return StageResult(
            stage_id=self.id,
            status=StageStatus.SUCCEEDED,
            summary="Compilation Succeeded",
            artifact=artifact,
            metrics={"files": len(outcome.files), "exit_code": outcome.exit_code},
        )
