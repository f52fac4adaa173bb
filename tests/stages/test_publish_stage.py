# tests/stages/test_publish_stage.py
"""
Testes do estágio Publish.

Os testes garantem que:
- só arquivos cujo nome base casa com o padrão são publicados
- arquivos .zip são extraídos e o padrão é aplicado a cada entrada achatada
- a ausência de arquivo correspondente é uma falha de publicação
- colisões de nome após o achatamento são rejeitadas
"""

import pytest

from build_bridge.core.exceptions import PublishFailure
from build_bridge.core.pipeline import StageStatus
from build_bridge.stages import PublishStage, select_and_flatten
from build_bridge.stages._store import store_artifact


def _ctx_with_build(run_ctx, files):
    run_ctx.set_artifact(store_artifact(run_ctx, "BuildOutput", files))
    return run_ctx


def test_publishes_matching_files_flattened(run_ctx, store):
    ctx = _ctx_with_build(
        run_ctx,
        {
            "target/artifact-1.0.jar": b"JAR",
            "target/original-app.jar": b"NO",
            "target/classes/App.class": b"CLASS",
        },
    )

    result = PublishStage().run(ctx)

    assert result.status is StageStatus.SUCCEEDED
    assert result.payload["keys"] == ["artifacts/artifact-1.0.jar"]
    assert store.get("artifacts/") == {"artifact-1.0.jar": b"JAR"}
    assert result.metrics == {"files": 1}


def test_zip_entries_are_matched_after_flattening(zip_bytes):
    archive = zip_bytes({"dist/lib/artifact-core.jar": b"CORE", "dist/README": b"R", "dist/empty/": b""})

    out = select_and_flatten({"build/artifact-bundle.zip": archive}, "artifact-*")

    assert out == {"artifact-core.jar": b"CORE"}


def test_build_zip_with_jar_is_published(run_ctx, store, zip_bytes):
    archive = zip_bytes({"target/artifact-1.jar": b"JAR", "target/classes/App.class": b"C"})
    ctx = _ctx_with_build(run_ctx, {"BuildOutput.zip": archive})

    result = PublishStage().run(ctx)

    assert result.status is StageStatus.SUCCEEDED
    assert store.get("artifacts/") == {"artifact-1.jar": b"JAR"}


def test_loose_files_and_archive_entries_share_the_pattern(zip_bytes):
    archive = zip_bytes({"x/artifact-2.jar": b"2", "x/other.jar": b"O"})

    out = select_and_flatten(
        {"target/artifact-1.jar": b"1", "target/notes.txt": b"N", "out.zip": archive},
        "artifact-*.jar",
    )

    assert out == {"artifact-1.jar": b"1", "artifact-2.jar": b"2"}


def test_no_matching_file_fails(run_ctx):
    ctx = _ctx_with_build(run_ctx, {"target/other.jar": b"x"})

    result = PublishStage().run(ctx)

    assert result.status is StageStatus.FAILED
    assert result.payload["error"]["type"] == "PUBLISH_FAILURE"
    assert result.summary == "Publish Failed: no file matches artifact-*.jar"


def test_name_collision_after_flattening():
    with pytest.raises(PublishFailure):
        select_and_flatten({"a/artifact-1.jar": b"1", "b/artifact-1.jar": b"2"}, "artifact-*.jar")


def test_corrupt_zip_fails(run_ctx):
    ctx = _ctx_with_build(run_ctx, {"target/artifact-1.jar": b"x", "BuildOutput.zip": b"not a zip"})

    result = PublishStage().run(ctx)

    assert result.status is StageStatus.FAILED
    assert result.summary == "Publish Failed: invalid archive: BuildOutput.zip"


def test_store_error_is_publish_failure(run_ctx):
    class BrokenStore:
        def __init__(self, inner):
            self.inner = inner

        def get(self, prefix):
            return self.inner.get(prefix)

        def put(self, prefix, files):
            if prefix == "artifacts/":
                raise OSError("bucket unavailable")
            return self.inner.put(prefix, files)

    run_ctx.store = BrokenStore(run_ctx.store)
    ctx = _ctx_with_build(run_ctx, {"target/artifact-1.jar": b"x"})

    result = PublishStage().run(ctx)

    assert result.status is StageStatus.FAILED
    assert result.summary == "Publish Failed: OSError: bucket unavailable"
