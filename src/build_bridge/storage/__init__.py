from .artifact_store import ArtifactStore, InMemoryArtifactStore, LocalArtifactStore, normalize_prefix

__all__ = ["ArtifactStore", "InMemoryArtifactStore", "LocalArtifactStore", "normalize_prefix"]
