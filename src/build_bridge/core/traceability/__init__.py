# src/build_bridge/core/traceability/__init__.py
"""
Rastreabilidade de execuções do Build Bridge.

API pública:
    - ExecutionManifest  → estrutura canônica do Manifest de uma execução
    - create_manifest    → criação explícita do Manifest
    - add_event          → registro explícito no Event Log
    - stage_started / stage_finished / stage_failed / stage_skipped
    - execution_finished → fecha a execução com status terminal
    - save_manifest / load_manifest → persistência JSON determinística

Nenhum evento é emitido implicitamente; a ordem do Event Log reflete a
ordem de chamada.
"""

from .manifest import (
    ExecutionManifest,
    add_event,
    create_manifest,
    execution_finished,
    load_manifest,
    save_manifest,
    stage_failed,
    stage_finished,
    stage_skipped,
    stage_started,
)

__all__ = [
    "ExecutionManifest",
    "add_event",
    "create_manifest",
    "execution_finished",
    "load_manifest",
    "save_manifest",
    "stage_failed",
    "stage_finished",
    "stage_skipped",
    "stage_started",
]
