"""
Estágios canônicos da sequência Source → Build → Publish → Notify.

Cada estágio segue o contrato `Stage` (core.pipeline.stage) e devolve um
StageResult com `payload["error"]` em falhas esperadas.
"""

from .build import BuildStage
from .notify import NotifyStage
from .publish import PublishStage, select_and_flatten
from .source import SourceStage

__all__ = [
    "BuildStage",
    "NotifyStage",
    "PublishStage",
    "SourceStage",
    "select_and_flatten",
]
