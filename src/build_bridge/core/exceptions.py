"""
Build Bridge: Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Build Bridge.

Objetivo:
- Permitir que estágios, intake e bridge levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para BridgeErrorPayload
- Evitar ValueError/RuntimeError genéricos nas fronteiras de falha

Regras:
- Exceções carregam apenas dados estruturados (serializáveis).
- O nome da classe é o código estável usado pelo Orchestrator quando
  nenhum `error_type` explícito é informado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class BridgeException(Exception):
    """Base class para exceções internas do Build Bridge.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AuthenticationError(BridgeException):
    """Assinatura HMAC ausente, malformada ou divergente do segredo."""


@dataclass(frozen=True)
class InvalidPayloadError(BridgeException):
    """Corpo do webhook (ou do sinal) não é um objeto JSON válido."""


# ---------------------------------------------------------------------------
# Estágios
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFailure(BridgeException):
    """Checkout do repositório não pôde ser materializado."""


@dataclass(frozen=True)
class BuildFailure(BridgeException):
    """Build terminou com exit code não-zero ou sem o artefato esperado."""


@dataclass(frozen=True)
class PublishFailure(BridgeException):
    """Cópia do artefato para o Artifact Store falhou."""


@dataclass(frozen=True)
class ArtifactNotFound(BridgeException):
    """Artefato nomeado não existe no contexto ou no Artifact Store."""


# ---------------------------------------------------------------------------
# Notifier Bridge
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SignalDeliveryError(BridgeException):
    """Gate inalcançável, handle malformado ou sinal recusado."""


@dataclass(frozen=True)
class ReportError(BridgeException):
    """Orchestrator inalcançável a partir da bridge (terminal, sem retry)."""


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfigurationError(BridgeException):
    """Configuração inválida ou inconsistente para execução."""


@dataclass(frozen=True)
class EngineExecutionError(BridgeException):
    """Erro inesperado durante execução do Orchestrator (encapsulado)."""
