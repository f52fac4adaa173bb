"""
Build Bridge: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Build Bridge.
Erros são artefatos operacionais: uma falha de estágio vira um payload
serializável gravado no StageResult e no Manifest da execução, e é esse
payload (não um stack trace) que o Notify traduz em `Reason` para o gate.

Todo erro deve ser:

- explícito
- serializável
- rastreável
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BridgeErrorPayload:
    """
    Payload canônico de erro do Build Bridge.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta e humana; é o texto que chega ao `Reason` do gate
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Intake
AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
INVALID_PAYLOAD = "INVALID_PAYLOAD"

# Estágios
SOURCE_FAILURE = "SOURCE_FAILURE"
BUILD_FAILURE = "BUILD_FAILURE"
PUBLISH_FAILURE = "PUBLISH_FAILURE"
ARTIFACT_NOT_FOUND = "ARTIFACT_NOT_FOUND"

# Bridge
SIGNAL_DELIVERY_ERROR = "SIGNAL_DELIVERY_ERROR"
REPORT_ERROR = "REPORT_ERROR"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def build_failure(
    *,
    exit_code: Optional[int] = None,
    missing_output: bool = False,
    command: Optional[str] = None,
    hint: str = "Inspecione o log do build runner; o pipeline não reexecuta o build automaticamente.",
) -> BridgeErrorPayload:
    return BridgeErrorPayload(
        type=BUILD_FAILURE,
        message="Compilation Failed",
        details={
            "exit_code": exit_code,
            "missing_output": missing_output,
            "command": command,
        },
        hint=hint,
    )


def publish_failure(
    *,
    reason: str,
    pattern: Optional[str] = None,
    prefix: Optional[str] = None,
    hint: str = "Confira o padrão de nome do artefato e o prefixo de publicação na configuração.",
) -> BridgeErrorPayload:
    return BridgeErrorPayload(
        type=PUBLISH_FAILURE,
        message=f"Publish Failed: {reason}",
        details={
            "pattern": pattern,
            "prefix": prefix,
        },
        hint=hint,
    )


def artifact_not_found(
    *,
    artifact: str,
    required_by: Optional[str] = None,
    hint: str = "O estágio anterior não publicou o artefato esperado; verifique a ordem dos estágios.",
) -> BridgeErrorPayload:
    return BridgeErrorPayload(
        type=ARTIFACT_NOT_FOUND,
        message="Artefato de entrada não encontrado",
        details={
            "artifact": artifact,
            "required_by": required_by,
        },
        hint=hint,
    )


def engine_execution_error(
    *,
    stage: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o event log da execução. Nenhum retry é aplicado automaticamente.",
) -> BridgeErrorPayload:
    return BridgeErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução do pipeline",
        details={
            "stage": stage,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a definição dos estágios antes de reexecutar.",
) -> BridgeErrorPayload:
    return BridgeErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
