"""
Source Intake: listener de webhook do repositório.

Cada requisição passa por três verificações, nesta ordem:

    1. HMAC do corpo bruto com o segredo compartilhado
       (`X-Hub-Signature-256: sha256=<hex>`; legado `X-Hub-Signature: sha1=<hex>`)
    2. corpo é um objeto JSON
    3. `ref` do payload == `refs/heads/<branch>`

Somente as três juntas iniciam uma execução. Falha de assinatura levanta
AuthenticationError e nenhuma execução é criada. Ref diferente (inclusive
eventos sem `ref`, como `ping`) é aceita sem efeito.

Não há polling: `poll_for_source_changes` é sempre False.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from build_bridge.core.config.settings import BridgeConfig
from build_bridge.core.eventlog import EventLog
from build_bridge.core.exceptions import AuthenticationError, InvalidPayloadError
from build_bridge.core.pipeline.execution import Trigger

SIGNATURE_HEADER = "X-Hub-Signature-256"
LEGACY_SIGNATURE_HEADER = "X-Hub-Signature"

_ALGORITHMS = {"sha256": hashlib.sha256, "sha1": hashlib.sha1}
_HEX_DIGITS = frozenset("0123456789abcdef")


def sign(body: bytes, secret: str, algorithm: str = "sha256") -> str:
    """Valor do header de assinatura para `body` (`<alg>=<hex>`)."""
    digest = hmac.new(secret.encode("utf-8"), body, _ALGORITHMS[algorithm]).hexdigest()
    return f"{algorithm}={digest}"


def verify_signature(body: bytes, signature_header: Optional[str], secret: str) -> None:
    """
    Valida a assinatura HMAC do corpo bruto.

    Raises:
        AuthenticationError: assinatura ausente, malformada ou divergente.
    """
    if not signature_header:
        raise AuthenticationError(message="Missing webhook signature", details={})

    algorithm, sep, received = signature_header.strip().partition("=")
    received = received.lower()
    # digest precisa ser hex ASCII antes do compare_digest
    if not sep or algorithm not in _ALGORITHMS or not received or not set(received) <= _HEX_DIGITS:
        raise AuthenticationError(
            message="Malformed webhook signature",
            details={"algorithm": algorithm if algorithm in _ALGORITHMS else None},
        )

    expected = sign(body, secret, algorithm).partition("=")[2]
    if not hmac.compare_digest(expected.encode("ascii"), received.encode("ascii")):
        raise AuthenticationError(message="Webhook signature mismatch", details={"algorithm": algorithm})


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


@dataclass(frozen=True)
class IntakeDecision:
    started: bool
    reason: str
    ref: Optional[str] = None
    execution_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"started": self.started, "reason": self.reason}
        if self.ref is not None:
            out["ref"] = self.ref
        if self.execution_id is not None:
            out["execution_id"] = self.execution_id
        return out


class SourceIntake:
    """
    Dispatcher do webhook.

    `start_execution` recebe o Trigger e devolve o id da execução criada.
    """

    poll_for_source_changes = False

    def __init__(self, *, config: BridgeConfig, start_execution: Callable[[Trigger], str]):
        self.config = config
        self._start_execution = start_execution
        self.events = EventLog("intake")

    def receive(self, body: bytes, headers: Mapping[str, str]) -> IntakeDecision:
        signature = _header(headers, SIGNATURE_HEADER) or _header(headers, LEGACY_SIGNATURE_HEADER)
        try:
            verify_signature(body, signature, self.config.shared_secret)
        except AuthenticationError as e:
            self.events.log(level="warning", message="webhook rejected", reason=e.message)
            raise

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            self.events.log(level="warning", message="webhook rejected", reason="invalid json")
            raise InvalidPayloadError(message="Webhook body is not valid JSON", details={}) from e
        if not isinstance(payload, dict):
            self.events.log(level="warning", message="webhook rejected", reason="invalid json")
            raise InvalidPayloadError(message="Webhook body must be a JSON object", details={})

        ref = payload.get("ref")
        if ref != self.config.branch_ref:
            self.events.log(level="info", message="webhook ignored", ref=ref, expected=self.config.branch_ref)
            return IntakeDecision(started=False, reason="ref_mismatch", ref=ref if isinstance(ref, str) else None)

        pusher = payload.get("pusher")
        trigger = Trigger(
            ref=ref,
            commit=payload.get("after") if isinstance(payload.get("after"), str) else None,
            source="webhook",
            pusher=pusher.get("name") if isinstance(pusher, dict) else None,
        )
        execution_id = self._start_execution(trigger)
        self.events.log(level="info", message="execution started", ref=ref, execution_id=execution_id)
        return IntakeDecision(started=True, reason="ref_match", ref=ref, execution_id=execution_id)
