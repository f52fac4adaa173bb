"""
Completion Gate: primitiva de sincronização de disparo único com timeout.

O processo de provisionamento externo bloqueia em um único gate por
implantação. O gate é satisfeito exatamente uma vez por um sinal
explícito (status + payload) ou expira após o timeout configurado.

Máquina de estados:

    waiting ──primeiro sinal válido──▶ fired_success | fired_failure
       │
       └──timeout sem sinal──────────▶ expired

Regras:
    - O status e o payload registrados são os do primeiro sinal, verbatim
    - Em `fired_*`, sinais seguintes são no-ops idempotentes (IGNORED)
    - Em `expired`, sinais seguintes são recusados (REJECTED), sem exceção
    - `expired` é tratado pelo chamador bloqueado como falha, mas é
      distinguível nos diagnósticos (`GateOutcome.expired`)

Concorrência:
    Um único `threading.Condition` guarda a flag de três estados; o
    primeiro sinal vence por compare-and-set sob o lock. A expiração é
    avaliada preguiçosamente contra o relógio injetado em toda leitura,
    sinal e espera, de modo que não há thread de timer.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from build_bridge.core.eventlog import EventLog
from build_bridge.core.exceptions import InvalidPayloadError

SIGNAL_SUCCESS = "SUCCESS"
SIGNAL_FAILURE = "FAILURE"


class GateState(str, Enum):
    WAITING = "waiting"
    FIRED_SUCCESS = "fired_success"
    FIRED_FAILURE = "fired_failure"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not GateState.WAITING


class SignalOutcome(str, Enum):
    """O que o gate fez com um sinal recebido."""
    RECORDED = "recorded"
    IGNORED = "ignored"
    REJECTED = "rejected"


@dataclass(frozen=True)
class GateSignal:
    """
    Sinal do protocolo do gate.

    Forma de fio: `{"Status": "SUCCESS"|"FAILURE", "Reason": str,
    "UniqueId": str, "Data": str}`.
    """
    status: str
    reason: str
    unique_id: str
    data: str = ""

    def __post_init__(self) -> None:
        if self.status not in (SIGNAL_SUCCESS, SIGNAL_FAILURE):
            raise InvalidPayloadError(
                message=f"Invalid signal status: {self.status!r}",
                details={"status": self.status},
            )
        if not isinstance(self.unique_id, str) or not self.unique_id:
            raise InvalidPayloadError(
                message="Signal UniqueId must be a non-empty string",
                details={"unique_id": self.unique_id},
            )

    @property
    def succeeded(self) -> bool:
        return self.status == SIGNAL_SUCCESS

    def to_wire(self) -> Dict[str, str]:
        return {
            "Status": self.status,
            "Reason": self.reason,
            "UniqueId": self.unique_id,
            "Data": self.data,
        }

    @classmethod
    def from_wire(cls, body: Any) -> "GateSignal":
        if not isinstance(body, dict):
            raise InvalidPayloadError(message="Signal body must be a JSON object", details={})
        for key in ("Reason", "Data"):
            if key in body and not isinstance(body[key], str):
                raise InvalidPayloadError(
                    message=f"Signal field {key} must be a string",
                    details={"field": key},
                )
        return cls(
            status=body.get("Status"),
            reason=body.get("Reason", ""),
            unique_id=body.get("UniqueId"),
            data=body.get("Data", ""),
        )


@dataclass(frozen=True)
class GateOutcome:
    """Estado observado pelo processo bloqueado quando o gate sai de `waiting`."""
    state: GateState
    signal: Optional[GateSignal] = None
    resolved_at: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is GateState.FIRED_SUCCESS

    @property
    def expired(self) -> bool:
        return self.state is GateState.EXPIRED

    @property
    def reason(self) -> str:
        return self.signal.reason if self.signal else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "succeeded": self.succeeded,
            "expired": self.expired,
            "signal": self.signal.to_wire() if self.signal else None,
            "resolved_at": self.resolved_at,
        }


class CompletionGate:
    """Gate de disparo único (count = 1) e timeout fixo."""

    count = 1

    def __init__(
        self,
        *,
        handle: str,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.05,
        token: Optional[str] = None,
    ):
        if timeout <= 0:
            raise ValueError("Gate timeout must be positive")
        self.handle = handle
        self.token = token
        self.timeout = float(timeout)
        self._clock = clock
        self._poll_interval = poll_interval
        self._cond = threading.Condition(threading.Lock())
        self._state = GateState.WAITING
        self._signal: Optional[GateSignal] = None
        self._resolved_at: Optional[str] = None
        self._deadline = clock() + self.timeout
        self.events = EventLog("gate")

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------
    def _expire_if_due_locked(self) -> None:
        if self._state is GateState.WAITING and self._clock() >= self._deadline:
            self._state = GateState.EXPIRED
            self._resolved_at = datetime.now(timezone.utc).isoformat()
            self.events.log(level="warning", message="gate expired", timeout=self.timeout)
            self._cond.notify_all()

    @property
    def state(self) -> GateState:
        with self._cond:
            self._expire_if_due_locked()
            return self._state

    @property
    def fired(self) -> bool:
        return self.state in (GateState.FIRED_SUCCESS, GateState.FIRED_FAILURE)

    def outcome(self) -> GateOutcome:
        with self._cond:
            self._expire_if_due_locked()
            return GateOutcome(state=self._state, signal=self._signal, resolved_at=self._resolved_at)

    # ------------------------------------------------------------------
    # Sinal
    # ------------------------------------------------------------------
    def signal(self, signal: GateSignal) -> SignalOutcome:
        """
        Entrega um sinal ao gate.

        Returns:
            SignalOutcome.RECORDED para o primeiro sinal em `waiting`;
            IGNORED se o gate já disparou; REJECTED se já expirou.
        """
        with self._cond:
            self._expire_if_due_locked()

            if self._state is GateState.WAITING:
                self._signal = signal
                self._state = GateState.FIRED_SUCCESS if signal.succeeded else GateState.FIRED_FAILURE
                self._resolved_at = datetime.now(timezone.utc).isoformat()
                self.events.log(
                    level="info",
                    message="signal recorded",
                    status=signal.status,
                    unique_id=signal.unique_id,
                )
                self._cond.notify_all()
                return SignalOutcome.RECORDED

            if self._state is GateState.EXPIRED:
                self.events.log(
                    level="warning",
                    message="signal rejected",
                    status=signal.status,
                    unique_id=signal.unique_id,
                )
                return SignalOutcome.REJECTED

            self.events.log(
                level="info",
                message="signal ignored",
                status=signal.status,
                unique_id=signal.unique_id,
                state=self._state.value,
            )
            return SignalOutcome.IGNORED

    # ------------------------------------------------------------------
    # Espera bloqueante
    # ------------------------------------------------------------------
    def wait(self) -> GateOutcome:
        """Bloqueia até o gate sair de `waiting` (sinal ou timeout)."""
        with self._cond:
            while True:
                self._expire_if_due_locked()
                if self._state.is_terminal:
                    return GateOutcome(state=self._state, signal=self._signal, resolved_at=self._resolved_at)
                remaining = self._deadline - self._clock()
                self._cond.wait(timeout=max(0.0, min(remaining, self._poll_interval)))


class UnknownGateError(KeyError):
    """Nenhum gate registrado para o token/handle informado."""


class GateRegistry:
    """Cria gates com handles não adivinháveis e os resolve por token."""

    def __init__(
        self,
        *,
        base_url: str,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.05,
    ):
        self.base_url = base_url.rstrip("/")
        self._clock = clock
        self._poll_interval = poll_interval
        self._gates: Dict[str, CompletionGate] = {}
        self._lock = threading.Lock()

    def handle_for(self, token: str) -> str:
        return f"{self.base_url}/gates/{token}"

    def create(self, *, timeout: float) -> CompletionGate:
        token = secrets.token_urlsafe(32)
        gate = CompletionGate(
            handle=self.handle_for(token),
            timeout=timeout,
            clock=self._clock,
            poll_interval=self._poll_interval,
            token=token,
        )
        with self._lock:
            self._gates[token] = gate
        return gate

    def get(self, token: str) -> CompletionGate:
        with self._lock:
            if token not in self._gates:
                raise UnknownGateError(token)
            return self._gates[token]

    def resolve(self, handle: str) -> CompletionGate:
        prefix = f"{self.base_url}/gates/"
        if not isinstance(handle, str) or not handle.startswith(prefix):
            raise UnknownGateError(handle)
        return self.get(handle[len(prefix):])
