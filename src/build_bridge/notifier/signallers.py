"""
Canais de entrega do sinal do gate.

`HttpGateSignaller`:
    PUT no handle (URL) do gate com o corpo JSON
    `{"Status","Reason","UniqueId","Data"}` e o header `Content-Type: ""`.
    2xx = entregue. Handle malformado, erro de transporte, status
    não-2xx ou resposta indicando que o gate já disparou viram
    SignalDeliveryError.

`LocalGateSignaller`:
    Entrega direto a um gate do `GateRegistry` em processo. Gate
    desconhecido, expirado ou já disparado vira SignalDeliveryError.
"""

from __future__ import annotations

import json
from typing import Optional, Protocol, runtime_checkable

import httpx

from build_bridge.core.exceptions import SignalDeliveryError
from build_bridge.gate.completion_gate import GateRegistry, GateSignal, SignalOutcome, UnknownGateError


@runtime_checkable
class GateSignaller(Protocol):
    def send(self, handle: str, signal: GateSignal) -> None:
        """Entrega `signal` ao gate identificado por `handle` ou levanta SignalDeliveryError."""
        ...


def _validate_handle(handle: str) -> httpx.URL:
    try:
        url = httpx.URL(handle)
    except (httpx.InvalidURL, TypeError) as e:
        raise SignalDeliveryError(message="Malformed gate handle", details={"handle": handle}) from e
    if url.scheme not in ("http", "https") or not url.host:
        raise SignalDeliveryError(message="Malformed gate handle", details={"handle": handle})
    return url


class HttpGateSignaller:
    """Entrega o sinal via HTTP PUT (httpx)."""

    def __init__(self, *, client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def send(self, handle: str, signal: GateSignal) -> None:
        url = _validate_handle(handle)
        body = json.dumps(signal.to_wire()).encode("utf-8")
        try:
            response = self._client.put(url, content=body, headers={"Content-Type": ""})
        except httpx.HTTPError as e:
            raise SignalDeliveryError(
                message=f"Gate unreachable: {e.__class__.__name__}",
                details={"handle": handle, "exc_message": str(e)},
            ) from e

        if not response.is_success:
            raise SignalDeliveryError(
                message=f"Gate responded {response.status_code}",
                details={"handle": handle, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("outcome") == SignalOutcome.IGNORED.value:
            raise SignalDeliveryError(message="Gate already fired", details={"handle": handle})


class LocalGateSignaller:
    """Entrega o sinal a um gate em processo."""

    def __init__(self, registry: GateRegistry):
        self.registry = registry

    def send(self, handle: str, signal: GateSignal) -> None:
        try:
            gate = self.registry.resolve(handle)
        except UnknownGateError as e:
            raise SignalDeliveryError(message="Unknown gate handle", details={"handle": handle}) from e

        outcome = gate.signal(signal)
        if outcome is SignalOutcome.REJECTED:
            raise SignalDeliveryError(message="Gate expired", details={"handle": handle})
        if outcome is SignalOutcome.IGNORED:
            raise SignalDeliveryError(message="Gate already fired", details={"handle": handle})
