"""
Consumidor do Completion Gate: o processo de provisionamento bloqueado.

Modela os recursos de processamento de stream que dependem do gate: o
provisionamento espera o gate e só segue adiante (cria os dependentes)
se ele disparou com sucesso. Falha e expiração interrompem o
provisionamento; a expiração chega sem razão específica.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple

from build_bridge.gate.completion_gate import CompletionGate, GateState


@dataclass(frozen=True)
class ProvisioningReport:
    proceeded: bool
    state: GateState
    reason: str = ""
    dependents: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proceeded": self.proceeded,
            "state": self.state.value,
            "reason": self.reason,
            "dependents": list(self.dependents),
        }


class BlockingProvisioner:
    def __init__(self, *, gate: CompletionGate, dependents: Sequence[str] = ()):
        self.gate = gate
        self.dependents = tuple(dependents)

    def provision(self) -> ProvisioningReport:
        outcome = self.gate.wait()
        if outcome.succeeded:
            return ProvisioningReport(
                proceeded=True,
                state=outcome.state,
                reason=outcome.reason,
                dependents=self.dependents,
            )
        return ProvisioningReport(proceeded=False, state=outcome.state, reason=outcome.reason)
