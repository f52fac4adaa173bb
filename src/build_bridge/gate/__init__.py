from .completion_gate import (
    SIGNAL_FAILURE,
    SIGNAL_SUCCESS,
    CompletionGate,
    GateOutcome,
    GateRegistry,
    GateSignal,
    GateState,
    SignalOutcome,
    UnknownGateError,
)

__all__ = [
    "CompletionGate",
    "GateOutcome",
    "GateRegistry",
    "GateSignal",
    "GateState",
    "SIGNAL_FAILURE",
    "SIGNAL_SUCCESS",
    "SignalOutcome",
    "UnknownGateError",
]
