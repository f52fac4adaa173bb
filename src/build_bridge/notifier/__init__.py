from .bridge import (
    DEFAULT_FAILURE_REASON,
    JOB_FAILED,
    SUCCESS_REASON,
    BridgeOutcome,
    NotifierBridge,
    NotifyJob,
    signal_for,
)
from .reporters import HttpJobReporter, JobReporter, LedgerJobReporter
from .signallers import GateSignaller, HttpGateSignaller, LocalGateSignaller

__all__ = [
    "BridgeOutcome",
    "DEFAULT_FAILURE_REASON",
    "GateSignaller",
    "HttpGateSignaller",
    "HttpJobReporter",
    "JOB_FAILED",
    "JobReporter",
    "LedgerJobReporter",
    "LocalGateSignaller",
    "NotifierBridge",
    "NotifyJob",
    "SUCCESS_REASON",
    "signal_for",
]
