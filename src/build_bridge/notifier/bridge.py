"""
Notifier Bridge: última etapa entre o pipeline e o Completion Gate.

A bridge recebe o job do Notify (job handle + status terminal upstream),
traduz o resultado para o protocolo do gate, entrega o sinal e reporta o
próprio resultado ao Orchestrator.

Sequência (dois canais independentes, cada um com seu tratamento de erro):

    1. sinal ao gate (uma única tentativa)
         SUCCESS → Reason/Data "Compilation Succeeded"
         FAILURE → Reason/Data = razão upstream ("Compilation Failed" se ausente)
    2. report ao Orchestrator
         sinal entregue  → report_success(job_id)
         sinal com falha → report_failure(job_id, {message, type: "JobFailed"})

Invariantes:
    - `handle` nunca levanta exceção: falhas são capturadas e registradas
    - A falha do passo 1 nunca impede o passo 2
    - Uma segunda invocação para o mesmo job_id não faz chamadas externas
      e devolve o resultado da primeira
    - Jobs distintos nunca esperam as chamadas externas um do outro

Limites explícitos:
    - Sem retry em nenhum dos canais
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from build_bridge.core.eventlog import EventLog
from build_bridge.core.exceptions import BridgeException
from build_bridge.core.pipeline.types import ExecutionStatus
from build_bridge.gate.completion_gate import SIGNAL_FAILURE, SIGNAL_SUCCESS, GateSignal

from .reporters import JobReporter
from .signallers import GateSignaller

SUCCESS_REASON = "Compilation Succeeded"
DEFAULT_FAILURE_REASON = "Compilation Failed"
JOB_FAILED = "JobFailed"


@dataclass(frozen=True)
class NotifyJob:
    """Entrada da bridge, montada pelo estágio Notify."""
    execution_id: str
    job_id: str
    gate_handle: str
    execution_status: ExecutionStatus
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "job_id": self.job_id,
            "gate_handle": self.gate_handle,
            "execution_status": self.execution_status.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BridgeOutcome:
    signal_delivered: bool
    report_delivered: bool
    signal_error: Optional[str] = None
    report_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signal_delivered": self.signal_delivered,
            "signal_error": self.signal_error,
            "report_delivered": self.report_delivered,
            "report_error": self.report_error,
        }


def signal_for(job: NotifyJob) -> GateSignal:
    """Traduz o status terminal upstream para o sinal do gate."""
    if job.execution_status is ExecutionStatus.SUCCEEDED:
        return GateSignal(
            status=SIGNAL_SUCCESS,
            reason=SUCCESS_REASON,
            unique_id=job.job_id,
            data=SUCCESS_REASON,
        )
    reason = job.reason or DEFAULT_FAILURE_REASON
    return GateSignal(status=SIGNAL_FAILURE, reason=reason, unique_id=job.job_id, data=reason)


def _describe(exc: Exception) -> str:
    if isinstance(exc, BridgeException):
        return exc.message
    return f"{exc.__class__.__name__}: {exc}"


class NotifierBridge:
    def __init__(self, *, signaller: GateSignaller, reporter: JobReporter):
        self.signaller = signaller
        self.reporter = reporter
        self.events = EventLog("bridge")
        self._outcomes: Dict[str, BridgeOutcome] = {}
        self._job_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _job_lock(self, job_id: str) -> threading.Lock:
        with self._lock:
            return self._job_locks.setdefault(job_id, threading.Lock())

    def handle(self, job: NotifyJob) -> BridgeOutcome:
        # chamadas externas só serializam invocações do mesmo job
        with self._job_lock(job.job_id):
            with self._lock:
                previous = self._outcomes.get(job.job_id)
            if previous is not None:
                self.events.log(level="info", message="duplicate invocation", job_id=job.job_id)
                return previous

            outcome = self._handle(job)
            with self._lock:
                self._outcomes[job.job_id] = outcome
            return outcome

    def _handle(self, job: NotifyJob) -> BridgeOutcome:
        signal_error: Optional[str] = None
        try:
            signal = signal_for(job)
            self.signaller.send(job.gate_handle, signal)
            self.events.log(level="info", message="signal delivered", job_id=job.job_id, status=signal.status)
        except Exception as e:
            signal_error = _describe(e)
            self.events.log(level="error", message="signal delivery failed", job_id=job.job_id, error=signal_error)

        report_error: Optional[str] = None
        try:
            if signal_error is None:
                self.reporter.report_success(job.job_id)
            else:
                self.reporter.report_failure(job.job_id, {"message": signal_error, "type": JOB_FAILED})
            self.events.log(level="info", message="job reported", job_id=job.job_id, succeeded=signal_error is None)
        except Exception as e:
            report_error = _describe(e)
            self.events.log(level="error", message="job report failed", job_id=job.job_id, error=report_error)

        return BridgeOutcome(
            signal_delivered=signal_error is None,
            report_delivered=report_error is None,
            signal_error=signal_error,
            report_error=report_error,
        )
