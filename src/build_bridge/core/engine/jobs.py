"""
JobLedger: registro, do lado do Orchestrator, dos reports de jobs do Notify.

O estágio Notify entrega sua conclusão pela Notifier Bridge, que reporta
`success(job_id)` ou `failure(job_id, {message, type})`. O ledger guarda
esses reports para que o estágio (e a API HTTP) possam lê-los.

Regras:
    - Um job precisa ser registrado antes de receber reports
    - O primeiro report de cada job vence; reports seguintes são ignorados
    - Report para job desconhecido levanta UnknownJobError
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class UnknownJobError(KeyError):
    """Report recebido para um job_id nunca registrado."""


@dataclass(frozen=True)
class JobReport:
    job_id: str
    succeeded: bool
    failure: Dict[str, Any] = field(default_factory=dict)
    reported_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "succeeded": self.succeeded,
            "failure": dict(self.failure) if self.failure else None,
            "reported_at": self.reported_at,
        }


class JobLedger:
    """Ledger thread-safe de jobs e seus reports."""

    def __init__(self) -> None:
        self._jobs: Dict[str, Optional[JobReport]] = {}
        self._lock = threading.Lock()

    def register(self, job_id: str) -> None:
        with self._lock:
            self._jobs.setdefault(job_id, None)

    def is_known(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def get(self, job_id: str) -> Optional[JobReport]:
        with self._lock:
            if job_id not in self._jobs:
                raise UnknownJobError(job_id)
            return self._jobs[job_id]

    def _report(self, report: JobReport) -> JobReport:
        with self._lock:
            if report.job_id not in self._jobs:
                raise UnknownJobError(report.job_id)
            existing = self._jobs[report.job_id]
            if existing is not None:
                return existing
            self._jobs[report.job_id] = report
            return report

    def report_success(self, job_id: str) -> JobReport:
        return self._report(JobReport(job_id=job_id, succeeded=True))

    def report_failure(self, job_id: str, failure: Dict[str, Any]) -> JobReport:
        return self._report(
            JobReport(
                job_id=job_id,
                succeeded=False,
                failure={
                    "message": str(failure.get("message", "")),
                    "type": str(failure.get("type", "JobFailed")),
                },
            )
        )
