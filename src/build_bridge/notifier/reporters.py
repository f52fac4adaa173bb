"""
Canais de report do job de volta ao Orchestrator.

- `LedgerJobReporter`: grava direto no JobLedger em processo
- `HttpJobReporter`: POST em `{base_url}/jobs/{job_id}/success|failure`

Qualquer falha vira ReportError.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from build_bridge.core.engine.jobs import JobLedger, UnknownJobError
from build_bridge.core.exceptions import ReportError


@runtime_checkable
class JobReporter(Protocol):
    def report_success(self, job_id: str) -> None:
        ...

    def report_failure(self, job_id: str, failure: Dict[str, Any]) -> None:
        ...


class LedgerJobReporter:
    def __init__(self, ledger: JobLedger):
        self.ledger = ledger

    def report_success(self, job_id: str) -> None:
        try:
            self.ledger.report_success(job_id)
        except UnknownJobError as e:
            raise ReportError(message="Unknown job", details={"job_id": job_id}) from e

    def report_failure(self, job_id: str, failure: Dict[str, Any]) -> None:
        try:
            self.ledger.report_failure(job_id, failure)
        except UnknownJobError as e:
            raise ReportError(message="Unknown job", details={"job_id": job_id}) from e


class HttpJobReporter:
    """Reporta o job ao Orchestrator remoto via HTTP (httpx)."""

    def __init__(
        self,
        *,
        base_url: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _post(self, job_id: str, outcome: str, body: Optional[Dict[str, Any]]) -> None:
        url = f"{self.base_url}/jobs/{job_id}/{outcome}"
        try:
            response = self._client.post(url, json=body)
        except httpx.HTTPError as e:
            raise ReportError(
                message=f"Orchestrator unreachable: {e.__class__.__name__}",
                details={"job_id": job_id, "exc_message": str(e)},
            ) from e
        if not response.is_success:
            raise ReportError(
                message=f"Orchestrator responded {response.status_code}",
                details={"job_id": job_id, "status_code": response.status_code},
            )

    def report_success(self, job_id: str) -> None:
        self._post(job_id, "success", None)

    def report_failure(self, job_id: str, failure: Dict[str, Any]) -> None:
        self._post(job_id, "failure", dict(failure))
