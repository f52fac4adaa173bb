"""
Superfície HTTP do Build Bridge (FastAPI).

Rotas:
    POST /webhook                 Source Intake (corpo bruto + assinatura HMAC)
    PUT  /gates/{token}           protocolo de sinal do Completion Gate
    GET  /gates/{token}           diagnóstico do gate
    POST /jobs/{job_id}/success   report de job da Notifier Bridge
    POST /jobs/{job_id}/failure   report de job da Notifier Bridge ({message, type})
    GET  /executions/{id}         resumo de uma execução

Com uma implantação `run_inline=False`, a execução aceita pelo webhook
roda como background task depois da resposta 202.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Union

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from build_bridge.core.engine.jobs import UnknownJobError
from build_bridge.core.engine.orchestrator import UnknownExecutionError
from build_bridge.core.errors import AUTHENTICATION_ERROR, INVALID_PAYLOAD, BridgeErrorPayload
from build_bridge.core.exceptions import AuthenticationError, InvalidPayloadError
from build_bridge.deployment import Deployment
from build_bridge.gate.completion_gate import GateSignal, SignalOutcome, UnknownGateError
from build_bridge.intake.webhook import IntakeDecision


class JobFailure(BaseModel):
    message: str
    type: str = "JobFailed"


def _error(status_code: int, error_type: str, message: str, **details: Any) -> JSONResponse:
    payload = BridgeErrorPayload(type=error_type, message=message, details=details)
    return JSONResponse(status_code=status_code, content={"error": payload.to_dict()})


def _not_found(what: str, key: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": f"Unknown {what}: {key}"})


def create_app(deployment: Deployment) -> FastAPI:
    """Cria a aplicação FastAPI de uma implantação.

    Args:
        deployment: implantação montada por `build_deployment`
    """
    app = FastAPI(
        title="build-bridge",
        description="Build pipeline to completion-gate bridge",
        version="0.1.0",
    )
    app.state.deployment = deployment

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    # ------------------------------------------------------------------
    # Source Intake
    # ------------------------------------------------------------------
    def _receive(body: bytes, headers: Dict[str, str]) -> Union[IntakeDecision, JSONResponse]:
        # erros do Intake viram resposta ainda na thread do worker
        try:
            return deployment.intake.receive(body, headers)
        except AuthenticationError as e:
            return _error(401, AUTHENTICATION_ERROR, e.message)
        except InvalidPayloadError as e:
            return _error(400, INVALID_PAYLOAD, e.message)

    @app.post("/webhook")
    async def webhook(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        body = await request.body()
        decision = await run_in_threadpool(_receive, body, dict(request.headers))
        if isinstance(decision, JSONResponse):
            return decision

        if not decision.started:
            return JSONResponse(status_code=200, content=decision.to_dict())
        if not deployment.run_inline:
            background_tasks.add_task(deployment.run_execution, decision.execution_id)
        return JSONResponse(status_code=202, content=decision.to_dict())

    # ------------------------------------------------------------------
    # Completion Gate
    # ------------------------------------------------------------------
    @app.put("/gates/{token}")
    async def signal_gate(token: str, request: Request) -> JSONResponse:
        try:
            gate = deployment.registry.get(token)
        except UnknownGateError:
            return _not_found("gate", token)

        raw = await request.body()
        try:
            signal = GateSignal.from_wire(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError):
            return _error(400, INVALID_PAYLOAD, "Signal body is not valid JSON")
        except InvalidPayloadError as e:
            return _error(400, INVALID_PAYLOAD, e.message, **e.details)

        outcome = gate.signal(signal)
        content = {"outcome": outcome.value, "state": gate.state.value}
        if outcome is SignalOutcome.REJECTED:
            return JSONResponse(status_code=409, content=content)
        return JSONResponse(status_code=200, content=content)

    @app.get("/gates/{token}")
    async def gate_status(token: str) -> JSONResponse:
        try:
            gate = deployment.registry.get(token)
        except UnknownGateError:
            return _not_found("gate", token)
        content = gate.outcome().to_dict()
        content.update({"handle": gate.handle, "timeout": gate.timeout, "events": gate.events.events})
        return JSONResponse(status_code=200, content=content)

    # ------------------------------------------------------------------
    # Job reports
    # ------------------------------------------------------------------
    @app.post("/jobs/{job_id}/success")
    async def job_success(job_id: str) -> JSONResponse:
        try:
            report = deployment.ledger.report_success(job_id)
        except UnknownJobError:
            return _not_found("job", job_id)
        return JSONResponse(status_code=200, content=report.to_dict())

    @app.post("/jobs/{job_id}/failure")
    async def job_failure(job_id: str, failure: JobFailure) -> JSONResponse:
        try:
            report = deployment.ledger.report_failure(job_id, {"message": failure.message, "type": failure.type})
        except UnknownJobError:
            return _not_found("job", job_id)
        return JSONResponse(status_code=200, content=report.to_dict())

    # ------------------------------------------------------------------
    # Execuções
    # ------------------------------------------------------------------
    @app.get("/executions/{execution_id}")
    async def execution_status(execution_id: str) -> JSONResponse:
        try:
            execution = deployment.orchestrator.get(execution_id)
        except UnknownExecutionError:
            return _not_found("execution", execution_id)
        content = execution.to_dict()
        content["results"] = {name.value: r.to_dict() for name, r in execution.results.items()}
        return JSONResponse(status_code=200, content=content)

    return app
