# tests/notifier/test_transports.py
"""
Testes dos canais de transporte da bridge.

- HttpGateSignaller / HttpJobReporter com httpx.MockTransport
- LocalGateSignaller / LedgerJobReporter em processo
"""

import json

import httpx
import pytest

from build_bridge.core.engine import JobLedger
from build_bridge.core.exceptions import ReportError, SignalDeliveryError
from build_bridge.gate import GateRegistry, GateSignal, GateState
from build_bridge.notifier import (
    HttpGateSignaller,
    HttpJobReporter,
    LedgerJobReporter,
    LocalGateSignaller,
)

HANDLE = "http://gate.test/gates/abc"
SIGNAL = GateSignal(status="SUCCESS", reason="Compilation Succeeded", unique_id="job-42", data="Compilation Succeeded")


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_http_signaller_puts_wire_body_with_empty_content_type():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    HttpGateSignaller(client=_client(handler)).send(HANDLE, SIGNAL)

    (request,) = seen
    assert request.method == "PUT"
    assert str(request.url) == HANDLE
    assert request.headers["content-type"] == ""
    assert json.loads(request.content) == SIGNAL.to_wire()


@pytest.mark.parametrize("handle", ["not a url", "ftp://gate.test/x", "http:///nohost", ""])
def test_http_signaller_rejects_malformed_handle(handle):
    calls = []
    signaller = HttpGateSignaller(client=_client(lambda r: calls.append(r) or httpx.Response(200)))
    with pytest.raises(SignalDeliveryError) as exc:
        signaller.send(handle, SIGNAL)
    assert exc.value.message == "Malformed gate handle"
    assert calls == []


def test_http_signaller_non_2xx():
    signaller = HttpGateSignaller(client=_client(lambda r: httpx.Response(409)))
    with pytest.raises(SignalDeliveryError) as exc:
        signaller.send(HANDLE, SIGNAL)
    assert exc.value.details["status_code"] == 409


def test_http_signaller_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SignalDeliveryError) as exc:
        HttpGateSignaller(client=_client(handler)).send(HANDLE, SIGNAL)
    assert exc.value.message.startswith("Gate unreachable")


def test_http_signaller_already_fired_gate():
    signaller = HttpGateSignaller(
        client=_client(lambda r: httpx.Response(200, json={"outcome": "ignored", "state": "fired_success"}))
    )
    with pytest.raises(SignalDeliveryError) as exc:
        signaller.send(HANDLE, SIGNAL)
    assert exc.value.message == "Gate already fired"


def test_http_reporter_posts_to_job_routes():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.content))
        return httpx.Response(200)

    reporter = HttpJobReporter(base_url="http://orchestrator.test/", client=_client(handler))
    reporter.report_success("job-42")
    reporter.report_failure("job-43", {"message": "Gate expired", "type": "JobFailed"})

    assert seen[0][:2] == ("POST", "/jobs/job-42/success")
    assert seen[1][:2] == ("POST", "/jobs/job-43/failure")
    assert json.loads(seen[1][2]) == {"message": "Gate expired", "type": "JobFailed"}


def test_http_reporter_errors():
    def unreachable(request):
        raise httpx.ConnectTimeout("timeout", request=request)

    with pytest.raises(ReportError):
        HttpJobReporter(base_url="http://o.test", client=_client(unreachable)).report_success("j")
    with pytest.raises(ReportError):
        HttpJobReporter(base_url="http://o.test", client=_client(lambda r: httpx.Response(404))).report_success("j")


def test_local_signaller_outcomes(clock):
    registry = GateRegistry(base_url="http://gate.test", clock=clock)
    gate = registry.create(timeout=10)
    signaller = LocalGateSignaller(registry)

    signaller.send(gate.handle, SIGNAL)
    assert gate.state is GateState.FIRED_SUCCESS

    with pytest.raises(SignalDeliveryError, match="already fired"):
        signaller.send(gate.handle, SIGNAL)

    late = registry.create(timeout=10)
    clock.advance(11)
    with pytest.raises(SignalDeliveryError, match="expired"):
        signaller.send(late.handle, SIGNAL)

    with pytest.raises(SignalDeliveryError, match="Unknown"):
        signaller.send("http://gate.test/gates/missing", SIGNAL)


def test_ledger_reporter():
    ledger = JobLedger()
    ledger.register("job-42")
    LedgerJobReporter(ledger).report_success("job-42")
    assert ledger.get("job-42").succeeded

    with pytest.raises(ReportError):
        LedgerJobReporter(ledger).report_failure("unknown", {"message": "x"})
