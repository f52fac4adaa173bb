"""
Manifest de execução: rastreabilidade de uma PipelineExecution.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (execution_id, job_id, trigger, started_at)
    - hash da configuração efetiva da implantação
    - estado incremental de cada estágio
    - Event Log ordenado de eventos explícitos

É o único registro que mostra, lado a lado, o que o pipeline fez e o
que foi entregue ao gate e ao job report; por isso o Orchestrator grava
nele o resultado do Notify junto com os demais estágios.

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (sort_keys)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, truncada em zero."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class ExecutionManifest:
    """
    Registro forense de uma execução do pipeline.

    Campos principais:
        - execution: metadados (execution_id, job_id, started_at, trigger, status)
        - inputs: hash da configuração efetiva
        - stages: estado incremental por stage_id
        - events: Event Log ordenado

    Invariantes:
        - `stages` é sempre um dicionário indexado por stage_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    execution: Dict[str, Any]
    inputs: Dict[str, Any]
    stages: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável; alterações no retorno não afetam o Manifest."""
        return json.loads(json.dumps({
            "execution": self.execution,
            "inputs": self.inputs,
            "stages": self.stages,
            "events": self.events,
        }, default=str))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionManifest":
        return cls(
            execution=dict(data.get("execution", {})),
            inputs=dict(data.get("inputs", {})),
            stages={k: dict(v) for k, v in (data.get("stages", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def event_types(self) -> List[str]:
        return [e["event_type"] for e in self.events]


def create_manifest(
    *,
    execution_id: str,
    job_id: str,
    started_at: datetime,
    config_hash: str,
    trigger: Optional[Dict[str, Any]] = None,
) -> ExecutionManifest:
    """
    Cria o Manifest inicial de uma execução.

    ⚠️ Esta função **não emite eventos**: o Event Log inicia vazio e o
    Orchestrator registra `execution_started` explicitamente.
    """
    return ExecutionManifest(
        execution={
            "execution_id": execution_id,
            "job_id": job_id,
            "started_at": _iso(started_at),
            "trigger": dict(trigger or {}),
            "status": "running",
        },
        inputs={"config_hash": config_hash},
        stages={},
        events=[],
    )


def add_event(
    manifest: ExecutionManifest,
    *,
    event_type: str,
    ts: datetime,
    stage_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Cada chamada adiciona exatamente um evento; eventos não são
    reordenados nem deduplicados.
    """
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if stage_id is not None:
        ev["stage_id"] = stage_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def stage_started(manifest: ExecutionManifest, *, stage_id: str, ts: datetime) -> None:
    """Marca o estágio como `running` e registra `stage_started`."""
    manifest.stages.setdefault(stage_id, {})
    manifest.stages[stage_id].update(
        {
            "stage_id": stage_id,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="stage_started", ts=ts, stage_id=stage_id)


def stage_finished(
    manifest: ExecutionManifest,
    *,
    stage_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão de um estágio (sucesso) com duração e artefato.

    Args:
        result: forma serializada de um StageResult (`StageResult.to_dict()`).
    """
    s = manifest.stages.setdefault(stage_id, {"stage_id": stage_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "succeeded")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
            "warnings": result.get("warnings", []) or [],
            "artifact": result.get("artifact"),
        }
    )

    add_event(
        manifest,
        event_type="stage_finished",
        ts=ts,
        stage_id=stage_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )


def stage_failed(
    manifest: ExecutionManifest,
    *,
    stage_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Marca o estágio como `failed` e registra o payload de erro."""
    s = manifest.stages.setdefault(stage_id, {"stage_id": stage_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "error": dict(error),
        }
    )
    add_event(manifest, event_type="stage_failed", ts=ts, stage_id=stage_id, payload={"error": dict(error)})


def stage_skipped(manifest: ExecutionManifest, *, stage_id: str, ts: datetime, reason: str) -> None:
    """Registra um estágio que nunca executou porque um predecessor falhou."""
    manifest.stages[stage_id] = {"stage_id": stage_id, "status": "skipped", "reason": reason}
    add_event(manifest, event_type="stage_skipped", ts=ts, stage_id=stage_id, payload={"reason": reason})


def execution_finished(manifest: ExecutionManifest, *, status: str, ts: datetime) -> None:
    manifest.execution["status"] = status
    manifest.execution["finished_at"] = _iso(ts)
    add_event(manifest, event_type="execution_finished", ts=ts, payload={"status": status})


def save_manifest(manifest: ExecutionManifest, path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (sort_keys, indentado).

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> ExecutionManifest:
    """Restaura um Manifest persistido por `save_manifest`."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return ExecutionManifest.from_dict(data)
