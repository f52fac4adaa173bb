"""
Event log estruturado para componentes fora de uma execução.

O gate, o Source Intake e a Notifier Bridge não recebem um RunContext
(vivem em outro plano de controle ou antes da execução existir), mas
registram eventos no mesmo formato: dicionários com `component`,
`level`, `message`, `timestamp` e campos extras.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List


class EventLog:
    """Lista ordenada e thread-safe de eventos estruturados."""

    def __init__(self, component: str):
        self.component = component
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def log(self, *, level: str, message: str, **extra: Any) -> None:
        event = {
            "component": self.component,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self._events]

    def find(self, message: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["message"] == message]
