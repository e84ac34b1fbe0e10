"""
Test doubles for code that logs analytics events.

Usage:
    from eventlog import EventLogger, LoggerConfig
    from eventlog.testing import RecordingTransport

    transport = RecordingTransport()
    events = EventLogger(LoggerConfig(project_token="test"), transport=transport)
    events.log_event("signup", {"plan": "pro"})
    assert transport.event_names == ["signup"]
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecordedEvent:
    """One event captured by RecordingTransport."""

    name: str
    properties: dict[str, Any]


@dataclass
class RecordingTransport:
    """Transport that keeps every event in memory."""

    distinct_id: str = "test-distinct-id"
    events: list[RecordedEvent] = field(default_factory=list)
    flush_count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send(self, name: str, properties: dict[str, Any]) -> None:
        with self._lock:
            self.events.append(RecordedEvent(name=name, properties=dict(properties)))

    def identifier(self) -> str:
        return self.distinct_id

    def flush(self) -> None:
        self.flush_count += 1

    @property
    def event_names(self) -> list[str]:
        return [event.name for event in self.events]

    @property
    def last_event(self) -> RecordedEvent | None:
        return self.events[-1] if self.events else None

    def clear(self) -> None:
        with self._lock:
            self.events.clear()
