"""Telemetry events for local build attempts."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

LOCAL_BUILD_EVENT = "codeTransform_localBuildProject"


@dataclass(frozen=True)
class TelemetryEvent:
    """One structured event per install attempt."""

    session_id: str
    build_command: str  # normalized, no path separators
    result: str  # "Succeeded" | "Failed"
    duration_ms: float
    name: str = LOCAL_BUILD_EVENT
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["reason"] is None:
            del data["reason"]
        data["duration_ms"] = round(self.duration_ms, 2)
        return data


class TelemetrySink(Protocol):
    """Receives telemetry events."""

    def record(self, event: TelemetryEvent) -> None: ...


class LoggingTelemetrySink:
    """Keeps events in memory and logs each one as a JSON line."""

    def __init__(self) -> None:
        self._events: list[TelemetryEvent] = []

    @property
    def events(self) -> list[TelemetryEvent]:
        return list(self._events)

    def record(self, event: TelemetryEvent) -> None:
        self._events.append(event)
        logger.info(f"Telemetry: {json.dumps(event.to_dict(), sort_keys=True)}")
