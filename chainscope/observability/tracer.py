"""
Discovery Tracer
================

Records what happened while discovering each network.

Every attempt, exhausted endpoint and rendered service becomes a
TraceRecord under its network's name. Pipeline runs are additionally
reported to LangSmith through `traceable` when LangSmith tracing is
enabled in the environment.
"""

import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from langsmith import traceable

__all__ = [
    "DiscoveryTrace",
    "DiscoveryTracer",
    "TraceRecord",
    "trace_network",
    "traceable",
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TraceRecord:
    """A single trace record."""
    timestamp: datetime
    event_type: str
    data: Dict[str, Any]


@dataclass
class DiscoveryTrace:
    """Complete trace of one network's pipeline."""
    network: str
    started_at: datetime = field(default_factory=_now)
    ended_at: Optional[datetime] = None
    records: List[TraceRecord] = field(default_factory=list)

    def add_event(self, event_type: str, **data) -> None:
        self.records.append(TraceRecord(timestamp=_now(), event_type=event_type, data=data))

    def events(self, event_type: str) -> List[TraceRecord]:
        return [record for record in self.records if record.event_type == event_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "records": [
                {
                    "timestamp": r.timestamp.isoformat(),
                    "event_type": r.event_type,
                    "data": r.data,
                }
                for r in self.records
            ],
        }


class DiscoveryTracer:
    """
    In-memory tracer, one DiscoveryTrace per network.

    Pipelines only ever touch their own network's trace, so concurrent
    pipelines never share a record list.
    """

    def __init__(self):
        self.traces: Dict[str, DiscoveryTrace] = {}

    def start_trace(self, network: str) -> DiscoveryTrace:
        trace = DiscoveryTrace(network=network)
        trace.add_event("network_start")
        self.traces[network] = trace
        return trace

    def end_trace(self, network: str) -> Optional[DiscoveryTrace]:
        trace = self.traces.get(network)
        if trace:
            trace.ended_at = _now()
            trace.add_event("network_end")
        return trace

    def log(self, network: str, event_type: str, **data) -> None:
        trace = self.traces.get(network)
        if trace is None:
            trace = self.start_trace(network)
        trace.add_event(event_type, **data)

    def get_trace(self, network: str) -> Optional[DiscoveryTrace]:
        return self.traces.get(network)

    def to_dict(self) -> Dict[str, Any]:
        return {network: trace.to_dict() for network, trace in sorted(self.traces.items())}

    def export(self, path: str) -> None:
        """Write every trace to `path` as JSON, keyed by network name."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


@contextmanager
def trace_network(tracer: Optional[DiscoveryTracer], network: str):
    """
    Context manager for tracing one network.

    Usage:
        with trace_network(tracer, "osmosis") as trace:
            ...
    """
    if tracer is None:
        yield None
        return

    trace = tracer.start_trace(network)
    try:
        yield trace
    finally:
        tracer.end_trace(network)
