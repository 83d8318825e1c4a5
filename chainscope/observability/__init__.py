"""
observability - Discovery Traces
================================

Question this layer answers:
"What did each network's pipeline actually do?"
"""

from .tracer import DiscoveryTrace, DiscoveryTracer, TraceRecord, trace_network, traceable

__all__ = ["DiscoveryTrace", "DiscoveryTracer", "TraceRecord", "trace_network", "traceable"]
