"""
orchestration - Discovery Workflow (via LangGraph)
==================================================

Question this layer answers:
"What runs next?"

LangGraph controls, per network:
- identity -> listing -> one pass per service -> manifest
- Termination on failure
- State propagation

The orchestrator controls, across networks:
- One concurrent pipeline per network
- Joining all of them, whatever their outcome

Orchestration does NOT:
- Start the program (that's runtime)
- Talk to servers (that's transport)
- Decide retries (that's coordination)
- Load config (that's runtime)
"""

from .pipeline import NetworkPipeline, PipelineGraphState, create_pipeline_graph, router
from .orchestrator import Orchestrator, RunSummary, run_discovery

__all__ = [
    "NetworkPipeline",
    "PipelineGraphState",
    "create_pipeline_graph",
    "router",
    "Orchestrator",
    "RunSummary",
    "run_discovery",
]
