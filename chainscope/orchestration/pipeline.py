"""
Per-Network Pipeline
====================

LangGraph-based discovery for one network.

The graph structure:

    ┌──────────────────┐
    │ resolve_identity │ ──── no identity ────────────────► END (failed)
    └────────┬─────────┘
             ▼
    ┌──────────────────┐
    │  list_services   │ ──── endpoints exhausted ────────► END (failed)
    └────────┬─────────┘
             ▼
    ┌──────────────────┐
    │ process_service  │ ◄──┐  one pass per listed service
    └────────┬─────────┘    │
             ├──────────────┘
             │  endpoints exhausted ──────────────────────► END (failed)
             ▼
    ┌──────────────────┐
    │  write_manifest  │ ──────────────────────────────────► END (success)
    └──────────────────┘

Every step is sequential; the only suspension points are reflection
calls and retry sleeps inside the failover invoker. Service files are
written as soon as each service is rendered and are kept if a later
step fails.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..context import ChainIdentityResolver
from ..coordination import FailoverInvoker
from ..errors import AllEndpointsExhausted, ChainIdentityUnresolved, UnresolvableMessageType
from ..fsm import PipelineFSM, PipelineState
from ..observability import DiscoveryTracer, trace_network, traceable
from ..protocol import Manifest, ManifestEntry, NetworkResult, NetworkSpec, NetworkStatus
from ..rendering import RenderedService, render
from ..transport import FILE_CONTAINING_SYMBOL, LIST_SERVICES, is_reserved


logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"

# process_service loops once per service; each pass is one graph step
RECURSION_LIMIT = 10_000


# ============================================================================
# Graph State
# ============================================================================

class PipelineGraphState(TypedDict):
    """State managed by the graph."""
    endpoints: List[str]

    # Identity
    chain_id: Optional[str]

    # Listing
    list_endpoint: Optional[str]
    services: List[str]
    cursor: int

    # Results
    entries: List[ManifestEntry]
    output_dir: Optional[str]
    failure_reason: Optional[str]


def router(state: PipelineGraphState) -> str:
    """
    Determine next node based on state.

    Pure ROUTING logic, separate from the discovery steps.
    """
    if state.get("failure_reason"):
        return "end"

    if state["cursor"] < len(state["services"]):
        return "process_service"

    return "write_manifest"


def identity_router(state: PipelineGraphState) -> str:
    if state.get("failure_reason"):
        return "end"
    return "list_services"


# ============================================================================
# Pipeline
# ============================================================================

class NetworkPipeline:
    """
    Discovers and renders one network's services.

    A pipeline instance runs once. Its PipelineFSM records where it
    stopped, and its failover invoker is not shared with any other network.
    """

    def __init__(
        self,
        spec: NetworkSpec,
        invoker: FailoverInvoker,
        output_root: Path,
        resolver: Optional[ChainIdentityResolver] = None,
        strict: bool = False,
        tracer: Optional[DiscoveryTracer] = None,
    ):
        self.spec = spec
        self.invoker = invoker
        self.output_root = Path(output_root)
        self.resolver = resolver or ChainIdentityResolver()
        self.strict = strict
        self.tracer = tracer
        self.fsm = PipelineFSM()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def resolve_identity(self, state: PipelineGraphState) -> Dict[str, Any]:
        try:
            identity = self.resolver.resolve(state["endpoints"])
        except ChainIdentityUnresolved as exc:
            self.fsm.fail(str(exc))
            return {"failure_reason": str(exc)}

        logger.info("[%s] chain identity %s (from %s)", self.spec.name, identity.chain_id, identity.endpoint)
        self.fsm.advance(PipelineState.LISTING_SERVICES)
        return {
            "chain_id": identity.chain_id,
            "endpoints": self.resolver.prioritize(state["endpoints"], identity.endpoint),
        }

    async def list_services(self, state: PipelineGraphState) -> Dict[str, Any]:
        logger.info("[%s] === Listing services ===", self.spec.name)
        try:
            result = await self.invoker.invoke(state["endpoints"], LIST_SERVICES)
        except AllEndpointsExhausted as exc:
            self.fsm.fail(str(exc))
            return {"failure_reason": str(exc)}

        services = [name for name in result.value if not is_reserved(name)]
        logger.info("[%s] Found %d services", self.spec.name, len(services))
        return {"services": services, "list_endpoint": result.endpoint, "cursor": 0}

    async def process_service(self, state: PipelineGraphState) -> Dict[str, Any]:
        cursor = state["cursor"]
        service_name = state["services"][cursor]
        logger.info("[%s] === Processing service: %s ===", self.spec.name, service_name)

        self.fsm.advance(PipelineState.FETCHING_DESCRIPTOR)
        try:
            fetched = await self.invoker.invoke(
                state["endpoints"], FILE_CONTAINING_SYMBOL, service_name
            )
        except AllEndpointsExhausted as exc:
            self.fsm.fail(str(exc))
            return {"failure_reason": str(exc), "cursor": cursor + 1}

        service = fetched.value.lookup_service(service_name)
        if service is None:
            logger.warning(
                "[%s] %s not found in %s, skipping",
                self.spec.name, service_name, fetched.value.name or "descriptor",
            )
            return {"cursor": cursor + 1}

        self.fsm.advance(PipelineState.RENDERING)
        try:
            rendered = render(service, fetched.value, strict=self.strict)
        except UnresolvableMessageType as exc:
            self.fsm.fail(str(exc))
            return {"failure_reason": str(exc), "cursor": cursor + 1}

        entry = self._write_service(state["chain_id"], rendered)
        if self.tracer is not None:
            self.tracer.log(
                self.spec.name, "service_rendered",
                service=entry.service, methods=entry.methods, skipped=rendered.skipped_types,
            )
        return {"entries": state["entries"] + [entry], "cursor": cursor + 1}

    async def write_manifest(self, state: PipelineGraphState) -> Dict[str, Any]:
        self.fsm.advance(PipelineState.WRITING_MANIFEST)
        chain_dir = self.output_root / state["chain_id"]
        manifest = Manifest(
            chain_id=state["chain_id"],
            network_name=self.spec.name,
            endpoint=state["list_endpoint"],
            services=list(state["entries"]),
        )
        chain_dir.mkdir(parents=True, exist_ok=True)
        (chain_dir / MANIFEST_FILENAME).write_text(
            json.dumps(manifest.to_dict(), indent=2), encoding="utf-8"
        )
        logger.info("[%s] manifest written to %s", self.spec.name, chain_dir / MANIFEST_FILENAME)
        self.fsm.advance(PipelineState.DONE)
        return {"output_dir": str(chain_dir)}

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _write_service(self, chain_id: str, rendered: RenderedService) -> ManifestEntry:
        """Write both snippets immediately and return the manifest entry."""
        service = rendered.service
        service_dir = self.output_root.joinpath(chain_id, *service.package_path)
        service_dir.mkdir(parents=True, exist_ok=True)

        logger.info("[%s] -> Writing RPC definitions for %s", self.spec.name, service.name)
        (service_dir / f"{service.name}.svc.proto").write_text(rendered.service_text, encoding="utf-8")

        logger.info("[%s] -> Writing message definitions for %s", self.spec.name, service.name)
        (service_dir / f"{service.name}.msg.proto").write_text(rendered.message_text, encoding="utf-8")

        return ManifestEntry.for_service(service)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def initial_state(self) -> PipelineGraphState:
        return {
            "endpoints": list(self.spec.endpoints),
            "chain_id": None,
            "list_endpoint": None,
            "services": [],
            "cursor": 0,
            "entries": [],
            "output_dir": None,
            "failure_reason": None,
        }

    @traceable(run_type="chain", name="network_pipeline")
    async def run(self) -> NetworkResult:
        """Run the graph to completion and summarize it as a NetworkResult."""
        with trace_network(self.tracer, self.spec.name) as trace:
            graph = create_pipeline_graph(self)
            final_state = await graph.ainvoke(
                self.initial_state(), config={"recursion_limit": RECURSION_LIMIT}
            )
            result = _to_result(self.spec, final_state)
            if trace is not None:
                trace.add_event("network_done", status=result.status.value, services=result.service_count)
            return result


def _to_result(spec: NetworkSpec, state: Dict[str, Any]) -> NetworkResult:
    failure = state.get("failure_reason")
    return NetworkResult(
        network=spec.name,
        status=NetworkStatus.FAILED if failure else NetworkStatus.SUCCESS,
        chain_id=state.get("chain_id"),
        endpoint=state.get("list_endpoint"),
        service_count=len(state.get("entries") or []),
        output_dir=None if failure else state.get("output_dir"),
        error=failure,
    )


# ============================================================================
# Graph Builder
# ============================================================================

def create_pipeline_graph(pipeline: NetworkPipeline):
    """Create the LangGraph discovery graph for one pipeline."""
    graph = StateGraph(PipelineGraphState)

    # Add nodes
    graph.add_node("resolve_identity", pipeline.resolve_identity)
    graph.add_node("list_services", pipeline.list_services)
    graph.add_node("process_service", pipeline.process_service)
    graph.add_node("write_manifest", pipeline.write_manifest)

    # Entry point
    graph.set_entry_point("resolve_identity")

    graph.add_conditional_edges(
        "resolve_identity",
        identity_router,
        {
            "list_services": "list_services",
            "end": END,
        }
    )

    for source in ("list_services", "process_service"):
        graph.add_conditional_edges(
            source,
            router,
            {
                "process_service": "process_service",
                "write_manifest": "write_manifest",
                "end": END,
            }
        )

    graph.add_edge("write_manifest", END)

    return graph.compile()
