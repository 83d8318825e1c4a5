"""
chainscope
==========

Discovers the RPC surface of gRPC servers through server reflection and
renders it as .proto snippets, one output tree per chain.

Layers:
    protocol       - descriptor value types and run records
    fsm            - attempt and pipeline state machines
    transport      - reflection sessions (gRPC, in-memory)
    context        - chain identity heuristics
    coordination   - failover across endpoints with bounded retries
    rendering      - descriptor -> text
    orchestration  - per-network LangGraph pipeline, parallel orchestrator
    observability  - discovery traces
    runtime        - configuration, logging, CLI
"""

from .errors import (
    AllEndpointsExhausted,
    ChainIdentityUnresolved,
    ChainscopeError,
    ConfigurationError,
    DuplicateChainIdentity,
    EndpointUnavailable,
    UnresolvableMessageType,
)
from .protocol import NetworkResult, NetworkSpec, NetworkStatus
from .runtime import RuntimeConfig, load_config, resolve_networks
from .orchestration import Orchestrator, RunSummary, run_discovery


__version__ = "0.1.0"
__all__ = [
    "AllEndpointsExhausted",
    "ChainIdentityUnresolved",
    "ChainscopeError",
    "ConfigurationError",
    "DuplicateChainIdentity",
    "EndpointUnavailable",
    "UnresolvableMessageType",
    "NetworkResult",
    "NetworkSpec",
    "NetworkStatus",
    "RuntimeConfig",
    "load_config",
    "resolve_networks",
    "Orchestrator",
    "RunSummary",
    "run_discovery",
]
