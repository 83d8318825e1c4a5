"""
transport - Reflection Sessions
===============================

Question this layer answers:
"How do we ask a server what it exposes?"

- ReflectionSession: the two-operation contract
- GrpcReflectionSession: the real thing, over gRPC server reflection
- InMemoryTransport: scripted servers for tests

Transport does NOT:
- Retry (that's coordination)
- Know about networks or chains
- Render anything
"""

from .session import (
    FILE_CONTAINING_SYMBOL,
    LIST_SERVICES,
    OPERATIONS,
    RESERVED_PREFIX,
    ReflectionSession,
    SessionFactory,
    describe_error,
    is_reserved,
)
from .memory import (
    InMemoryReflectionServer,
    InMemoryReflectionSession,
    InMemoryTransport,
    SimulatedRpcError,
)
from .grpc_session import GrpcReflectionSession, grpc_session_factory

__all__ = [
    "FILE_CONTAINING_SYMBOL",
    "LIST_SERVICES",
    "OPERATIONS",
    "RESERVED_PREFIX",
    "ReflectionSession",
    "SessionFactory",
    "describe_error",
    "is_reserved",
    "InMemoryReflectionServer",
    "InMemoryReflectionSession",
    "InMemoryTransport",
    "SimulatedRpcError",
    "GrpcReflectionSession",
    "grpc_session_factory",
]
