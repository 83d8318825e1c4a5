"""
In-Memory Reflection Transport
==============================

Scripted reflection servers for local runs and tests.

Why in-memory is fine for testing:
1. The pipeline only depends on the ReflectionSession contract
2. Failures can be scripted per endpoint and per operation
3. Every call is recorded, so attempt counts are observable

In production, swap this for GrpcReflectionSession.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..protocol import FileDescriptor, MessageDescriptor, ServiceDescriptor
from .session import FILE_CONTAINING_SYMBOL, LIST_SERVICES


class SimulatedRpcError(Exception):
    """Raised by in-memory sessions in place of a transport error."""

    def __init__(self, status: str = "UNAVAILABLE", details: str = ""):
        self.status = status
        super().__init__(details or status)

    def code(self) -> str:
        return self.status


@dataclass
class CallRecord:
    """One call that reached an in-memory server."""
    endpoint: str
    operation: str
    argument: Optional[str] = None


@dataclass
class InMemoryReflectionServer:
    """
    A fake server.

    Failure plan:
        always_fail: every call fails
        fail_times: the first N calls fail, later ones succeed
        fail_operations: limit failures to these operation names

    missing_from_file names listed services whose fetched file lacks
    their own descriptor.
    """
    services: List[ServiceDescriptor] = field(default_factory=list)
    messages: List[MessageDescriptor] = field(default_factory=list)
    extra_services: Tuple[str, ...] = ()
    always_fail: bool = False
    fail_times: int = 0
    fail_operations: FrozenSet[str] = frozenset()
    error_status: str = "UNAVAILABLE"
    missing_from_file: FrozenSet[str] = frozenset()

    def _should_fail(self, operation: str) -> bool:
        if self.fail_operations and operation not in self.fail_operations:
            return False
        if self.always_fail:
            return True
        if self.fail_times > 0:
            self.fail_times -= 1
            return True
        return False

    def list_services(self) -> List[str]:
        if self._should_fail(LIST_SERVICES):
            raise SimulatedRpcError(self.error_status)
        return [service.full_name for service in self.services] + list(self.extra_services)

    def file_containing_symbol(self, symbol: str) -> FileDescriptor:
        if self._should_fail(FILE_CONTAINING_SYMBOL):
            raise SimulatedRpcError(self.error_status)
        known = any(s.full_name == symbol for s in self.services)
        if not known and symbol not in self.extra_services:
            raise SimulatedRpcError("NOT_FOUND", f"Symbol not found: {symbol}")
        services = {
            s.full_name: s for s in self.services
            if s.full_name == symbol and symbol not in self.missing_from_file
        }
        package = symbol.rsplit(".", 1)[0]
        return FileDescriptor(
            name=f"{package.replace('.', '/')}/service.proto",
            services=services,
            messages={m.full_name: m for m in self.messages},
        )


class InMemoryReflectionSession:
    """ReflectionSession backed by an InMemoryReflectionServer."""

    def __init__(self, endpoint: str, transport: "InMemoryTransport"):
        self.endpoint = endpoint
        self._transport = transport
        self.closed = False

    def _server(self) -> InMemoryReflectionServer:
        server = self._transport.servers.get(self.endpoint)
        if server is None:
            raise SimulatedRpcError("UNAVAILABLE", f"No route to {self.endpoint}")
        return server

    async def list_services(self) -> List[str]:
        self._transport.record(self.endpoint, LIST_SERVICES)
        return self._server().list_services()

    async def file_containing_symbol(self, symbol: str) -> FileDescriptor:
        self._transport.record(self.endpoint, FILE_CONTAINING_SYMBOL, symbol)
        return self._server().file_containing_symbol(symbol)

    def close(self) -> None:
        self.closed = True


class InMemoryTransport:
    """
    Registry of fake servers; `session` is a SessionFactory.

    Example:
        transport = InMemoryTransport()
        transport.register("a:443", InMemoryReflectionServer(services=[...]))
        orchestrator = Orchestrator(config, transport.session)
    """

    def __init__(self, servers: Optional[Dict[str, InMemoryReflectionServer]] = None):
        self.servers: Dict[str, InMemoryReflectionServer] = dict(servers or {})
        self.calls: List[CallRecord] = []
        self.sessions: List[InMemoryReflectionSession] = []

    def register(self, endpoint: str, server: InMemoryReflectionServer) -> None:
        self.servers[endpoint] = server

    def session(self, endpoint: str) -> InMemoryReflectionSession:
        session = InMemoryReflectionSession(endpoint, self)
        self.sessions.append(session)
        return session

    def record(self, endpoint: str, operation: str, argument: Optional[str] = None) -> None:
        self.calls.append(CallRecord(endpoint, operation, argument))

    def calls_to(self, endpoint: str, operation: Optional[str] = None) -> List[CallRecord]:
        return [
            call for call in self.calls
            if call.endpoint == endpoint and (operation is None or call.operation == operation)
        ]

    def endpoints_called(self) -> Iterable[str]:
        """Endpoints in first-contact order."""
        seen: Dict[str, None] = {}
        for call in self.calls:
            seen.setdefault(call.endpoint, None)
        return list(seen)
