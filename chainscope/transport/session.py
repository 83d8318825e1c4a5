"""
Reflection Session Contract
===========================

The two operations the pipeline needs from a server, and nothing more.

Any transport (gRPC reflection, in-memory) satisfies this Protocol.
A session is bound to exactly one endpoint and lives for one attempt.
"""

from typing import Callable, List, Protocol, runtime_checkable

from ..protocol import FileDescriptor


RESERVED_PREFIX = "grpc.reflection"

# Operation names the failover invoker may call on a session
LIST_SERVICES = "list_services"
FILE_CONTAINING_SYMBOL = "file_containing_symbol"
OPERATIONS = frozenset({LIST_SERVICES, FILE_CONTAINING_SYMBOL})


@runtime_checkable
class ReflectionSession(Protocol):
    """Per-endpoint handle exposing the reflection operations."""

    endpoint: str

    async def list_services(self) -> List[str]:
        """Fully-qualified names of every service the server exposes."""
        ...

    async def file_containing_symbol(self, symbol: str) -> FileDescriptor:
        """Resolve the file that declares `symbol`."""
        ...

    def close(self) -> None:
        ...


SessionFactory = Callable[[str], ReflectionSession]


def is_reserved(service_name: str) -> bool:
    """Reflection-introspection services are never enumerated or rendered."""
    return service_name.startswith(RESERVED_PREFIX)


def describe_error(error: BaseException) -> str:
    """
    Short displayable code for a failed call.

    gRPC errors expose code(); everything else falls back to its message.
    """
    code = getattr(error, "code", None)
    if callable(code):
        status = code()
        return getattr(status, "name", str(status))
    if code:
        return str(code)
    return str(error) or type(error).__name__
