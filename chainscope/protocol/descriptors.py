"""
Descriptor Value Types
======================

The fixed shapes every reflection transport must hand back.

Why explicit value types?
- Transports differ (gRPC reflection, in-memory fakes) but the renderer
  only ever sees these
- Declaration order is part of the contract, so it is carried in
  tuples and insertion-ordered dicts
- Frozen dataclasses cannot be mutated after the transport builds them
"""

from dataclasses import dataclass, field
from typing import Dict, Generic, Iterable, Iterator, Optional, Tuple, TypeVar


T = TypeVar("T")


# ============================================================
# ORDERED SET - first-seen order, no duplicates
# ============================================================

class OrderedSet(Generic[T]):
    """
    Insertion-ordered set.

    Example:
        types = OrderedSet(["b.Req", "b.Resp", "b.Req"])
        list(types)  # ["b.Req", "b.Resp"]
    """

    def __init__(self, items: Iterable[T] = ()):
        self._items: Dict[T, None] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> None:
        self._items.setdefault(item, None)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


# ============================================================
# MESSAGES
# ============================================================

@dataclass(frozen=True)
class FieldDescriptor:
    """
    One field of a message.

    Example:
        FieldDescriptor(name="address", type="string", id=1)
    """
    name: str
    type: str
    id: int
    repeated: bool = False

    def __post_init__(self):
        if self.id <= 0:
            raise ValueError(f"Field number must be positive, got {self.id}")


@dataclass(frozen=True)
class MessageDescriptor:
    """A message type and its fields in declaration order."""
    name: str
    full_name: str
    fields: Tuple[FieldDescriptor, ...] = ()


# ============================================================
# SERVICES
# ============================================================

@dataclass(frozen=True)
class MethodDescriptor:
    """One rpc of a service. Type names are fully qualified."""
    name: str
    request_type: str
    response_type: str
    request_streaming: bool = False
    response_streaming: bool = False


@dataclass(frozen=True)
class ServiceDescriptor:
    """
    A service and its methods.

    `methods` iterates in declaration order as reported by the transport.
    """
    name: str
    full_name: str
    methods: Dict[str, MethodDescriptor] = field(default_factory=dict)

    @classmethod
    def from_methods(
        cls, full_name: str, methods: Iterable[MethodDescriptor]
    ) -> "ServiceDescriptor":
        """Build a service from an ordered iterable of methods."""
        return cls(
            name=full_name.rsplit(".", 1)[-1],
            full_name=full_name,
            methods={method.name: method for method in methods},
        )

    @property
    def package_path(self) -> Tuple[str, ...]:
        """Dotted full name split into path segments, ending in the simple name."""
        return tuple(self.full_name.split("."))


# ============================================================
# FILE - what file_containing_symbol resolves to
# ============================================================

@dataclass
class FileDescriptor:
    """
    Lookup table for everything a reflection call resolved.

    Keys are fully-qualified names without a leading dot.
    """
    name: str = ""
    services: Dict[str, ServiceDescriptor] = field(default_factory=dict)
    messages: Dict[str, MessageDescriptor] = field(default_factory=dict)

    def lookup_service(self, full_name: str) -> Optional[ServiceDescriptor]:
        return self.services.get(full_name.lstrip("."))

    def lookup_message(self, full_name: str) -> Optional[MessageDescriptor]:
        return self.messages.get(full_name.lstrip("."))
