"""
protocol - Shared Data Shapes
=============================

Question this layer answers:
"What does the rest of the system exchange?"

- Descriptor value types every reflection transport must produce
- Run records: NetworkSpec in, ManifestEntry/NetworkResult out

This layer does NOT:
- Talk to servers (that's transport)
- Decide retries (that's coordination)
- Render text (that's rendering)
"""

from .descriptors import (
    FieldDescriptor,
    FileDescriptor,
    MessageDescriptor,
    MethodDescriptor,
    OrderedSet,
    ServiceDescriptor,
)
from .records import (
    ChainIdentity,
    Manifest,
    ManifestEntry,
    NetworkResult,
    NetworkSpec,
    NetworkStatus,
)

__all__ = [
    "FieldDescriptor",
    "FileDescriptor",
    "MessageDescriptor",
    "MethodDescriptor",
    "OrderedSet",
    "ServiceDescriptor",
    "ChainIdentity",
    "Manifest",
    "ManifestEntry",
    "NetworkResult",
    "NetworkSpec",
    "NetworkStatus",
]
