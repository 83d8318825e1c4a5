"""
context - Chain Identity
========================

Question this layer answers:
"Which chain does this network belong to?"

A best-effort label, not a security property.
"""

from .identity import (
    DEFAULT_CHAIN_TABLE,
    ChainIdentityResolver,
    host_of,
    sanitize_host,
)

__all__ = ["DEFAULT_CHAIN_TABLE", "ChainIdentityResolver", "host_of", "sanitize_host"]
