"""
Error Types
===========

Every failure the discovery pipeline knows how to name.

Scope of each error:
- ConfigurationError      -> whole run (process exits nonzero)
- EndpointUnavailable     -> one attempt against one endpoint
- AllEndpointsExhausted   -> one network's pipeline
- ChainIdentityUnresolved -> one network's pipeline
- UnresolvableMessageType -> one network's pipeline (strict rendering only)
- DuplicateChainIdentity  -> the later of two networks sharing a chain id
"""

from typing import Optional, Sequence


class ChainscopeError(Exception):
    """Base class for all chainscope errors."""


class ConfigurationError(ChainscopeError):
    """No usable network could be built from the configuration."""


class EndpointUnavailable(ChainscopeError):
    """A single attempt against a single endpoint failed."""

    def __init__(self, endpoint: str, operation: str, code: str, attempt: int):
        self.endpoint = endpoint
        self.operation = operation
        self.code = code
        self.attempt = attempt
        super().__init__(
            f"[{operation}] error on {endpoint} (attempt {attempt}): {code}"
        )


class AllEndpointsExhausted(ChainscopeError):
    """Every endpoint failed every attempt for one operation."""

    def __init__(
        self,
        operation: str,
        endpoints: Sequence[str],
        last_error: Optional[EndpointUnavailable] = None,
    ):
        self.operation = operation
        self.endpoints = tuple(endpoints)
        self.last_error = last_error
        detail = f" (last error: {last_error.code})" if last_error else ""
        super().__init__(
            f"[{operation}] all endpoints failed: {', '.join(self.endpoints)}{detail}"
        )


class ChainIdentityUnresolved(ChainscopeError):
    """No endpoint produced a usable chain identifier."""


class UnresolvableMessageType(ChainscopeError):
    """A referenced message type has no descriptor or no fields."""

    def __init__(self, type_name: str, service: str = ""):
        self.type_name = type_name
        self.service = service
        where = f" (referenced by {service})" if service else ""
        super().__init__(f"cannot resolve message type {type_name}{where}")


class DuplicateChainIdentity(ChainscopeError):
    """Two networks in one run resolved to the same chain identifier."""

    def __init__(self, network: str, chain_id: str, claimed_by: str):
        self.network = network
        self.chain_id = chain_id
        self.claimed_by = claimed_by
        super().__init__(
            f"chain id {chain_id} is already written by network {claimed_by}"
        )
