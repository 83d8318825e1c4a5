"""
Chain Identity Resolver
=======================

Derives a best-effort chain label from a network's endpoints.

This is NOT verification: nothing here contacts a server or checks the
label against an authoritative registry. It only has to be stable, so the
output tree for a network lands in the same directory run after run.

Per endpoint:
    1. Known-chain table, first substring match on the host wins
    2. Host with anything outside [A-Za-z0-9-] replaced by "-"
    3. If the host is malformed, raw endpoint with ":" and "." -> "_"
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from ..errors import ChainIdentityUnresolved
from ..protocol import ChainIdentity


logger = logging.getLogger(__name__)

# Checked in order; first match wins
DEFAULT_CHAIN_TABLE: Tuple[Tuple[str, str], ...] = (
    ("cosmoshub", "cosmoshub-4"),
    ("osmosis", "osmosis-1"),
    ("neutron", "neutron-1"),
    ("juno", "juno-1"),
    ("akash", "akashnet-2"),
)

_UNSAFE_HOST_CHARS = re.compile(r"[^A-Za-z0-9-]")


def host_of(endpoint: str) -> str:
    """Text before the first ':'."""
    return endpoint.split(":", 1)[0]


def sanitize_host(endpoint: str) -> str:
    """Host portion made filesystem-safe. Raises ValueError on an empty host."""
    host = host_of(endpoint)
    if not host:
        raise ValueError(f"Endpoint has no host portion: {endpoint!r}")
    return _UNSAFE_HOST_CHARS.sub("-", host)


class ChainIdentityResolver:
    """
    Resolves ChainIdentity from an ordered endpoint list.

    The resolver never retries and never does I/O; endpoints are only
    walked past when one yields an empty label.
    """

    def __init__(self, table: Sequence[Tuple[str, str]] = DEFAULT_CHAIN_TABLE):
        self.table = tuple(table)

    def identity_for_endpoint(self, endpoint: str) -> Optional[str]:
        """Apply the three-step heuristic to one endpoint."""
        host = host_of(endpoint).lower()
        for needle, chain_id in self.table:
            if needle in host:
                return chain_id

        try:
            derived = sanitize_host(endpoint)
        except ValueError:
            derived = endpoint.replace(":", "_").replace(".", "_")
            logger.debug("Malformed endpoint %r, falling back to %r", endpoint, derived)

        return derived or None

    def resolve(self, endpoints: Sequence[str]) -> ChainIdentity:
        """
        First endpoint to yield a label wins.

        Raises:
            ChainIdentityUnresolved: no endpoint yielded a label
        """
        for endpoint in endpoints:
            chain_id = self.identity_for_endpoint(endpoint)
            if chain_id:
                return ChainIdentity(chain_id=chain_id, endpoint=endpoint)
        raise ChainIdentityUnresolved(
            f"No chain identity from endpoints: {', '.join(endpoints) or '(none)'}"
        )

    @staticmethod
    def prioritize(endpoints: Sequence[str], active: str) -> List[str]:
        """Active endpoint first, the rest in their original order."""
        rest = [endpoint for endpoint in endpoints if endpoint != active]
        if active in endpoints:
            return [active] + rest
        return rest
