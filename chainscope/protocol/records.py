"""
Run Records
===========

What a run is configured with and what it produces.

NetworkSpec  = WHERE to look (immutable, built once at startup)
ManifestEntry / Manifest = WHAT was generated for one network
NetworkResult = HOW one network's pipeline ended
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from .descriptors import ServiceDescriptor


@dataclass(frozen=True)
class NetworkSpec:
    """
    One logical network and its endpoints in failover priority order.

    Example:
        spec = NetworkSpec.create("osmosis", ["grpc.osmosis.zone:443"])
    """
    name: str
    endpoints: Tuple[str, ...]

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Network name must not be empty")
        if not self.endpoints:
            raise ConfigurationError(f"Network {self.name!r} has no endpoints")

    @classmethod
    def create(cls, name: str, endpoints: Sequence[str]) -> "NetworkSpec":
        return cls(name=name, endpoints=tuple(endpoints))


@dataclass(frozen=True)
class ChainIdentity:
    """A best-effort chain label and the endpoint it came from."""
    chain_id: str
    endpoint: str


@dataclass(frozen=True)
class ManifestEntry:
    """One rendered service. `methods` always equals the descriptor's method count."""
    service: str
    path: str
    methods: int

    @classmethod
    def for_service(cls, service: ServiceDescriptor) -> "ManifestEntry":
        return cls(
            service=service.full_name,
            path=str(PurePosixPath(*service.package_path)),
            methods=len(service.methods),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"service": self.service, "path": self.path, "methods": self.methods}


@dataclass
class Manifest:
    """Per-network summary written to manifest.json."""
    chain_id: str
    network_name: str
    endpoint: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    services: List[ManifestEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "networkName": self.network_name,
            "endpoint": self.endpoint,
            "generatedAt": self.generated_at.isoformat(),
            "services": [entry.to_dict() for entry in self.services],
        }


class NetworkStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class NetworkResult:
    """How one network's pipeline ended."""
    network: str
    status: NetworkStatus
    chain_id: Optional[str] = None
    endpoint: Optional[str] = None
    service_count: int = 0
    output_dir: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is NetworkStatus.SUCCESS

    def summary_line(self) -> str:
        """One line for the run summary."""
        line = f"{self.network} chain={self.chain_id or '-'} status={self.status.value}"
        if self.succeeded:
            return f"{line} services={self.service_count}"
        return f"{line} error={self.error}"
