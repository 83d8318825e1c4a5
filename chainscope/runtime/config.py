"""
Configuration Loader
====================

Turns raw configuration into the networks a run will discover.

Two shapes are understood:

    GRPC=host1:443,host2:443            -> one network named "default"
    GRPC_NETWORK_OSMOSIS=a:443,b:443    -> network "osmosis"
    GRPC_NETWORK_JUNO=c:443             -> network "juno"

Values come from the process environment, optionally overlaid by a YAML
file holding the same keys (or a `networks:` mapping). A single endpoint
given on the command line replaces all of it.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..errors import ConfigurationError
from ..protocol import NetworkSpec


logger = logging.getLogger(__name__)

LEGACY_KEY = "GRPC"
NETWORK_PREFIX = "GRPC_NETWORK_"
DEFAULT_NETWORK = "default"


# ============================================================================
# Runtime Configuration
# ============================================================================

@dataclass
class RuntimeConfig:
    """Everything a run needs, built once and passed down explicitly."""
    networks: Tuple[NetworkSpec, ...] = ()
    output_dir: str = "./output"
    strict_messages: bool = False
    plaintext: bool = False
    max_attempts: int = 3
    retry_delay: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError(f"max attempts must be at least 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ConfigurationError(f"retry delay must not be negative, got {self.retry_delay}")


# ============================================================================
# Network resolution
# ============================================================================

def split_endpoints(value: str) -> List[str]:
    """Comma-separated list, trimmed, empties dropped."""
    return [item.strip() for item in value.split(",") if item.strip()]


def resolve_networks(
    source: Mapping[str, str],
    override: Optional[str] = None,
) -> List[NetworkSpec]:
    """
    Build the ordered list of networks for a run.

    Args:
        source: Mapping of configuration keys to comma-separated endpoints
        override: A single endpoint that replaces everything else

    Returns:
        Networks sorted by name ("default" alone in the legacy shape)

    Raises:
        ConfigurationError: zero networks, or two keys naming the same network
    """
    if override is not None and override.strip():
        return [NetworkSpec.create(DEFAULT_NETWORK, [override.strip()])]

    networks: Dict[str, NetworkSpec] = {}
    for key, value in source.items():
        if not key.upper().startswith(NETWORK_PREFIX):
            continue
        name = key[len(NETWORK_PREFIX):].lower()
        if not name:
            continue
        endpoints = split_endpoints(str(value or ""))
        if not endpoints:
            logger.warning("Skipping %s: no endpoints listed", key)
            continue
        if name in networks:
            raise ConfigurationError(f"Network {name!r} is configured more than once")
        networks[name] = NetworkSpec.create(name, endpoints)

    if networks:
        if source.get(LEGACY_KEY):
            logger.info("Ignoring %s: per-network %s* entries take precedence", LEGACY_KEY, NETWORK_PREFIX)
        return [networks[name] for name in sorted(networks)]

    legacy = split_endpoints(str(source.get(LEGACY_KEY) or ""))
    if legacy:
        return [NetworkSpec.create(DEFAULT_NETWORK, legacy)]

    raise ConfigurationError(
        f"No networks configured. Set {LEGACY_KEY}=host1:443,host2:443 "
        f"or {NETWORK_PREFIX}<NAME>=host:443"
    )


# ============================================================================
# Sources
# ============================================================================

def _yaml_entries(data: Mapping[str, Any]) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    for key, value in data.items():
        if key == "networks":
            if not isinstance(value, Mapping):
                raise ConfigurationError("'networks' must be a mapping of name to endpoints")
            for name, endpoints in value.items():
                entries[f"{NETWORK_PREFIX}{str(name).upper()}"] = _join(endpoints)
        else:
            entries[str(key)] = _join(value)
    return entries


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return "" if value is None else str(value)


def load_config_source(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Environment overlaid by an optional YAML file.

    Args:
        config_path: Path to YAML config file (optional)
        environ: Defaults to os.environ

    Returns:
        Flat mapping suitable for resolve_networks()
    """
    source = {
        key: value
        for key, value in (os.environ if environ is None else environ).items()
        if key == LEGACY_KEY or key.upper().startswith(NETWORK_PREFIX)
    }
    if config_path is None:
        return source

    path = Path(config_path)
    if not path.exists():
        logger.warning("%s not found, using environment only", config_path)
        return source

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{config_path}: invalid YAML: {exc}") from exc

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{config_path}: top level must be a mapping")

    source.update(_yaml_entries(data))
    return source


def load_config(
    config_path: Optional[str] = None,
    override: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **options: Any,
) -> RuntimeConfig:
    """
    Load configuration and resolve networks.

    Keyword options are passed through to RuntimeConfig
    (output_dir, strict_messages, plaintext, retry_delay, ...).
    """
    source = load_config_source(config_path, environ)
    networks: Sequence[NetworkSpec] = resolve_networks(source, override)
    return RuntimeConfig(networks=tuple(networks), **options)
