"""
runtime - The Shell
===================

Run methods:
    chainscope [endpoint] [--config PATH] [--out DIR]
    python -m chainscope [endpoint] ...

What the runtime does:
- Loads configuration once and builds RuntimeConfig
- Sets up logging
- Hands RuntimeConfig to the orchestrator
- Prints the summary and picks the exit code

What the runtime does NOT do:
- Retry (that's coordination)
- Decide what runs next (that's orchestration)
- Talk to servers (that's transport)

The CLI lives in `chainscope.runtime.runner`.
"""

from .config import (
    DEFAULT_NETWORK,
    LEGACY_KEY,
    NETWORK_PREFIX,
    RuntimeConfig,
    load_config,
    load_config_source,
    resolve_networks,
)
from .logging_config import setup_logger

__all__ = [
    "DEFAULT_NETWORK",
    "LEGACY_KEY",
    "NETWORK_PREFIX",
    "RuntimeConfig",
    "load_config",
    "load_config_source",
    "resolve_networks",
    "setup_logger",
]
