"""
Runtime - The Shell
===================

This is THE SHELL - the entrypoint that wraps the entire system.

This file provides:
- CLI argument parsing
- Logging setup
- Configuration loading (once, before any network is touched)
- The run summary and the process exit code

Run methods:
    chainscope                                  # networks from GRPC / GRPC_NETWORK_* env
    chainscope grpc.osmosis.zone:443            # one ad hoc "default" network
    chainscope --config networks.yaml --out ./protos
    python -m chainscope --plaintext localhost:9090

Exit code is 1 only when no network is configured. Individual network
failures are reported in the summary, not through the exit code.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from ..errors import ConfigurationError
from ..observability import DiscoveryTracer
from ..orchestration import RunSummary, run_discovery
from ..transport import SessionFactory, grpc_session_factory
from .config import RuntimeConfig, load_config
from .logging_config import setup_logger


logger = logging.getLogger(__name__)


# ============================================================================
# Summary
# ============================================================================

def print_summary(summary: RunSummary, config: RuntimeConfig, out: Optional[TextIO] = None) -> None:
    """Print the run summary."""
    out = out or sys.stdout
    print("\n" + "=" * 50, file=out)
    print("DISCOVERY SUMMARY", file=out)
    print("=" * 50, file=out)
    print(f"Networks attempted: {summary.attempted}", file=out)
    for result in summary.results:
        status = "✓" if result.succeeded else "✗"
        print(f"  {status} {result.summary_line()}", file=out)
    print(f"Output: {config.output_dir}", file=out)
    print("=" * 50, file=out)


# ============================================================================
# CLI Entrypoint
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainscope",
        description="Discover gRPC services through server reflection and render them as .proto snippets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  GRPC=host1:443,host2:443 chainscope                 # one "default" network
  GRPC_NETWORK_OSMOSIS=a:443 GRPC_NETWORK_JUNO=b:443 chainscope
  chainscope grpc.osmosis.zone:443                   # override everything
  chainscope --config networks.yaml --out ./protos
  chainscope --trace-file traces.json               # keep per-network attempt traces
"""
    )

    parser.add_argument("endpoint", nargs="?", help="Single endpoint overriding all configured networks")
    parser.add_argument("--config", type=str, help="YAML config file path")
    parser.add_argument("--out", default="./output", help="Output root directory")
    parser.add_argument("--strict-messages", action="store_true",
                        help="Fail a network when a referenced message type cannot be rendered")
    parser.add_argument("--plaintext", action="store_true", help="Use insecure (non-TLS) channels")
    parser.add_argument("--retry-delay", type=float, default=2.0,
                        help="Seconds between attempts on the same endpoint")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    parser.add_argument("--trace-file", type=str, help="Write per-network discovery traces to this JSON file")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(
    argv: Optional[List[str]] = None,
    session_factory: Optional[SessionFactory] = None,
) -> int:
    """CLI entrypoint. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    level = logging.WARNING if args.quiet else getattr(logging, args.log_level)
    setup_logger("chainscope", log_file=args.log_file, level=level)

    try:
        config = load_config(
            args.config,
            override=args.endpoint,
            output_dir=args.out,
            strict_messages=args.strict_messages,
            plaintext=args.plaintext,
            retry_delay=args.retry_delay,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for spec in config.networks:
        logger.info("Network %s: %s", spec.name, ", ".join(spec.endpoints))

    factory = session_factory or grpc_session_factory(plaintext=config.plaintext)
    tracer = DiscoveryTracer() if args.trace_file else None
    try:
        summary = run_discovery(config, factory, tracer=tracer)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if tracer is not None:
        tracer.export(args.trace_file)
        logger.info("Traces written to %s", args.trace_file)

    print_summary(summary, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
