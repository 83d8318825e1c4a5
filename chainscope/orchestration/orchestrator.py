"""
Parallel Orchestrator
=====================

Runs one pipeline per configured network and waits for every one of them.

Structured join:
- spawn one task per network
- await all of them unconditionally
- turn each outcome into a plain NetworkResult

A failed network never cancels or affects its siblings. Chain ids are
claimed before fan-out, so no two pipelines share an output subtree.
The only error that escapes is ConfigurationError, when there is
nothing to run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..context import ChainIdentityResolver
from ..coordination import FailoverInvoker, FailoverPolicy
from ..coordination.failover import Sleep
from ..errors import ChainIdentityUnresolved, ConfigurationError, DuplicateChainIdentity
from ..observability import DiscoveryTracer
from ..protocol import NetworkResult, NetworkSpec, NetworkStatus
from ..runtime.config import RuntimeConfig
from ..transport import SessionFactory
from .pipeline import NetworkPipeline


logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Everything a run produced, in configuration order."""
    results: List[NetworkResult] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.succeeded)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    def result_for(self, network: str) -> Optional[NetworkResult]:
        for result in self.results:
            if result.network == network:
                return result
        return None

    def lines(self) -> List[str]:
        return [result.summary_line() for result in self.results]


class Orchestrator:
    """
    Fans out one NetworkPipeline per NetworkSpec.

    Example:
        orchestrator = Orchestrator(config, grpc_session_factory())
        summary = asyncio.run(orchestrator.run())
    """

    def __init__(
        self,
        config: RuntimeConfig,
        session_factory: SessionFactory,
        sleep: Sleep = asyncio.sleep,
        tracer: Optional[DiscoveryTracer] = None,
        resolver: Optional[ChainIdentityResolver] = None,
    ):
        self.config = config
        self.session_factory = session_factory
        self._sleep = sleep
        self.tracer = tracer
        self.resolver = resolver or ChainIdentityResolver()

    def build_pipeline(self, spec: NetworkSpec) -> NetworkPipeline:
        """One invoker and one pipeline per network; nothing mutable is shared."""
        invoker = FailoverInvoker(
            self.session_factory,
            policy=FailoverPolicy(
                max_attempts=self.config.max_attempts,
                retry_delay=self.config.retry_delay,
            ),
            sleep=self._sleep,
            tracer=self.tracer,
            network=spec.name,
        )
        return NetworkPipeline(
            spec,
            invoker,
            Path(self.config.output_dir),
            resolver=self.resolver,
            strict=self.config.strict_messages,
            tracer=self.tracer,
        )

    def claim_chain_ids(self, networks: List[NetworkSpec]) -> Dict[str, NetworkResult]:
        """
        Reject networks whose chain id an earlier network already owns.

        Returns a failed NetworkResult per rejected network. Networks with
        no resolvable identity are left to their pipeline.
        """
        owners: Dict[str, str] = {}
        rejected: Dict[str, NetworkResult] = {}
        for spec in networks:
            try:
                chain_id = self.resolver.resolve(spec.endpoints).chain_id
            except ChainIdentityUnresolved:
                continue
            if chain_id not in owners:
                owners[chain_id] = spec.name
                continue
            error = DuplicateChainIdentity(spec.name, chain_id, owners[chain_id])
            logger.error("[%s] %s", spec.name, error)
            rejected[spec.name] = NetworkResult(
                network=spec.name,
                status=NetworkStatus.FAILED,
                chain_id=chain_id,
                error=str(error),
            )
        return rejected

    async def run(self) -> RunSummary:
        networks = list(self.config.networks)
        if not networks:
            raise ConfigurationError("No networks configured")

        rejected = self.claim_chain_ids(networks)
        runnable = [spec for spec in networks if spec.name not in rejected]

        logger.info("Starting discovery for %d network(s)", len(runnable))
        tasks = [
            asyncio.create_task(self.build_pipeline(spec).run(), name=f"pipeline:{spec.name}")
            for spec in runnable
        ]
        outcomes = dict(zip(
            (spec.name for spec in runnable),
            await asyncio.gather(*tasks, return_exceptions=True),
        ))

        summary = RunSummary()
        for spec in networks:
            if spec.name in rejected:
                summary.results.append(rejected[spec.name])
                continue
            outcome = outcomes[spec.name]
            if isinstance(outcome, NetworkResult):
                summary.results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                # CancelledError / KeyboardInterrupt are not ours to swallow
                raise outcome
            logger.error("[%s] pipeline crashed: %r", spec.name, outcome)
            summary.results.append(NetworkResult(
                network=spec.name,
                status=NetworkStatus.FAILED,
                error=f"{type(outcome).__name__}: {outcome}",
            ))

        logger.info(
            "Discovery finished: %d succeeded, %d failed", summary.succeeded, summary.failed
        )
        return summary


def run_discovery(
    config: RuntimeConfig,
    session_factory: SessionFactory,
    tracer: Optional[DiscoveryTracer] = None,
) -> RunSummary:
    """Synchronous entry point used by the runtime."""
    return asyncio.run(Orchestrator(config, session_factory, tracer=tracer).run())
