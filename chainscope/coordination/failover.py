"""
Failover Invoker
================

Runs one reflection operation against an ordered endpoint list.

Rules:
------
1. Endpoints are tried in list order; an exhausted endpoint is never revisited
2. Each endpoint gets at most `max_attempts` calls
3. Between failed attempts on the SAME endpoint, wait `retry_delay` seconds
   (never after the last attempt)
4. The first success wins; later endpoints are not touched
5. If every endpoint is exhausted, raise AllEndpointsExhausted

A fresh session is opened for every attempt and closed afterwards.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from ..errors import AllEndpointsExhausted, EndpointUnavailable
from ..fsm import AttemptFSM
from ..observability import DiscoveryTracer
from ..transport import OPERATIONS, SessionFactory, describe_error


logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class FailoverPolicy:
    """Retry budget per endpoint."""
    max_attempts: int = 3
    retry_delay: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")


@dataclass(frozen=True)
class InvocationResult(Generic[T]):
    """A successful call and where it happened."""
    value: T
    endpoint: str
    attempts: int


class FailoverInvoker:
    """
    Bounded retry per endpoint, ordered fallback across endpoints.

    Example:
        invoker = FailoverInvoker(transport.session)
        result = await invoker.invoke(["a:443", "b:443"], "list_services")
        result.value, result.endpoint
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        policy: Optional[FailoverPolicy] = None,
        sleep: Sleep = asyncio.sleep,
        tracer: Optional[DiscoveryTracer] = None,
        network: str = "",
    ):
        self.session_factory = session_factory
        self.policy = policy or FailoverPolicy()
        self._sleep = sleep
        self.tracer = tracer
        self.network = network

    def _trace(self, event_type: str, **data) -> None:
        if self.tracer is not None:
            self.tracer.log(self.network, event_type, **data)

    async def _attempt(self, endpoint: str, operation: str, args: Sequence[Any]) -> Any:
        session = self.session_factory(endpoint)
        try:
            return await getattr(session, operation)(*args)
        finally:
            session.close()

    async def invoke(self, endpoints: Sequence[str], operation: str, *args: Any) -> InvocationResult:
        """
        Call `operation(*args)` on a session, failing over across `endpoints`.

        Raises:
            ValueError: unknown operation or empty endpoint list
            AllEndpointsExhausted: every endpoint failed every attempt
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown reflection operation: {operation}")
        if not endpoints:
            raise ValueError("Endpoint list must not be empty")

        last_error: Optional[EndpointUnavailable] = None

        for endpoint in endpoints:
            logger.info("[%s] trying endpoint %s", operation, endpoint)
            fsm = AttemptFSM(self.policy.max_attempts, self.policy.retry_delay)
            fsm.begin()

            while not fsm.is_terminal():
                try:
                    value = await self._attempt(endpoint, operation, args)
                except Exception as exc:
                    last_error = EndpointUnavailable(
                        endpoint, operation, describe_error(exc), fsm.attempts
                    )
                    logger.warning("%s", last_error)
                    self._trace(
                        "attempt_failed",
                        endpoint=endpoint,
                        operation=operation,
                        attempt=fsm.attempts,
                        code=last_error.code,
                    )
                    fsm.fail(last_error.code)
                else:
                    fsm.succeed()
                    logger.info(
                        "[%s] success on %s (attempt %d)", operation, endpoint, fsm.attempts
                    )
                    self._trace(
                        "attempt_succeeded",
                        endpoint=endpoint,
                        operation=operation,
                        attempt=fsm.attempts,
                    )
                    return InvocationResult(value=value, endpoint=endpoint, attempts=fsm.attempts)

                if fsm.is_waiting:
                    logger.info("  waiting %.0fms before retry", fsm.wait_seconds * 1000)
                    await self._sleep(fsm.wait_seconds)
                    fsm.resume()

            logger.error(
                "[%s] endpoint %s exhausted after %d attempts", operation, endpoint, fsm.attempts
            )
            self._trace("endpoint_exhausted", endpoint=endpoint, operation=operation)

        raise AllEndpointsExhausted(operation, endpoints, last_error)

