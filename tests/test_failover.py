"""
Tests for the Failover Invoker
==============================

Retry counts, waits and endpoint order, observed through the in-memory
transport's call log and a recording sleep.
"""

import asyncio

import pytest

from chainscope.coordination import FailoverInvoker, FailoverPolicy
from chainscope.errors import AllEndpointsExhausted
from chainscope.observability import DiscoveryTracer
from chainscope.transport import FILE_CONTAINING_SYMBOL, LIST_SERVICES

from conftest import make_server


def invoke(invoker, endpoints, operation, *args):
    return asyncio.run(invoker.invoke(endpoints, operation, *args))


class TestHealthyEndpoint:

    def test_first_endpoint_answers_once(self, transport, sleep):
        """A healthy first endpoint gets exactly one call; the rest are never touched."""
        for endpoint in ("a:443", "b:443", "c:443"):
            transport.register(endpoint, make_server())
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        result = invoke(invoker, ["a:443", "b:443", "c:443"], LIST_SERVICES)

        assert result.endpoint == "a:443"
        assert result.attempts == 1
        assert len(transport.calls) == 1
        assert transport.endpoints_called() == ["a:443"]
        assert sleep.calls == []

    def test_passes_arguments(self, transport, sleep):
        transport.register("a:443", make_server())
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        result = invoke(invoker, ["a:443"], FILE_CONTAINING_SYMBOL, "cosmos.bank.v1beta1.Query")

        assert result.value.lookup_service("cosmos.bank.v1beta1.Query") is not None
        assert transport.calls[0].argument == "cosmos.bank.v1beta1.Query"

    def test_session_per_attempt_is_closed(self, transport, sleep):
        transport.register("a:443", make_server(fail_times=1))
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        invoke(invoker, ["a:443"], LIST_SERVICES)

        assert len(transport.sessions) == 2
        assert all(session.closed for session in transport.sessions)


class TestRetries:

    def test_dead_endpoint_tried_three_times_with_waits(self, transport, sleep):
        """Three attempts, 2s apart, then fall over to the next endpoint."""
        transport.register("dead:443", make_server(always_fail=True))
        transport.register("live:443", make_server())
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        result = invoke(invoker, ["dead:443", "live:443"], LIST_SERVICES)

        assert result.endpoint == "live:443"
        assert len(transport.calls_to("dead:443")) == 3
        assert len(transport.calls_to("live:443")) == 1
        assert sleep.calls == [2.0, 2.0]
        assert all(seconds >= 2.0 for seconds in sleep.calls)

    def test_recovers_on_same_endpoint(self, transport, sleep):
        transport.register("flaky:443", make_server(fail_times=2))
        transport.register("backup:443", make_server())
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        result = invoke(invoker, ["flaky:443", "backup:443"], LIST_SERVICES)

        assert result.endpoint == "flaky:443"
        assert result.attempts == 3
        assert transport.calls_to("backup:443") == []

    def test_no_wait_after_last_attempt(self, transport, sleep):
        transport.register("dead:443", make_server(always_fail=True))
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        with pytest.raises(AllEndpointsExhausted):
            invoke(invoker, ["dead:443"], LIST_SERVICES)

        assert len(sleep.calls) == 2

    def test_custom_policy(self, transport, sleep):
        transport.register("dead:443", make_server(always_fail=True))
        invoker = FailoverInvoker(
            transport.session, policy=FailoverPolicy(max_attempts=2, retry_delay=0.5), sleep=sleep
        )

        with pytest.raises(AllEndpointsExhausted):
            invoke(invoker, ["dead:443"], LIST_SERVICES)

        assert len(transport.calls) == 2
        assert sleep.calls == [0.5]


class TestExhaustion:

    def test_order_is_preserved_and_never_revisited(self, transport, sleep):
        for endpoint in ("a:443", "b:443", "c:443"):
            transport.register(endpoint, make_server(always_fail=True))
        invoker = FailoverInvoker(transport.session, sleep=sleep)

        with pytest.raises(AllEndpointsExhausted) as excinfo:
            invoke(invoker, ["a:443", "b:443", "c:443"], LIST_SERVICES)

        called = [call.endpoint for call in transport.calls]
        assert called == ["a:443"] * 3 + ["b:443"] * 3 + ["c:443"] * 3
        assert excinfo.value.endpoints == ("a:443", "b:443", "c:443")
        assert excinfo.value.last_error.code == "UNAVAILABLE"

    def test_unknown_endpoint_counts_as_unavailable(self, transport, sleep):
        invoker = FailoverInvoker(transport.session, sleep=sleep)
        with pytest.raises(AllEndpointsExhausted):
            invoke(invoker, ["nowhere:443"], LIST_SERVICES)
        assert len(transport.calls) == 3

    def test_unknown_operation_is_rejected_before_any_call(self, transport, sleep):
        invoker = FailoverInvoker(transport.session, sleep=sleep)
        with pytest.raises(ValueError):
            invoke(invoker, ["a:443"], "server_reflection_info")
        assert transport.calls == []


class TestTracing:

    def test_attempts_are_traced(self, transport, sleep):
        transport.register("dead:443", make_server(always_fail=True))
        transport.register("live:443", make_server())
        tracer = DiscoveryTracer()
        invoker = FailoverInvoker(transport.session, sleep=sleep, tracer=tracer, network="osmosis")

        invoke(invoker, ["dead:443", "live:443"], LIST_SERVICES)

        trace = tracer.get_trace("osmosis")
        assert len(trace.events("attempt_failed")) == 3
        assert len(trace.events("endpoint_exhausted")) == 1
        assert trace.events("attempt_succeeded")[0].data["endpoint"] == "live:443"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
