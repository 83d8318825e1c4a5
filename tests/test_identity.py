"""
Tests for Chain Identity Resolution
===================================
"""

import pytest

from chainscope.context import ChainIdentityResolver
from chainscope.errors import ChainIdentityUnresolved


class TestHeuristicTable:
    """Known chains resolve from the host, whatever the endpoint's reachability."""

    @pytest.mark.parametrize("endpoint, chain_id", [
        ("grpc.osmosis.example.com:443", "osmosis-1"),
        ("cosmoshub-grpc.lavenderfive.com:443", "cosmoshub-4"),
        ("neutron-grpc.polkachu.com:19190", "neutron-1"),
        ("juno-grpc.polkachu.com:12690", "juno-1"),
        ("akash-grpc.example.org:9090", "akashnet-2"),
        ("GRPC.OSMOSIS.ZONE:443", "osmosis-1"),
    ])
    def test_known_chains(self, endpoint, chain_id):
        assert ChainIdentityResolver().identity_for_endpoint(endpoint) == chain_id

    def test_first_match_wins(self):
        """A host mentioning two chains takes the earlier table entry."""
        resolver = ChainIdentityResolver()
        assert resolver.identity_for_endpoint("osmosis-juno-bridge.example:443") == "osmosis-1"

    def test_only_host_is_matched(self):
        """A port or path fragment cannot trigger the table."""
        resolver = ChainIdentityResolver(table=(("9090", "wrong"),))
        assert resolver.identity_for_endpoint("node.example:9090") == "node-example"


class TestDerivedIdentity:

    def test_host_is_sanitized(self):
        assert ChainIdentityResolver().identity_for_endpoint("foo.bar.net:443") == "foo-bar-net"

    def test_underscores_and_symbols_replaced(self):
        assert ChainIdentityResolver().identity_for_endpoint("my_node+1.local:9090") == "my-node-1-local"

    def test_empty_host_falls_back_to_raw_endpoint(self):
        assert ChainIdentityResolver().identity_for_endpoint(":9090") == "_9090"


class TestResolve:

    def test_first_endpoint_wins(self):
        identity = ChainIdentityResolver().resolve(["foo.bar.net:443", "grpc.osmosis.zone:443"])
        assert identity.chain_id == "foo-bar-net"
        assert identity.endpoint == "foo.bar.net:443"

    def test_skips_endpoints_without_a_label(self):
        identity = ChainIdentityResolver().resolve(["", "grpc.osmosis.zone:443"])
        assert identity.chain_id == "osmosis-1"
        assert identity.endpoint == "grpc.osmosis.zone:443"

    def test_raises_when_nothing_resolves(self):
        with pytest.raises(ChainIdentityUnresolved):
            ChainIdentityResolver().resolve([""])

    def test_prioritize_moves_active_first(self):
        ordered = ChainIdentityResolver.prioritize(["a:1", "b:2", "c:3"], "b:2")
        assert ordered == ["b:2", "a:1", "c:3"]

    def test_prioritize_keeps_order_when_active_is_first(self):
        assert ChainIdentityResolver.prioritize(["a:1", "b:2"], "a:1") == ["a:1", "b:2"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
