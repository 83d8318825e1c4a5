"""
Tests for Configuration Loading
===============================
"""

import pytest

from chainscope.errors import ConfigurationError
from chainscope.runtime import RuntimeConfig, load_config, load_config_source, resolve_networks


def names(networks):
    return [network.name for network in networks]


class TestLegacyShape:

    def test_single_default_network(self):
        networks = resolve_networks({"GRPC": "a:443, b:443 ,,c:443"})
        assert names(networks) == ["default"]
        assert networks[0].endpoints == ("a:443", "b:443", "c:443")

    def test_keyed_entries_take_precedence(self):
        networks = resolve_networks({"GRPC": "a:443", "GRPC_NETWORK_OSMOSIS": "b:443"})
        assert names(networks) == ["osmosis"]


class TestKeyedShape:

    def test_names_are_lowercased_and_sorted(self):
        networks = resolve_networks({
            "GRPC_NETWORK_OSMOSIS": "o:443",
            "GRPC_NETWORK_COSMOSHUB": "c1:443,c2:443",
            "GRPC_NETWORK_Juno": "j:443",
        })
        assert names(networks) == ["cosmoshub", "juno", "osmosis"]
        assert networks[0].endpoints == ("c1:443", "c2:443")

    def test_empty_entry_is_skipped(self):
        networks = resolve_networks({"GRPC_NETWORK_OSMOSIS": "o:443", "GRPC_NETWORK_JUNO": " , "})
        assert names(networks) == ["osmosis"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_networks({"GRPC_NETWORK_OSMOSIS": "a:443", "GRPC_NETWORK_osmosis": "b:443"})

    def test_unrelated_keys_ignored(self):
        networks = resolve_networks({"GRPC_VERBOSITY": "debug", "GRPC": "a:443"})
        assert names(networks) == ["default"]


class TestOverride:

    def test_override_replaces_everything(self):
        networks = resolve_networks(
            {"GRPC": "a:443", "GRPC_NETWORK_OSMOSIS": "b:443"},
            override="localhost:9090",
        )
        assert names(networks) == ["default"]
        assert networks[0].endpoints == ("localhost:9090",)

    def test_blank_override_is_ignored(self):
        assert names(resolve_networks({"GRPC_NETWORK_JUNO": "j:443"}, override="  ")) == ["juno"]


class TestNoNetworks:

    @pytest.mark.parametrize("source", [{}, {"GRPC": ""}, {"GRPC": " , "}, {"GRPC_NETWORK_JUNO": ""}])
    def test_raises(self, source):
        with pytest.raises(ConfigurationError):
            resolve_networks(source)


class TestYamlSource:

    def test_networks_mapping(self, tmp_path):
        path = tmp_path / "networks.yaml"
        path.write_text(
            "networks:\n"
            "  osmosis:\n"
            "    - grpc.osmosis.zone:443\n"
            "    - osmosis-grpc.polkachu.com:12590\n"
            "  juno: juno-grpc.polkachu.com:12690\n"
        )

        config = load_config(str(path), environ={})

        assert names(config.networks) == ["juno", "osmosis"]
        assert config.networks[1].endpoints == (
            "grpc.osmosis.zone:443",
            "osmosis-grpc.polkachu.com:12590",
        )

    def test_file_overrides_environment(self, tmp_path):
        path = tmp_path / "networks.yaml"
        path.write_text("GRPC: from-file:443\n")

        source = load_config_source(str(path), environ={"GRPC": "from-env:443", "HOME": "/root"})

        assert source == {"GRPC": "from-file:443"}

    def test_missing_file_falls_back_to_environment(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"), environ={"GRPC": "a:443"})
        assert names(config.networks) == ["default"]

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a:443\n- b:443\n")
        with pytest.raises(ConfigurationError):
            load_config_source(str(path), environ={})

    def test_malformed_yaml_is_a_configuration_error(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("networks:\n  osmosis: [a:443\n")
        with pytest.raises(ConfigurationError) as excinfo:
            load_config_source(str(path), environ={})
        assert "invalid YAML" in str(excinfo.value)

    def test_options_pass_through(self):
        config = load_config(environ={"GRPC": "a:443"}, output_dir="/tmp/protos", strict_messages=True)
        assert config.output_dir == "/tmp/protos"
        assert config.strict_messages
        assert config.max_attempts == 3
        assert config.retry_delay == 2.0


class TestRuntimeConfig:

    def test_defaults(self):
        config = RuntimeConfig()
        assert (config.max_attempts, config.retry_delay) == (3, 2.0)

    @pytest.mark.parametrize("options", [{"retry_delay": -1.0}, {"max_attempts": 0}])
    def test_invalid_retry_budget_rejected(self, options):
        with pytest.raises(ConfigurationError):
            RuntimeConfig(**options)

    def test_zero_delay_allowed(self):
        assert RuntimeConfig(retry_delay=0).retry_delay == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
