"""
Tests for network presets and environment tunables.
"""
import os
from unittest.mock import patch

import pytest

from qtum_sdk import config
from qtum_sdk.config import NetworkConfig, NetworkKind

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "kind": "ethereum",
        "rpc": "https://test.example.com",
        "minConfirmations": 2
    },
    "bare-network": {
        "rpc": "http://localhost:3889"
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_load_networks_cached(self):
        """Networks are cached after first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()

        assert result == MOCK_NETWORKS

    def test_load_packaged_networks(self):
        networks = NetworkConfig.load_networks()

        assert "qtum-mainnet" in networks
        assert networks["qtum-janus"]["kind"] == "ethereum"

    def test_get_network_not_found(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with pytest.raises(ValueError) as exc_info:
            NetworkConfig.get_network("non-existent-network")

        # Error message lists available networks
        assert "bare-network, test-network" in str(exc_info.value)

    def test_get_rpc_url_default(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch.dict(os.environ, {}, clear=True):
            assert NetworkConfig.get_rpc_url("test-network") == "https://test.example.com"

    def test_get_rpc_url_override(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        result = NetworkConfig.get_rpc_url("test-network", override="https://override.example.com")
        assert result == "https://override.example.com"

    def test_get_rpc_url_env_var(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch.dict(os.environ, {"QTUM_SDK_RPC_URL": "https://env.example.com"}):
            assert NetworkConfig.get_rpc_url("test-network") == "https://env.example.com"

    def test_get_kind(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        assert NetworkConfig.get_kind("test-network") == NetworkKind.ETHEREUM
        # Qtum unless stated otherwise
        assert NetworkConfig.get_kind("bare-network") == NetworkKind.QTUM

    def test_get_min_confirmations(self, monkeypatch):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        monkeypatch.delenv("QTUM_SDK_MIN_CONFIRMATIONS", raising=False)

        assert NetworkConfig.get_min_confirmations("test-network") == 2
        assert NetworkConfig.get_min_confirmations("bare-network") == 6


class TestTunables:
    """Environment-driven polling and timeout settings."""

    def test_defaults(self, monkeypatch):
        for name in (
            "QTUM_SDK_RPC_TIMEOUT",
            "QTUM_SDK_POLL_INTERVAL",
            "QTUM_SDK_ETH_POLL_INTERVAL",
            "QTUM_SDK_LOG_RETRY_INTERVAL",
            "QTUM_SDK_MIN_CONFIRMATIONS",
        ):
            monkeypatch.delenv(name, raising=False)

        assert config.rpc_timeout() == 60.0
        assert config.poll_interval() == 3.0
        assert config.eth_poll_interval() == 7.5
        assert config.log_retry_interval() == 0.3
        assert config.default_min_confirmations() == 6

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("QTUM_SDK_POLL_INTERVAL", "0.5")
        monkeypatch.setenv("QTUM_SDK_MIN_CONFIRMATIONS", "12")

        assert config.poll_interval() == 0.5
        assert config.default_min_confirmations() == 12

    def test_invalid_value_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("QTUM_SDK_ETH_POLL_INTERVAL", "soon")

        assert config.eth_poll_interval() == 7.5
        assert "QTUM_SDK_ETH_POLL_INTERVAL" in caplog.text
