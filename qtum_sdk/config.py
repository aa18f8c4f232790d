"""
Configuration for the Qtum SDK.

Network presets live in the packaged ``networks.json``; polling and timeout
tunables are read from the environment so deployments can adjust them
without code changes.
"""
import json
import logging
import os
from enum import Enum
from importlib import resources
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class NetworkKind(str, Enum):
    """Which node API profile a connection speaks."""
    QTUM = "qtum"
    ETHEREUM = "ethereum"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid value for {name}: {raw!r} (using {default})")
        return default


def rpc_timeout() -> float:
    """Per-request timeout in seconds for non long-poll calls."""
    return _env_float("QTUM_SDK_RPC_TIMEOUT", 60.0)


def poll_interval() -> float:
    """Seconds between transaction polls when the node has no long-poll support."""
    return _env_float("QTUM_SDK_POLL_INTERVAL", 3.0)


def eth_poll_interval() -> float:
    """Seconds between polls on Ethereum-style networks (about half a block time)."""
    return _env_float("QTUM_SDK_ETH_POLL_INTERVAL", 7.5)


def log_retry_interval() -> float:
    """Seconds to wait when a log subscription is ahead of the chain head."""
    return _env_float("QTUM_SDK_LOG_RETRY_INTERVAL", 0.3)


def default_min_confirmations() -> int:
    """Default number of confirmations ``confirm()`` waits for."""
    return int(_env_float("QTUM_SDK_MIN_CONFIRMATIONS", 6))


class NetworkConfig:
    """Known network presets."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the network presets, caching them after the first read.

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        with resources.files("qtum_sdk").joinpath("networks.json").open("r") as f:
            cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the configuration for a network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Network '{network}' not found. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: explicit override, ``QTUM_SDK_RPC_URL``, the preset.
        """
        if override:
            return override
        env_url = os.environ.get("QTUM_SDK_RPC_URL")
        if env_url:
            return env_url
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_kind(cls, network: str) -> NetworkKind:
        """Get the API profile of a network."""
        return NetworkKind(cls.get_network(network).get("kind", NetworkKind.QTUM.value))

    @classmethod
    def get_min_confirmations(cls, network: str) -> int:
        """Get the recommended confirmation depth for a network."""
        value = cls.get_network(network).get("minConfirmations")
        if value is None:
            return default_min_confirmations()
        return int(value)
