"""
Pytest fixtures for the Qtum SDK tests.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

import qtum_sdk.events
import qtum_sdk.receipt
from qtum_sdk._rate_limited_log import reset_rate_limits
from qtum_sdk.config import NetworkConfig, NetworkKind
from tests.test_helpers import eth_tx, qtum_receipt


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """
    Make backoff sleeps instantaneous and record the requested durations.

    Each fake sleep still yields to the event loop so background
    subscriptions can make progress.
    """
    durations = []

    async def _fast_sleep(delay, *args, **kwargs):
        durations.append(delay)
        await asyncio.sleep(0)

    monkeypatch.setattr(qtum_sdk.receipt, "sleep", _fast_sleep)
    monkeypatch.setattr(qtum_sdk.events, "sleep", _fast_sleep)
    return durations


@pytest.fixture(autouse=True)
def _reset_caches():
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture
def qtum_rpc():
    """A QtumRPC stand-in whose methods are AsyncMocks."""
    rpc = MagicMock()
    rpc.kind = NetworkKind.QTUM
    rpc.check_transaction_wait_support = AsyncMock(return_value=False)
    rpc.get_transaction = AsyncMock()
    rpc.get_transaction_receipt = AsyncMock(return_value=qtum_receipt())
    rpc.get_block_number = AsyncMock(return_value=100)
    rpc.wait_for_logs = AsyncMock()
    rpc.call_contract = AsyncMock()
    rpc.send_to_contract = AsyncMock()
    return rpc


@pytest.fixture
def eth_rpc():
    """An EthRPC stand-in whose methods are AsyncMocks."""
    rpc = MagicMock()
    rpc.kind = NetworkKind.ETHEREUM
    rpc.get_transaction = AsyncMock(return_value=eth_tx())
    rpc.get_transaction_receipt = AsyncMock()
    rpc.get_block_number = AsyncMock(return_value=100)
    rpc.get_logs = AsyncMock(return_value=[])
    rpc.call = AsyncMock()
    rpc.send_transaction = AsyncMock()
    return rpc
