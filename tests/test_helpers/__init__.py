"""
Helpers for building node responses in tests.
"""
from .chain_data import (
    MINT_TOPIC,
    TEST_CONTRACT,
    TEST_ETH_CONTRACT,
    TEST_ETH_URL,
    TEST_PRIV_KEY,
    TEST_QTUM_URL,
    TEST_SENDER,
    TEST_TXID,
    TOKEN_ABI,
    TRANSFER_TOPIC,
    UNKNOWN_TOPIC,
    address_topic,
    eth_receipt,
    eth_tx,
    qtum_receipt,
    qtum_tx,
    transfer_log,
    unknown_log,
)
