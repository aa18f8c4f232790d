"""
Tests for node response models.
"""
from qtum_sdk.models import (
    ContractEventLogs,
    EthTransaction,
    LogEntry,
    LogRequest,
    ReceiptBase,
    TransactionReceipt,
)
from tests.test_helpers import TEST_CONTRACT, eth_receipt, qtum_receipt, transfer_log


def test_log_entry_quantities():
    entry = LogEntry.model_validate(transfer_log(block=16, hex0x=True))

    assert entry.block_number == 16
    assert entry.log_index == 0
    assert entry.transaction_hash == "0x" + "cd" * 32


def test_log_entry_contract_address_fallback():
    raw = transfer_log()
    del raw["address"]
    raw["contractAddress"] = TEST_CONTRACT

    assert LogEntry.model_validate(raw).address == TEST_CONTRACT


def test_event_logs_next_block_alias():
    logs = ContractEventLogs.model_validate({"entries": [transfer_log()], "count": 1, "nextblock": 42})

    assert logs.next_block == 42
    assert logs.entries[0].event is None


def test_qtum_receipt_failed():
    assert not qtum_receipt().failed
    assert qtum_receipt(excepted="Revert").failed


def test_qtum_receipt_keeps_unknown_fields():
    receipt = TransactionReceipt.model_validate({
        **qtum_receipt().model_dump(by_alias=True),
        "stateRoot": "ab" * 32,
    })
    assert receipt.model_extra["stateRoot"] == "ab" * 32


def test_eth_receipt_status():
    assert not eth_receipt(block=1).failed
    assert eth_receipt(block=1, status=0).failed
    assert eth_receipt(block=1).block_number == 1


def test_receipt_raw_logs():
    qtum = TransactionReceipt.model_validate({
        **qtum_receipt().model_dump(by_alias=True),
        "log": [transfer_log()],
    })
    eth = eth_receipt(block=1)

    assert qtum.raw_logs[0].address == TEST_CONTRACT
    assert eth.raw_logs == []
    assert not hasattr(ReceiptBase, "raw_logs")


def test_eth_transaction_txid():
    tx = EthTransaction.model_validate({"hash": "0xabc", "blockNumber": "0x10", "gasPrice": "0x1"})

    assert tx.txid == "0xabc"
    assert tx.block_number == 16
    assert tx.gas_price == 1


def test_log_request_block_tags():
    req = LogRequest.model_validate({"fromBlock": "0x10", "toBlock": "latest"})
    assert req.from_block == 16
    assert req.to_block == "latest"

    defaults = LogRequest()
    assert defaults.from_block == "latest"
    assert defaults.to_block == "latest"
    assert defaults.addresses is None
