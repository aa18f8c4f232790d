"""
Data models for the Qtum SDK.

The models mirror the JSON returned by qtumd and by Ethereum-style nodes.
Field names follow Python conventions with the node's camelCase names as
aliases; fields the SDK does not model are kept as extras.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import to_int

BlockTag = Union[int, str]

SYMBOLIC_BLOCKS = ("latest", "earliest", "pending")

ETH_STATUS_FAILED = 0
ETH_STATUS_SUCCESS = 1


class RPCModel(BaseModel):
    """Base model for node responses."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class LogEntry(RPCModel):
    """A raw, chain-native event log (not ABI decoded)"""
    address: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    data: str = ""
    block_number: Optional[int] = Field(None, alias="blockNumber")
    block_hash: Optional[str] = Field(None, alias="blockHash")
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    transaction_index: Optional[int] = Field(None, alias="transactionIndex")
    log_index: Optional[int] = Field(None, alias="logIndex")
    removed: Optional[bool] = None

    @field_validator("block_number", "transaction_index", "log_index", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Optional[int]:
        return to_int(value)

    @model_validator(mode="before")
    @classmethod
    def _address_fallback(cls, data: Any) -> Any:
        # qtumd log entries name the emitting contract "contractAddress"
        if isinstance(data, dict) and not data.get("address") and data.get("contractAddress"):
            data = {**data, "address": data["contractAddress"]}
        return data


class ContractEventLog(LogEntry):
    """A log entry together with its decoded event (None if not decodable)"""
    event: Optional[Dict[str, Any]] = None


class ContractEventLogs(RPCModel):
    """Batch returned by a long-poll log query"""
    entries: List[ContractEventLog] = Field(default_factory=list)
    count: int = 0
    next_block: int = Field(..., alias="nextblock")


class ReceiptBase(RPCModel):
    """Fields shared by Qtum and Ethereum transaction receipts"""
    block_hash: str = Field(..., alias="blockHash")
    block_number: int = Field(..., alias="blockNumber")
    transaction_hash: str = Field(..., alias="transactionHash")
    transaction_index: int = Field(..., alias="transactionIndex")
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    cumulative_gas_used: int = Field(0, alias="cumulativeGasUsed")
    gas_used: int = Field(0, alias="gasUsed")
    contract_address: Optional[str] = Field(None, alias="contractAddress")

    @field_validator("block_number", "transaction_index", "cumulative_gas_used", "gas_used", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Optional[int]:
        return to_int(value)


class TransactionReceipt(ReceiptBase):
    """Transaction receipt returned by qtumd"""
    excepted: Optional[str] = None
    log: List[LogEntry] = Field(default_factory=list)

    @property
    def raw_logs(self) -> List[LogEntry]:
        return self.log

    @property
    def failed(self) -> bool:
        return self.excepted not in (None, "None")


class EthTransactionReceipt(ReceiptBase):
    """Transaction receipt returned by an Ethereum-style node"""
    logs: List[LogEntry] = Field(default_factory=list)
    logs_bloom: Optional[str] = Field(None, alias="logsBloom")
    status: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Optional[int]:
        return to_int(value)

    @property
    def raw_logs(self) -> List[LogEntry]:
        return self.logs

    @property
    def failed(self) -> bool:
        return self.status is not None and self.status == ETH_STATUS_FAILED


class QtumTransaction(RPCModel):
    """Wallet transaction as reported by qtumd ``gettransaction``"""
    txid: str
    confirmations: int = 0
    amount: Optional[float] = None
    fee: Optional[float] = None
    blockhash: Optional[str] = None
    blockindex: Optional[int] = None
    blocktime: Optional[int] = None
    time: Optional[int] = None
    timereceived: Optional[int] = None
    hex: Optional[str] = None


class EthTransaction(RPCModel):
    """Transaction as reported by ``eth_getTransactionByHash``"""
    hash: str
    nonce: Optional[int] = None
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    value: Optional[int] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = Field(None, alias="gasPrice")
    input: Optional[str] = None
    block_hash: Optional[str] = Field(None, alias="blockHash")
    block_number: Optional[int] = Field(None, alias="blockNumber")
    transaction_index: Optional[int] = Field(None, alias="transactionIndex")

    @field_validator("nonce", "value", "gas", "gas_price", "block_number", "transaction_index", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Optional[int]:
        return to_int(value)

    @property
    def txid(self) -> str:
        return self.hash


class ExecutionResult(RPCModel):
    """EVM execution result of a ``callcontract``"""
    gas_used: int = Field(0, alias="gasUsed")
    excepted: str = "None"
    new_address: Optional[str] = Field(None, alias="newAddress")
    output: str = ""
    code_deposit: Optional[int] = Field(None, alias="codeDeposit")
    gas_refunded: Optional[int] = Field(None, alias="gasRefunded")
    deposit_size: Optional[int] = Field(None, alias="depositSize")
    gas_for_deposit: Optional[int] = Field(None, alias="gasForDeposit")


class CallContractResult(RPCModel):
    """Result of qtumd ``callcontract``"""
    address: str
    execution_result: ExecutionResult = Field(..., alias="executionResult")
    transaction_receipt: Dict[str, Any] = Field(default_factory=dict, alias="transactionReceipt")


class SendToContractResult(RPCModel):
    """Result of qtumd ``sendtocontract``"""
    txid: str
    sender: Optional[str] = None
    hash160: Optional[str] = None


class LogRequest(RPCModel):
    """
    Block range and filter for a log query.

    ``from_block``/``to_block`` accept a block number or one of the symbolic
    tags "latest", "earliest" and "pending".
    """
    from_block: BlockTag = Field("latest", alias="fromBlock")
    to_block: BlockTag = Field("latest", alias="toBlock")
    addresses: Optional[List[str]] = None
    topics: Optional[List[Optional[str]]] = None
    minconf: Optional[int] = None

    @field_validator("from_block", "to_block")
    @classmethod
    def _block_tag(cls, value: BlockTag) -> BlockTag:
        if isinstance(value, str) and value not in SYMBOLIC_BLOCKS:
            return to_int(value)
        return value


class ContractInfo(BaseModel):
    """ABI and address of a deployed contract"""
    model_config = ConfigDict(extra="allow")

    abi: List[Dict[str, Any]]
    address: str


class ABIOnlyInfo(BaseModel):
    """ABI of a contract that is referenced but not deployed"""
    model_config = ConfigDict(extra="allow")

    abi: List[Dict[str, Any]]


class ContractsRepoData(BaseModel):
    """
    Metadata for every known contract.

    ``contracts`` and ``libraries`` are deployed; ``related`` are referenced by
    deployed code (e.g. base contracts) and only contribute event definitions.
    """
    contracts: Dict[str, ContractInfo] = Field(default_factory=dict)
    libraries: Dict[str, ContractInfo] = Field(default_factory=dict)
    related: Dict[str, ABIOnlyInfo] = Field(default_factory=dict)
