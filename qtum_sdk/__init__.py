"""
Qtum SDK - contract calls, transaction confirmation and event log
subscriptions for Qtum and Ethereum-style nodes.
"""
from .version import __version__
from .abi import ContractLogDecoder, decode_logs, decode_outputs, encode_inputs
from .client import Ethereum, Qtum
from .config import NetworkConfig, NetworkKind
from .contract import Contract, PendingSend
from .emitter import EventEmitter
from .events import UNKNOWN_EVENT, CancellableEventEmitter, EventListener, LogSubscription
from .exceptions import (
    AuthorizationDeniedError,
    ContractCallError,
    ContractNotFoundError,
    ExecutionError,
    MethodNotAllowedError,
    MethodNotFoundError,
    QtumSDKError,
    ReceiptNotFoundError,
    RPCError,
    TransactionNotFoundError,
    TransportError,
    UnauthorizedError,
    UnknownMethodError,
)
from .method_map import MethodMap
from .models import (
    ContractEventLog,
    ContractEventLogs,
    ContractInfo,
    ContractsRepoData,
    EthTransaction,
    EthTransactionReceipt,
    LogEntry,
    LogRequest,
    QtumTransaction,
    TransactionReceipt,
)
from .receipt import TxConfirmation
from .repo import ContractsRepo
from .rpc import EthRPC, HTTPTransport, QtumRPC, RPCTransport

__all__ = [
    "__version__",
    "AuthorizationDeniedError",
    "CancellableEventEmitter",
    "Contract",
    "ContractCallError",
    "ContractEventLog",
    "ContractEventLogs",
    "ContractInfo",
    "ContractLogDecoder",
    "ContractNotFoundError",
    "ContractsRepo",
    "ContractsRepoData",
    "EthRPC",
    "EthTransaction",
    "EthTransactionReceipt",
    "Ethereum",
    "EventEmitter",
    "EventListener",
    "ExecutionError",
    "HTTPTransport",
    "LogEntry",
    "LogRequest",
    "LogSubscription",
    "MethodMap",
    "MethodNotAllowedError",
    "MethodNotFoundError",
    "NetworkConfig",
    "NetworkKind",
    "PendingSend",
    "Qtum",
    "QtumRPC",
    "QtumSDKError",
    "QtumTransaction",
    "ReceiptNotFoundError",
    "RPCError",
    "RPCTransport",
    "TransactionNotFoundError",
    "TransactionReceipt",
    "TransportError",
    "TxConfirmation",
    "UNKNOWN_EVENT",
    "UnauthorizedError",
    "UnknownMethodError",
    "decode_logs",
    "decode_outputs",
    "encode_inputs",
]
