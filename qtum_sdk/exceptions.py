"""
Exceptions for the Qtum SDK.
"""
from typing import Any, Optional


class QtumSDKError(Exception):
    """Base exception for all SDK errors."""
    pass


class TransportError(QtumSDKError):
    """Raised when the RPC transport fails (network, HTTP status, malformed response)."""
    pass


class UnauthorizedError(TransportError):
    """Raised when the node rejects our credentials (HTTP 401)."""
    pass


class AuthorizationDeniedError(TransportError):
    """Raised when a pending call authorization is denied by the wallet operator."""

    def __init__(self, auth_id: str):
        self.auth_id = auth_id
        super().__init__(f"Authorization denied: {auth_id}")


class UnknownMethodError(TransportError):
    """Raised when the node does not know the RPC method (HTTP 404)."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"unknown method: {method}")


class MethodNotAllowedError(TransportError):
    """Raised when calling a method the endpoint does not allow (HTTP 405)."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"not allowed method: {method}")


class RPCError(TransportError):
    """Raised when the node returns a structured JSON-RPC error."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"[{code}] {message}")


class ExecutionError(QtumSDKError):
    """Raised when a transaction failed on-chain (revert or failure status)."""

    def __init__(self, message: str, txid: Optional[str] = None, receipt: Optional[Any] = None):
        self.txid = txid
        self.receipt = receipt
        super().__init__(message)


class ContractCallError(ExecutionError):
    """Raised when a read-only contract call reports an execution exception."""

    def __init__(self, excepted: str, result: Optional[Any] = None):
        self.excepted = excepted
        self.result = result
        super().__init__(f"Call exception: {excepted}")


class ReceiptNotFoundError(QtumSDKError):
    """Raised when a confirmed transaction has no receipt on the node."""

    def __init__(self, txid: str):
        self.txid = txid
        super().__init__(f"Cannot get transaction receipt: {txid}")


class TransactionNotFoundError(QtumSDKError):
    """Raised when the node does not know a transaction id."""

    def __init__(self, txid: str):
        self.txid = txid
        super().__init__(f"Cannot find transaction: {txid}")


class MethodNotFoundError(QtumSDKError):
    """Raised when a contract method cannot be resolved."""
    pass


class ContractNotFoundError(QtumSDKError):
    """Raised when the repository has no contract with the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"cannot find contract: {name}")
