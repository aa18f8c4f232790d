"""
Contract façade: ABI-encoded calls, transactions and event logs for one
deployed contract.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .abi import ABIDefinition, ContractLogDecoder, decode_outputs, encode_inputs, is_constant
from .config import NetworkKind
from .events import CancellableEventEmitter, EventListener, LogBatch, LogCallback, LogSubscription
from .exceptions import ContractCallError, MethodNotFoundError
from .method_map import MethodMap
from .models import CallContractResult, ContractInfo, LogRequest
from .receipt import TxConfirmation
from .rpc import AnyRPC
from .utils import strip_hex0x

logger = logging.getLogger(__name__)


class PendingSend(TxConfirmation):
    """
    A submitted contract transaction.

    Inherits ``confirm``/``check``/``on_confirm`` from ``TxConfirmation``.
    """

    def __init__(
        self,
        rpc: AnyRPC,
        txid: str,
        method: str,
        address: str,
        calldata: str,
        sender: Optional[str] = None,
        hash160: Optional[str] = None,
        min_confirmations: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(rpc, txid, min_confirmations=min_confirmations, logger=logger)
        self.method = method
        self.address = address
        self.calldata = calldata
        self.sender = sender
        self.hash160 = hash160

    def __repr__(self) -> str:
        return f"PendingSend(txid={self.txid!r}, method={self.method!r}, address={self.address!r})"


class Contract:
    """
    A deployed contract.

    Args:
        rpc: QtumRPC or EthRPC
        info: ``{"abi": [...], "address": "..."}`` or a ``ContractInfo``
        log_decoder: Decoder for logs (defaults to this contract's own events)
        min_confirmations: Default confirmation depth of sent transactions
        logger: Optional logger instance
    """

    def __init__(
        self,
        rpc: AnyRPC,
        info: Union[ContractInfo, Mapping[str, Any]],
        log_decoder: Optional[ContractLogDecoder] = None,
        min_confirmations: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        if not isinstance(info, ContractInfo):
            info = ContractInfo.model_validate(info)

        self.rpc = rpc
        self.info = info
        self.abi: List[Dict[str, Any]] = info.abi
        self.address = info.address
        self.method_map = MethodMap(self.abi)
        self.log_decoder = log_decoder or ContractLogDecoder(self.abi)
        self.min_confirmations = min_confirmations
        self.logger = logger or logging.getLogger(__name__)
        self._listener = EventListener(rpc, self.log_decoder, addresses=[self.address], logger=self.logger)

    def _find_method(self, method: str, args: Sequence[Any], for_send: bool) -> ABIDefinition:
        method_abi = self.method_map.find_method(method, args)
        if method_abi is None:
            action = "send" if for_send else "call"
            raise MethodNotFoundError(f"Unknown method to {action}: {method}")
        if for_send and is_constant(method_abi):
            raise MethodNotFoundError(f"Cannot send to constant method: {method}")
        return method_abi

    async def raw_call(self, method: str, args: Sequence[Any] = (), **opts: Any) -> Union[CallContractResult, str]:
        """
        Call a method without creating a transaction and return the node result as is.

        Useful for read-only methods and for gas estimation.
        """
        method_abi = self._find_method(method, args, for_send=False)
        calldata = encode_inputs(method_abi, args)

        if self.rpc.kind == NetworkKind.ETHEREUM:
            return await self.rpc.call(self.address, calldata, **opts)
        return await self.rpc.call_contract(self.address, calldata, **opts)

    async def call(self, method: str, args: Sequence[Any] = (), **opts: Any) -> Optional[List[Any]]:
        """
        Call a method and decode its return values.

        Returns:
            The decoded return values, or None if the method returned nothing

        Raises:
            ContractCallError: If the Qtum node reports an execution exception
            MethodNotFoundError: If the method cannot be resolved
        """
        result = await self.raw_call(method, args, **opts)

        if isinstance(result, CallContractResult):
            exception = result.execution_result.excepted
            if exception != "None":
                raise ContractCallError(exception, result)
            output = result.execution_result.output
        else:
            output = result

        if not strip_hex0x(output or ""):
            return None

        method_abi = self._find_method(method, args, for_send=False)
        return decode_outputs(method_abi, output)

    async def raw_send(self, method: str, args: Sequence[Any] = (), **opts: Any) -> Dict[str, Any]:
        """
        Create a transaction calling a method and return the submission result.

        Returns:
            ``{"txid", "calldata", "sender", "hash160"}``
        """
        method_abi = self._find_method(method, args, for_send=True)
        calldata = encode_inputs(method_abi, args)

        if self.rpc.kind == NetworkKind.ETHEREUM:
            txid = await self.rpc.send_transaction(self.address, calldata, **opts)
            return {"txid": txid, "calldata": calldata, "sender": opts.get("from_address"), "hash160": None}

        result = await self.rpc.send_to_contract(self.address, calldata, **opts)
        return {"txid": result.txid, "calldata": calldata, "sender": result.sender, "hash160": result.hash160}

    async def send(self, method: str, args: Sequence[Any] = (), **opts: Any) -> PendingSend:
        """
        Create a transaction calling a method.

        A transaction needs network consensus to confirm and costs gas. Await
        ``confirm()`` on the result to wait for it.
        """
        sent = await self.raw_send(method, args, **opts)
        self.logger.info(f"Sent {method} to {self.address}: {sent['txid']}")
        return PendingSend(
            self.rpc,
            sent["txid"],
            method,
            self.address,
            sent["calldata"],
            sender=sent["sender"],
            hash160=sent["hash160"],
            min_confirmations=self.min_confirmations,
            logger=self.logger
        )

    async def get_logs(self, request: Optional[LogRequest] = None, **overrides: Any) -> LogBatch:
        """Get this contract's logs (see ``EventListener.get_logs``)."""
        return await self._listener.get_logs(request, **overrides)

    def on_log(self, callback: LogCallback, request: Optional[LogRequest] = None, **kwargs: Any) -> LogSubscription:
        """Subscribe to this contract's logs (see ``EventListener.on_log``)."""
        return self._listener.on_log(callback, request, **kwargs)

    def emitter(self, request: Optional[LogRequest] = None, **kwargs: Any) -> CancellableEventEmitter:
        """Subscribe to this contract's events by name (see ``EventListener.emitter``)."""
        return self._listener.emitter(request, **kwargs)

    def log_listener(self) -> EventListener:
        return self._listener
