"""
Typed wrapper around the qtumd JSON-RPC API.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..config import NetworkKind
from ..models import (
    BlockTag,
    CallContractResult,
    QtumTransaction,
    SendToContractResult,
    TransactionReceipt,
)
from .transport import RPCTransport

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200000
DEFAULT_GAS_PRICE = 0.0000004


class QtumRPC:
    """
    qtumd RPC methods used by contracts, receipts and log subscriptions.

    The node's support for ``gettransaction ... waitconf`` is probed once and
    cached on this instance.
    """

    kind = NetworkKind.QTUM

    def __init__(self, transport: RPCTransport):
        self.transport = transport
        self._has_tx_wait_support: Optional[bool] = None

    async def raw_call(self, method: str, params: Optional[Sequence[Any]] = None, long_poll: bool = False) -> Any:
        return await self.transport.raw_call(method, params, long_poll=long_poll)

    async def get_info(self) -> Dict[str, Any]:
        return await self.raw_call("getinfo")

    async def send_to_contract(
        self,
        address: str,
        datahex: str,
        amount: Union[int, float, str] = 0,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        gas_price: Union[float, str] = DEFAULT_GAS_PRICE,
        sender_address: Optional[str] = None
    ) -> SendToContractResult:
        """
        Create a transaction that calls a contract.

        Args:
            address: Contract address (hex, no 0x)
            datahex: ABI-encoded call data (hex, no 0x)
            amount: QTUM to send along with the call
            gas_limit: Gas limit (max 40000000)
            gas_price: QTUM per gas unit
            sender_address: Qtum address used as the sender
        """
        args: List[Any] = [address, datahex, amount, gas_limit, gas_price]
        if sender_address:
            args.append(sender_address)

        result = await self.raw_call("sendtocontract", args)
        return SendToContractResult.model_validate(result)

    async def call_contract(
        self,
        address: str,
        datahex: str,
        sender_address: Optional[str] = None
    ) -> CallContractResult:
        args: List[Any] = [address, datahex]
        if sender_address:
            args.append(sender_address)

        result = await self.raw_call("callcontract", args)
        return CallContractResult.model_validate(result)

    async def get_transaction(
        self,
        txid: str,
        include_watchonly: bool = False,
        waitconf: Optional[int] = None
    ) -> QtumTransaction:
        """
        Get a wallet transaction.

        With ``waitconf`` the node holds the request open until the
        transaction has that many confirmations (or its own timeout expires).
        """
        args: List[Any] = [txid, include_watchonly]
        if waitconf:
            args.append(waitconf)

        result = await self.raw_call("gettransaction", args, long_poll=bool(waitconf))
        return QtumTransaction.model_validate(result)

    async def get_transaction_receipt(self, txid: str) -> Optional[TransactionReceipt]:
        """
        Get the receipt of a mined transaction, or None if it is not mined yet.
        """
        # qtumd returns [] for unknown or unmined transactions, [receipt] otherwise
        result = await self.raw_call("gettransactionreceipt", [txid])
        if not result:
            return None
        return TransactionReceipt.model_validate(result[0])

    async def wait_for_logs(
        self,
        from_block: Optional[BlockTag] = None,
        to_block: Optional[BlockTag] = None,
        addresses: Optional[List[str]] = None,
        topics: Optional[List[Optional[str]]] = None,
        minconf: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Long-poll for logs in ``[from_block, to_block]``.

        Returns the raw ``{entries, count, nextblock}`` result. Cancel the
        awaiting task to abandon the poll.
        """
        log_filter: Dict[str, Any] = {}
        if addresses:
            log_filter["addresses"] = addresses
        if topics:
            log_filter["topics"] = topics

        args: List[Any] = [from_block, to_block, log_filter or None, minconf]
        # Trailing nulls confuse older qtumd versions
        while args and args[-1] is None:
            args.pop()

        return await self.raw_call("waitforlogs", args, long_poll=True)

    async def search_logs(
        self,
        from_block: BlockTag = "latest",
        to_block: int = -1,
        addresses: Optional[List[str]] = None,
        topics: Optional[List[Optional[str]]] = None,
        minconf: int = 0
    ) -> List[TransactionReceipt]:
        """Search receipts with logs matching a filter."""
        args = [
            from_block,
            to_block,
            {"addresses": addresses or []},
            {"topics": topics or []},
            minconf,
        ]
        result = await self.raw_call("searchlogs", args)
        return [TransactionReceipt.model_validate(r) for r in result or []]

    async def get_block_number(self) -> int:
        return int(await self.raw_call("getblockcount"))

    async def check_transaction_wait_support(self) -> bool:
        """
        Check whether ``gettransaction`` accepts a ``waitconf`` parameter.

        Concurrent first calls may each probe the node; the answer is the same.
        """
        if self._has_tx_wait_support is not None:
            return self._has_tx_wait_support

        helpmsg: str = await self.raw_call("help", ["gettransaction"])
        self._has_tx_wait_support = "waitconf" in (helpmsg or "").split("\n")[0]
        logger.debug(f"Node long-poll (waitconf) support: {self._has_tx_wait_support}")
        return self._has_tx_wait_support

    async def from_hex_address(self, hex_address: str) -> str:
        return await self.raw_call("fromhexaddress", [hex_address])

    async def get_hex_address(self, address: str) -> str:
        return await self.raw_call("gethexaddress", [address])
