"""
Typed wrapper around the Ethereum JSON-RPC API.

Used directly against Ethereum-style nodes and against Qtum through an
Ethereum compatibility proxy.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from eth_account.signers.base import BaseAccount
from web3 import Web3

from ..config import NetworkKind
from ..exceptions import TransportError
from ..models import BlockTag, EthTransaction, EthTransactionReceipt
from ..utils import ensure_hex0x, to_int, to_quantity
from .transport import RPCTransport

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200000


def _block_param(block: Optional[BlockTag]) -> Optional[str]:
    if block is None or isinstance(block, str):
        return block
    return to_quantity(block)


class EthRPC:
    """
    Ethereum RPC methods used by contracts, receipts and log subscriptions.

    Transactions are sent from a node-managed account (``eth_sendTransaction``)
    unless a private key is given, in which case they are signed locally and
    sent with ``eth_sendRawTransaction``.
    """

    kind = NetworkKind.ETHEREUM

    def __init__(
        self,
        transport: RPCTransport,
        sender: Optional[str] = None,
        private_key: Optional[str] = None
    ):
        self.transport = transport
        self.account: Optional[BaseAccount] = None
        if private_key:
            self.account = Account.from_key(private_key)
        self._sender = sender

    async def raw_call(self, method: str, params: Optional[Sequence[Any]] = None, long_poll: bool = False) -> Any:
        return await self.transport.raw_call(method, params, long_poll=long_poll)

    async def get_sender(self) -> Optional[str]:
        """
        Resolve the sender address.

        Not cached: the node's first account may change between calls.
        """
        if self._sender:
            return self._sender
        if self.account:
            return self.account.address

        accounts = await self.get_accounts()
        return accounts[0] if accounts else None

    async def send_transaction(
        self,
        to: str,
        data: str,
        from_address: Optional[str] = None,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
        gas_price: Optional[int] = None,
        nonce: Optional[int] = None
    ) -> str:
        """
        Send a contract transaction.

        Returns:
            The transaction hash

        Raises:
            TransportError: If no sender can be determined
        """
        sender = from_address or await self.get_sender()
        if not sender:
            raise TransportError("cannot get eth sender")

        if gas_price is None:
            gas_price = await self.get_gas_price()

        tx: Dict[str, Any] = {
            "from": sender,
            "to": ensure_hex0x(to),
            "data": ensure_hex0x(data),
            "gas": gas_limit or DEFAULT_GAS_LIMIT,
            "gasPrice": gas_price,
        }
        if value is not None:
            tx["value"] = value

        if self.account is not None:
            return await self._send_signed(tx, nonce)

        if nonce is not None:
            tx["nonce"] = nonce
        params = {k: (to_quantity(v) if isinstance(v, int) else v) for k, v in tx.items()}
        return await self.raw_call("eth_sendTransaction", [params])

    async def _send_signed(self, tx: Dict[str, Any], nonce: Optional[int]) -> str:
        if nonce is None:
            nonce = await self.get_transaction_count(self.account.address)
        chain_id = await self.get_chain_id()

        tx = {
            **tx,
            "to": Web3.to_checksum_address(tx["to"]),
            "nonce": nonce,
            "chainId": chain_id,
            "value": tx.get("value", 0),
        }
        tx.pop("from")
        signed = self.account.sign_transaction(tx)
        txid = await self.raw_call("eth_sendRawTransaction", [Web3.to_hex(signed.raw_transaction)])
        logger.info(f"Transaction sent: {txid}")
        return txid

    async def call(
        self,
        to: str,
        data: str,
        from_address: Optional[str] = None,
        gas_limit: Optional[int] = None,
        gas_price: Optional[int] = None,
        value: Optional[int] = None,
        block_number: Optional[BlockTag] = None
    ) -> str:
        """Execute a read-only call and return the raw hex output."""
        sender = from_address or await self.get_sender()
        if not sender:
            raise TransportError("cannot get eth sender")

        if gas_price is None:
            gas_price = await self.get_gas_price()

        req: Dict[str, Any] = {
            "from": sender,
            "to": ensure_hex0x(to),
            "data": ensure_hex0x(data),
            "gas": to_quantity(gas_limit or DEFAULT_GAS_LIMIT),
            "gasPrice": to_quantity(gas_price),
        }
        if value is not None:
            req["value"] = to_quantity(value)

        args: List[Any] = [req]
        if block_number is not None:
            args.append(_block_param(block_number))

        return await self.raw_call("eth_call", args)

    async def get_transaction(self, txid: str) -> Optional[EthTransaction]:
        result = await self.raw_call("eth_getTransactionByHash", [txid])
        if result is None:
            return None
        return EthTransaction.model_validate(result)

    async def get_transaction_receipt(self, txid: str) -> Optional[EthTransactionReceipt]:
        result = await self.raw_call("eth_getTransactionReceipt", [txid])
        if result is None:
            return None
        return EthTransactionReceipt.model_validate(result)

    async def get_logs(
        self,
        from_block: Optional[BlockTag] = None,
        to_block: Optional[BlockTag] = None,
        addresses: Optional[List[str]] = None,
        topics: Optional[List[Optional[str]]] = None
    ) -> List[Dict[str, Any]]:
        """Query logs in ``[from_block, to_block]`` and return the raw entries."""
        log_filter: Dict[str, Any] = {}
        if from_block is not None:
            log_filter["fromBlock"] = _block_param(from_block)
        if to_block is not None:
            log_filter["toBlock"] = _block_param(to_block)
        if addresses:
            log_filter["address"] = [ensure_hex0x(a) for a in addresses]
        if topics:
            log_filter["topics"] = [ensure_hex0x(t) if t else None for t in topics]

        return await self.raw_call("eth_getLogs", [log_filter]) or []

    async def get_gas_price(self) -> int:
        return to_int(await self.raw_call("eth_gasPrice"))

    async def get_block_number(self) -> int:
        return to_int(await self.raw_call("eth_blockNumber"))

    async def get_chain_id(self) -> int:
        return to_int(await self.raw_call("eth_chainId"))

    async def get_transaction_count(self, address: str, block: BlockTag = "pending") -> int:
        return to_int(await self.raw_call("eth_getTransactionCount", [address, _block_param(block)]))

    async def get_accounts(self) -> List[str]:
        return await self.raw_call("eth_accounts")
