"""
Transaction confirmation.

Turns a submitted transaction id into a receipt once the transaction has
enough confirmations, reporting progress along the way. Two strategies are
used depending on the node:

- Qtum nodes that accept ``gettransaction <txid> false <waitconf>`` are
  long-polled, one request per additional confirmation.
- Other Qtum nodes and Ethereum-style nodes are polled on an interval.

Each ``confirm()`` call derives its state from the chain on its own;
concurrent calls for the same transaction do not share progress. There is
no built-in deadline; wrap the call in ``asyncio.wait_for`` to bound it.
Chain reorganizations are not modeled: a count that goes down is ignored.
"""
import inspect
import logging
import random
from typing import Any, Callable, List, Optional, Union

from . import config
from .config import NetworkKind
from .exceptions import ExecutionError, ReceiptNotFoundError, TransactionNotFoundError
from .models import EthTransaction, EthTransactionReceipt, QtumTransaction, TransactionReceipt
from .rpc import AnyRPC, EthRPC, QtumRPC
from .utils import sleep

logger = logging.getLogger(__name__)

Transaction = Union[QtumTransaction, EthTransaction]
Receipt = Union[TransactionReceipt, EthTransactionReceipt]
ConfirmationHandler = Callable[[Transaction, Receipt], Any]

# Upper bound of the random delay added to each poll, in seconds
POLL_JITTER = 0.2


async def _invoke(handler: ConfirmationHandler, tx: Transaction, receipt: Receipt) -> None:
    result = handler(tx, receipt)
    if inspect.isawaitable(result):
        await result


class TxConfirmation:
    """
    Waits for a transaction to be confirmed.

    Handlers registered with ``on_confirm`` are invoked once per increase of
    the confirmation count, in increasing order, and are dropped once a
    ``confirm()`` call reaches its required depth.
    """

    def __init__(
        self,
        rpc: AnyRPC,
        txid: str,
        min_confirmations: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.rpc = rpc
        self.txid = txid
        # Network depth used when confirm/check get no explicit value
        self.min_confirmations = min_confirmations
        self.logger = logger or logging.getLogger(__name__)
        self._handlers: List[ConfirmationHandler] = []

    def on_confirm(self, handler: ConfirmationHandler) -> None:
        self._handlers.append(handler)

    def off_confirm(self, handler: ConfirmationHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def confirm(
        self,
        min_confirmations: Optional[int] = None,
        on_progress: Optional[ConfirmationHandler] = None,
        poll_interval: Optional[float] = None
    ) -> Receipt:
        """
        Wait until the transaction has at least ``min_confirmations``.

        Args:
            min_confirmations: Required confirmations (default: the network depth given
                at construction, then QTUM_SDK_MIN_CONFIRMATIONS)
            on_progress: Called with ``(transaction, receipt)`` when the count increases
            poll_interval: Seconds between polls when long-polling is unavailable

        Returns:
            The transaction receipt

        Raises:
            ExecutionError: If the transaction failed on-chain
            ReceiptNotFoundError: If a confirmed transaction has no receipt
            TransactionNotFoundError: If an Ethereum node does not know the transaction
            TransportError: On RPC failures
        """
        if min_confirmations is None:
            min_confirmations = self._default_min_confirmations()
        if min_confirmations < 0:
            raise ValueError("min_confirmations must not be negative")

        handlers = list(self._handlers)
        if on_progress is not None:
            handlers.append(on_progress)

        if self.rpc.kind == NetworkKind.ETHEREUM:
            interval = poll_interval if poll_interval is not None else config.eth_poll_interval()
            receipt = await self._confirm_eth(min_confirmations, handlers, interval)
        else:
            interval = poll_interval if poll_interval is not None else config.poll_interval()
            receipt = await self._confirm_qtum(min_confirmations, handlers, interval)

        self._handlers.clear()
        return receipt

    async def check(self, min_confirmations: Optional[int] = None) -> bool:
        """Return whether the transaction currently has enough confirmations, without waiting."""
        if min_confirmations is None:
            min_confirmations = self._default_min_confirmations()

        if self.rpc.kind == NetworkKind.ETHEREUM:
            receipt = await self.rpc.get_transaction_receipt(self.txid)
            if receipt is None:
                return False
            head = await self.rpc.get_block_number()
            return head - receipt.block_number >= min_confirmations

        tx = await self.rpc.get_transaction(self.txid)
        return tx.confirmations >= min_confirmations

    def _default_min_confirmations(self) -> int:
        if self.min_confirmations is not None:
            return self.min_confirmations
        return config.default_min_confirmations()

    async def _notify(self, handlers: List[ConfirmationHandler], tx: Transaction, receipt: Receipt) -> None:
        for handler in handlers:
            await _invoke(handler, tx, receipt)

    async def _confirm_qtum(
        self,
        min_confirmations: int,
        handlers: List[ConfirmationHandler],
        interval: float
    ) -> TransactionReceipt:
        rpc: QtumRPC = self.rpc
        has_wait_support = await rpc.check_transaction_wait_support()

        # With long-poll support: the confirmation count to wait for next
        waitconf = 1
        # Highest confirmation count already reported
        last_confirmations = 0

        while True:
            tx = await rpc.get_transaction(self.txid, waitconf=waitconf if has_wait_support else None)
            self.logger.debug(f"Transaction {self.txid} has {tx.confirmations} confirmations")

            if tx.confirmations > 0:
                receipt = await rpc.get_transaction_receipt(tx.txid)
                if receipt is None:
                    raise ReceiptNotFoundError(tx.txid)

                if receipt.failed:
                    self.logger.error(f"Transaction {tx.txid} failed: {receipt.excepted}")
                    raise ExecutionError(
                        f"Transaction execution error: {receipt.excepted}",
                        txid=tx.txid,
                        receipt=receipt
                    )

                if tx.confirmations > last_confirmations:
                    waitconf = tx.confirmations
                    last_confirmations = tx.confirmations
                    self.logger.info(f"Transaction {tx.txid} confirmed {tx.confirmations} times")
                    await self._notify(handlers, tx, receipt)

                if tx.confirmations >= min_confirmations:
                    return receipt

            if has_wait_support:
                # long-poll for one additional confirmation
                waitconf += 1
            else:
                await sleep(interval + random.random() * POLL_JITTER)

    async def _confirm_eth(
        self,
        min_confirmations: int,
        handlers: List[ConfirmationHandler],
        interval: float
    ) -> EthTransactionReceipt:
        rpc: EthRPC = self.rpc
        tx = await rpc.get_transaction(self.txid)
        if tx is None:
            raise TransactionNotFoundError(self.txid)

        last_confirmations = 0

        while True:
            receipt = await rpc.get_transaction_receipt(self.txid)
            if receipt is None:
                # not mined yet
                self.logger.debug(f"Transaction {self.txid} is pending")
                await sleep(interval)
                continue

            if receipt.failed:
                self.logger.error(f"Transaction {self.txid} reverted in block {receipt.block_number}")
                raise ExecutionError("Transaction process error", txid=self.txid, receipt=receipt)

            head = await rpc.get_block_number()
            confirmations = head - receipt.block_number
            self.logger.debug(f"Transaction {self.txid} has {confirmations} confirmations")

            if confirmations == 0 and min_confirmations > 0:
                # mined in the head block; wait for it to be built upon
                await sleep(interval)
                continue

            if confirmations > last_confirmations:
                last_confirmations = confirmations
                self.logger.info(f"Transaction {self.txid} confirmed {confirmations} times")
                await self._notify(handlers, tx, receipt)

            if confirmations >= min_confirmations:
                return receipt

            await sleep(interval)
