"""
Event log retrieval and subscription.

``get_logs`` runs one range query and decodes the result. ``on_log`` turns
range queries into a continuous stream: a background task follows the
chain head, advancing a block cursor, until the returned subscription is
canceled. ``emitter`` re-publishes that stream by event name.

Subscriptions stop on the first transport error unless created with
``retry_on_error=True``; a persistent error would otherwise look like a hang.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Iterable, List, Optional, Set, Union

from . import config
from ._rate_limited_log import rate_limited_log
from .abi import ContractLogDecoder
from .config import NetworkKind
from .emitter import EventEmitter
from .exceptions import TransportError
from .models import ContractEventLog, ContractEventLogs, LogRequest
from .rpc import AnyRPC
from .utils import sleep, strip_hex0x

logger = logging.getLogger(__name__)

# Emitter topic for logs that no known event ABI matches
UNKNOWN_EVENT = "unknown"

LogCallback = Callable[[ContractEventLog], Any]
LogBatch = Union[ContractEventLogs, List[ContractEventLog]]


def _normalize_address(address: str) -> str:
    return strip_hex0x(address).lower()


class LogSubscription:
    """
    Handle of a running ``on_log`` loop.

    Calling ``cancel()`` (or the handle itself) stops the loop and aborts a
    request in flight; its results are discarded. ``wait()`` returns when the
    loop has stopped and re-raises the error that ended it, if any.
    """

    def __init__(self):
        self.canceled = False
        self.error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task] = None

    def cancel(self) -> None:
        if self.canceled:
            return
        self.canceled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    __call__ = cancel

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> None:
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                if not self.canceled:
                    raise
        if self.error is not None:
            raise self.error


class CancellableEventEmitter(EventEmitter):
    """An ``EventEmitter`` fed by a log subscription."""

    def __init__(self):
        super().__init__()
        self.subscription: Optional[LogSubscription] = None

    def cancel(self) -> None:
        if self.subscription is not None:
            self.subscription.cancel()
        self.remove_all_listeners()


class EventListener:
    """
    Retrieves and subscribes to decoded event logs.

    Args:
        rpc: QtumRPC or EthRPC; its ``kind`` selects the polling strategy
        log_decoder: Decoder for the events of interest
        addresses: Default address filter applied when a request has none
        logger: Optional logger instance
    """

    def __init__(
        self,
        rpc: AnyRPC,
        log_decoder: ContractLogDecoder,
        addresses: Optional[Iterable[str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.rpc = rpc
        self.log_decoder = log_decoder
        self.addresses = list(addresses) if addresses else None
        self.logger = logger or logging.getLogger(__name__)

    def _request(self, request: Optional[LogRequest], overrides: dict) -> LogRequest:
        fields = request.model_dump() if request is not None else {}
        fields.update(overrides)
        if fields.get("addresses") is None and self.addresses:
            fields["addresses"] = self.addresses
        return LogRequest.model_validate(fields)

    def _decode_entries(self, raw_entries: Iterable[dict], addresses: Optional[List[str]]) -> List[ContractEventLog]:
        in_scope: Optional[Set[str]] = None
        if addresses:
            in_scope = {_normalize_address(a) for a in addresses}

        entries = []
        for raw in raw_entries:
            entry = ContractEventLog.model_validate(raw)
            out_of_scope = (
                in_scope is not None
                and (entry.address is None or _normalize_address(entry.address) not in in_scope)
            )
            if out_of_scope:
                rate_limited_log(
                    f"Not decoding log from {entry.address}: outside the address filter",
                    level="debug",
                    logger_instance=self.logger
                )
            else:
                entry.event = self.log_decoder.decode(entry)
            entries.append(entry)
        return entries

    async def get_logs(self, request: Optional[LogRequest] = None, **overrides: Any) -> LogBatch:
        """
        Run one log query and decode every entry.

        Entries no known event matches keep ``event = None``.

        Returns:
            ``ContractEventLogs`` (entries, count, next_block) on Qtum,
            a list of entries on Ethereum-style networks
        """
        req = self._request(request, overrides)

        if self.rpc.kind == NetworkKind.ETHEREUM:
            raw = await self.rpc.get_logs(req.from_block, req.to_block, req.addresses, req.topics)
            return self._decode_entries(raw, req.addresses)

        result = await self.rpc.wait_for_logs(req.from_block, req.to_block, req.addresses, req.topics, req.minconf)
        entries = self._decode_entries(result.get("entries", []), req.addresses)
        return ContractEventLogs(entries=entries, count=result.get("count", len(entries)), nextblock=result["nextblock"])

    def on_log(
        self,
        callback: LogCallback,
        request: Optional[LogRequest] = None,
        retry_on_error: bool = False,
        poll_interval: Optional[float] = None,
        **overrides: Any
    ) -> LogSubscription:
        """
        Subscribe to logs until canceled.

        Must be called from a running event loop.

        Args:
            callback: Called once per decoded entry, in server order
            request: Block range and filter; ``from_block`` defaults to "latest"
            retry_on_error: Keep polling after transport errors instead of stopping
            poll_interval: Backoff when there is nothing new to query

        Returns:
            A ``LogSubscription`` handle
        """
        req = self._request(request, overrides)
        subscription = LogSubscription()
        loop = asyncio.get_running_loop()
        subscription._task = loop.create_task(
            self._run(subscription, callback, req, retry_on_error, poll_interval)
        )
        return subscription

    def emitter(self, request: Optional[LogRequest] = None, **kwargs: Any) -> CancellableEventEmitter:
        """
        Subscribe to logs and publish each entry under its event name.

        Entries that could not be decoded are published under ``UNKNOWN_EVENT``.
        """
        emitter = CancellableEventEmitter()

        async def publish(entry: ContractEventLog) -> None:
            key = entry.event["type"] if entry.event else UNKNOWN_EVENT
            await emitter.emit(key, entry)

        emitter.subscription = self.on_log(publish, request, **kwargs)
        return emitter

    async def _run(
        self,
        subscription: LogSubscription,
        callback: LogCallback,
        req: LogRequest,
        retry_on_error: bool,
        poll_interval: Optional[float]
    ) -> None:
        try:
            if self.rpc.kind == NetworkKind.ETHEREUM:
                await self._poll_eth(subscription, callback, req, retry_on_error, poll_interval)
            else:
                await self._poll_qtum(subscription, callback, req, retry_on_error, poll_interval)
        except asyncio.CancelledError:
            self.logger.debug("Log subscription canceled")
            raise
        except Exception as e:
            subscription.error = e
            self.logger.error(f"Log subscription stopped: {e}")

    async def _deliver(self, subscription: LogSubscription, callback: LogCallback, entries: List[ContractEventLog]) -> None:
        for entry in entries:
            if subscription.canceled:
                return
            result = callback(entry)
            if inspect.isawaitable(result):
                await result

    async def _handle_error(self, error: TransportError, retry_on_error: bool) -> None:
        if not retry_on_error:
            raise error
        rate_limited_log(f"Log subscription error, retrying: {error}", level="warning", logger_instance=self.logger)
        await sleep(config.log_retry_interval())

    async def _poll_qtum(
        self,
        subscription: LogSubscription,
        callback: LogCallback,
        req: LogRequest,
        retry_on_error: bool,
        poll_interval: Optional[float]
    ) -> None:
        interval = poll_interval if poll_interval is not None else config.log_retry_interval()
        from_block = req.from_block

        while not subscription.canceled:
            try:
                head = await self.rpc.get_block_number()

                # waitforlogs rejects a range that starts after the chain head
                if isinstance(from_block, int) and from_block > head:
                    await sleep(interval)
                    continue

                batch = await self.get_logs(req.model_copy(update={"from_block": from_block}))
            except TransportError as e:
                await self._handle_error(e, retry_on_error)
                continue

            if subscription.canceled:
                return

            self.logger.debug(f"Got {batch.count} logs from block {from_block}, next {batch.next_block}")
            await self._deliver(subscription, callback, batch.entries)
            from_block = batch.next_block

    async def _poll_eth(
        self,
        subscription: LogSubscription,
        callback: LogCallback,
        req: LogRequest,
        retry_on_error: bool,
        poll_interval: Optional[float]
    ) -> None:
        interval = poll_interval if poll_interval is not None else config.eth_poll_interval()
        from_block = req.from_block
        fetch_to_latest = not isinstance(req.to_block, int)
        is_first_fetch = True

        while not subscription.canceled:
            try:
                head = await self.rpc.get_block_number()

                if not isinstance(from_block, int):
                    from_block = head
                to_block = head if fetch_to_latest else req.to_block

                if from_block > to_block or (not is_first_fetch and from_block == to_block):
                    await sleep(interval)
                    continue
                is_first_fetch = False

                entries = await self.get_logs(
                    req.model_copy(update={"from_block": from_block, "to_block": to_block})
                )
            except TransportError as e:
                await self._handle_error(e, retry_on_error)
                continue

            if subscription.canceled:
                return

            self.logger.debug(f"Got {len(entries)} logs in blocks {from_block}-{to_block}")
            await self._deliver(subscription, callback, entries)
            from_block = to_block + 1
