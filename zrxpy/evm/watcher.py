import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from hexbytes import HexBytes

from zrxpy.exceptions import NodeQueryError
from zrxpy.logger import get_logger
from zrxpy.model.transaction import (
    EmittedEvent,
    LogEntry,
    SolidityEvent,
    TransactionReceipt,
)
from zrxpy.utils.hex import to_hex

if TYPE_CHECKING:
    from zrxpy.evm.node import Node

_STOP = object()


class WatchStatus(str, Enum):
    PENDING = "pending"
    RECEIPT_RECEIVED = "receipt_received"
    EVENT_RECEIVED = "event_received"
    STOPPED = "stopped"


@dataclass
class WatchState:
    """
    What one watcher is waiting for. The event set only ever shrinks.
    """

    transaction_hash: HexBytes
    events: dict[str, SolidityEvent] = field(default_factory=dict)
    status: WatchStatus = WatchStatus.PENDING
    receipt: TransactionReceipt | None = None
    error: Exception | None = None

    @property
    def pending_events(self) -> list[SolidityEvent]:
        return list(self.events.values())


@dataclass
class CallbackObserver:
    """
    Adapts plain callables (sync or async) to the observer interface.
    """

    on_receipt: Callable[[TransactionReceipt], Awaitable[None] | None] | None = None
    on_event: Callable[[EmittedEvent], Awaitable[None] | None] | None = None
    on_error: Callable[[Exception], Awaitable[None] | None] | None = None


class TransactionWatcher:
    """
    Follows one broadcast transaction until its receipt and every expected
    event have been seen, then stops all polling.

    Observers receive ``on_receipt``, ``on_event`` and ``on_error`` calls,
    one at a time and in the order the node reported them. Any object with
    some of those methods is a valid observer.
    """

    def __init__(
        self,
        transaction_hash: bytes | str,
        node: "Node",
        address: str | None = None,
        poll_interval: float = 1.0,
        log_level: int = logging.INFO,
    ):
        self.state = WatchState(transaction_hash=HexBytes(transaction_hash))
        self.node = node
        self.address = address
        self.poll_interval = poll_interval
        self.logger = get_logger(__name__, log_level=log_level)
        self._observers: list[Any] = []
        self._queue: asyncio.Queue = asyncio.Queue()
        self._stopped = asyncio.Event()
        self._started = False
        self._finished = False
        self._receipt_task: asyncio.Task | None = None
        self._logs_task: asyncio.Task | None = None
        self._dispatch_task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"<TransactionWatcher {self.transaction_hash_hex} {self.state.status.value}>"

    @property
    def transaction_hash_hex(self) -> str:
        return to_hex(bytes(self.state.transaction_hash), prefix=True)

    @property
    def status(self) -> WatchStatus:
        return self.state.status

    @property
    def is_watching(self) -> bool:
        return self._started and not self._finished

    @property
    def is_subscribed(self) -> bool:
        return self._logs_task is not None and not self._logs_task.done()

    def add_observer(self, observer: Any) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: Any) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def start_watching(self, events: Iterable[SolidityEvent] = ()) -> None:
        """
        Begin polling for the receipt and, when ``events`` is non-empty,
        subscribe to logs carrying any of those event topics. Must be called
        from a running event loop, and only once.
        """
        if self._started:
            raise RuntimeError(f"{self!r} is already started.")

        self._started = True
        self.state.events = {event.topic: event for event in events}
        self._dispatch_task = asyncio.create_task(self._dispatch())
        self._receipt_task = asyncio.create_task(self._poll_receipt())
        if self.state.events:
            self._logs_task = asyncio.create_task(self._watch_logs())

        self.logger.debug(
            f"Watching {self.transaction_hash_hex} for receipt and "
            f"{[e.signature for e in self.state.pending_events]}."
        )

    def stop_watching(self, events: Iterable[SolidityEvent]) -> None:
        """
        Stop waiting for ``events``. Events no longer pending are ignored.
        Once nothing is pending the log subscription is closed.
        """
        for event in events:
            self.state.events.pop(event.topic, None)

        if not self.state.events:
            _cancel(self._logs_task)
            self._finish_if_done()

    async def stop(self) -> None:
        """
        Stop everything now and wait for queued notifications to be delivered.
        """
        self._finish()
        await self._stopped.wait()

    async def wait(self) -> WatchState:
        """
        Wait until the watcher stops.

        Raises:
            :class:`~zrxpy.exceptions.NodeQueryError`: If polling failed.
        """
        await self._stopped.wait()
        if self.state.error is not None:
            raise self.state.error

        return self.state

    async def _poll_receipt(self) -> None:
        while True:
            try:
                receipt = await self.node.get_receipt(self.state.transaction_hash)
            except Exception as err:
                self._fail(err)
                return

            if receipt is None:
                await asyncio.sleep(self.poll_interval)
                continue

            self.logger.info(
                f"Received receipt for {self.transaction_hash_hex} "
                f"in block {receipt.block_number}."
            )
            self.state.receipt = receipt
            self.state.status = WatchStatus.RECEIPT_RECEIVED
            self._queue.put_nowait(("on_receipt", receipt))

            # The log subscription only sees blocks after it started, so
            # events already mined are taken from the receipt.
            for log in receipt.logs:
                if not log.removed:
                    self._handle_log(log)

            if receipt.reverted and self.state.events:
                # Reverted transactions emit no logs.
                self.logger.warning(
                    f"{self.transaction_hash_hex} reverted; no longer waiting for "
                    f"{[e.signature for e in self.state.pending_events]}."
                )
                self.stop_watching(self.state.pending_events)

            self._finish_if_done()
            return

    async def _watch_logs(self) -> None:
        topics = list(self.state.events)
        try:
            async with aclosing(self.node.subscribe_logs(self.address, topics)) as logs:
                async for log in logs:
                    if log.transaction_hash != self.transaction_hash_hex:
                        continue

                    self._handle_log(log)
                    if not self.state.events:
                        break

        except Exception as err:
            self._fail(err)

    def _handle_log(self, log: LogEntry) -> None:
        # Whichever of the receipt or the subscription sees an event first
        # delivers it; the other finds it no longer pending.
        if self._finished or (event := self.state.events.get(log.topic0 or "")) is None:
            return

        self.logger.info(f"Received event {event.signature} for {self.transaction_hash_hex}.")
        self.state.status = WatchStatus.EVENT_RECEIVED
        self._queue.put_nowait(("on_event", EmittedEvent(event=event, log=log)))
        self.stop_watching([event])

    def _fail(self, err: Exception) -> None:
        if not isinstance(err, NodeQueryError):
            wrapped = NodeQueryError(f"Watching {self.transaction_hash_hex} failed: {err}")
            wrapped.__cause__ = err
            err = wrapped

        self.logger.error(f"Stopped watching {self.transaction_hash_hex}: {err}")
        self.state.error = err
        self._queue.put_nowait(("on_error", err))
        self._finish()

    def _finish_if_done(self) -> None:
        if self.state.receipt is not None and not self.state.events:
            self._finish()

    def _finish(self) -> None:
        if self._finished:
            return

        self._finished = True
        self.state.status = WatchStatus.STOPPED
        _cancel(self._receipt_task)
        _cancel(self._logs_task)
        if self._dispatch_task is None:
            # Never started; nothing to drain.
            self._stopped.set()
        else:
            self._queue.put_nowait(_STOP)

        self.logger.debug(f"Stopped watching {self.transaction_hash_hex}.")

    async def _dispatch(self) -> None:
        try:
            while (item := await self._queue.get()) is not _STOP:
                kind, payload = item
                for observer in list(self._observers):
                    await self._deliver(observer, kind, payload)
        finally:
            self._stopped.set()

    async def _deliver(self, observer: Any, kind: str, payload: Any) -> None:
        if (callback := getattr(observer, kind, None)) is None:
            return

        try:
            result = callback(payload)
            if isinstance(result, Awaitable):
                await result
        except Exception as err:
            self.logger.error(
                f"Error in {kind} callback for {self.transaction_hash_hex}: {err}",
                exc_info=True,
            )


def _cancel(task: asyncio.Task | None) -> None:
    if task is not None and not task.done() and task is not asyncio.current_task():
        task.cancel()
