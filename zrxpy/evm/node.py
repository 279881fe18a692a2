from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

from zrxpy.model.transaction import LogEntry, TransactionReceipt


@runtime_checkable
class Node(Protocol):
    """
    The blockchain node as seen by the pipeline and the watcher.
    Implementations raise :class:`~zrxpy.exceptions.NodeQueryError` on
    failure and do their own retrying, if any.
    """

    async def get_nonce(self, address: str) -> int: ...

    async def send_raw_transaction(self, raw_transaction: bytes) -> bytes: ...

    async def get_receipt(self, transaction_hash: bytes) -> TransactionReceipt | None:
        """
        The receipt, or ``None`` while the transaction is pending.
        """
        ...

    def subscribe_logs(self, address: str | None, topics: Sequence[str]) -> AsyncIterator[LogEntry]:
        """
        Stream new logs from ``address`` whose first topic is any of ``topics``.
        """
        ...

    async def call(self, to: str, data: bytes) -> bytes: ...
