import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

import httpx
from eth_pydantic_types.hex.int import HexInt
from hexbytes import HexBytes
from pydantic import ValidationError

from zrxpy.client.base import BaseClient
from zrxpy.config import NodeConfig
from zrxpy.exceptions import NodeQueryError
from zrxpy.model.transaction import LogEntry, TransactionReceipt
from zrxpy.utils.hex import to_hex


class JsonRpcNode(BaseClient):
    """
    An Ethereum node reached over HTTP JSON-RPC. Logs are streamed by
    polling ``eth_getLogs`` from the block current at subscription time.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = BaseClient.DEFAULT_TIMEOUT,
        poll_interval: float = 1.0,
        client: httpx.AsyncClient | None = None,
        log_level: int = logging.INFO,
    ):
        super().__init__(base_url, timeout=timeout, client=client, log_level=log_level)
        self.poll_interval = poll_interval

    @classmethod
    def from_config(cls, config: NodeConfig | None = None, **kwargs) -> "JsonRpcNode":
        config = config or NodeConfig.from_env()
        return cls(
            config.rpc_url,
            timeout=config.timeout,
            poll_interval=config.poll_interval,
            **kwargs,
        )

    async def _quantity(self, method: str, params: list | None = None) -> int:
        result = await self._rpc(method, params)
        try:
            return HexInt.validate_hex(result)
        except (TypeError, ValueError) as err:
            raise NodeQueryError(f"Invalid quantity from {method}: {result!r}") from err

    async def get_nonce(self, address: str) -> int:
        return await self._quantity("eth_getTransactionCount", [address, "latest"])

    async def get_block_number(self) -> int:
        return await self._quantity("eth_blockNumber")

    async def send_raw_transaction(self, raw_transaction: bytes) -> bytes:
        result = await self._rpc("eth_sendRawTransaction", [to_hex(raw_transaction, prefix=True)])
        if not isinstance(result, str):
            raise NodeQueryError(f"Invalid transaction hash: {result!r}")

        return HexBytes(result)

    async def get_receipt(self, transaction_hash: bytes) -> TransactionReceipt | None:
        result = await self._rpc(
            "eth_getTransactionReceipt", [to_hex(bytes(transaction_hash), prefix=True)]
        )
        if result is None:
            return None

        try:
            return TransactionReceipt.model_validate(result)
        except ValidationError as err:
            raise NodeQueryError(f"Invalid receipt: {err}") from err

    async def get_logs(
        self,
        address: str | None,
        topics: Sequence[str],
        from_block: int,
        to_block: int,
    ) -> list[LogEntry]:
        log_filter: dict = {
            "fromBlock": hex(from_block),
            "toBlock": hex(to_block),
            "topics": [list(topics)],
        }
        if address is not None:
            log_filter["address"] = address

        result = await self._rpc("eth_getLogs", [log_filter])
        try:
            return [LogEntry.model_validate(item) for item in result or []]
        except (TypeError, ValidationError) as err:
            raise NodeQueryError(f"Invalid logs: {err}") from err

    async def subscribe_logs(
        self, address: str | None, topics: Sequence[str]
    ) -> AsyncIterator[LogEntry]:
        next_block = await self.get_block_number()
        self.logger.debug(f"Polling logs for {list(topics)} from block {next_block}.")
        while True:
            latest = await self.get_block_number()
            if latest >= next_block:
                for log in await self.get_logs(address, topics, next_block, latest):
                    if not log.removed:
                        yield log

                next_block = latest + 1

            await asyncio.sleep(self.poll_interval)

    async def call(self, to: str, data: bytes) -> bytes:
        result = await self._rpc(
            "eth_call", [{"to": to, "data": to_hex(data, prefix=True)}, "latest"]
        )
        if not isinstance(result, str):
            raise NodeQueryError(f"Invalid call result: {result!r}")

        return bytes(HexBytes(result))
