import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from eth_utils import to_checksum_address

from zrxpy.config import NetworkType
from zrxpy.evm.pipeline import TransactionPipeline
from zrxpy.exceptions import EmptyResponseError
from zrxpy.model.transaction import ContractInvocation, SolidityEvent, Submission

if TYPE_CHECKING:
    from zrxpy.evm.gas import GasProvider
    from zrxpy.evm.node import Node

T = TypeVar("T")


class Contract:
    """
    A deployed contract used from one account. There is no way to build one
    without its address, node, key, gas provider, and network.
    """

    def __init__(
        self,
        *,
        address: str,
        node: "Node",
        private_key: Any,
        gas_provider: "GasProvider",
        network: NetworkType | int,
        poll_interval: float = 1.0,
        log_level: int = logging.INFO,
    ):
        self.address = to_checksum_address(address)
        self.node = node
        self.network = network
        self.pipeline = TransactionPipeline(
            node,
            private_key,
            gas_provider,
            int(network),
            poll_interval=poll_interval,
            log_level=log_level,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.address}>"

    @property
    def chain_id(self) -> int:
        return self.pipeline.chain_id

    async def read(self, invocation: ContractInvocation, on_parse: Callable[[bytes], T]) -> T:
        """
        Run a read-only call and parse the returned data.

        Raises:
            :class:`~zrxpy.exceptions.EmptyResponseError`: If the call returned nothing.
        """
        result = await self.node.call(invocation.to, invocation.data)
        if not result:
            raise EmptyResponseError(f"{invocation.method.signature} returned no data.")

        return on_parse(result)

    async def execute_transaction(
        self,
        invocation: ContractInvocation | None,
        value: int | None = None,
        address: str | None = None,
        watch_events: Sequence[SolidityEvent] | None = None,
        data: bytes = b"",
        on_receipt: Callable | None = None,
        on_event: Callable | None = None,
        **kwargs,
    ) -> Submission:
        """
        Submit a transaction to this contract, or to ``address`` when given.
        """
        return await self.pipeline.submit(
            invocation=invocation,
            value=value,
            destination=address or self.address,
            watch_events=watch_events,
            data=data,
            on_receipt=on_receipt,
            on_event=on_event,
            **kwargs,
        )
