import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from eth_account import Account
from hexbytes import HexBytes

from zrxpy.evm.builder import TransactionBuilder
from zrxpy.evm.watcher import CallbackObserver, TransactionWatcher
from zrxpy.exceptions import BroadcastError, NodeQueryError, SigningError
from zrxpy.logger import get_logger
from zrxpy.model.transaction import (
    ContractInvocation,
    SignedTransaction,
    SolidityEvent,
    Submission,
    TransactionRequest,
)
from zrxpy.sign.signer import to_private_key
from zrxpy.utils.hex import to_hex

if TYPE_CHECKING:
    from eth_keys.datatypes import PrivateKey

    from zrxpy.evm.gas import GasProvider
    from zrxpy.evm.node import Node

TransactionSigner = Callable[
    [TransactionRequest, "PrivateKey", int], "SignedTransaction | Awaitable[SignedTransaction]"
]


def sign_transaction(
    request: TransactionRequest, private_key: "PrivateKey", chain_id: int
) -> SignedTransaction:
    """
    Sign a legacy transaction with the chain id bound into ``v`` (EIP-155).
    """
    signed = Account.sign_transaction(request.to_signable(chain_id), private_key.to_bytes())
    return SignedTransaction(
        request=request,
        chain_id=chain_id,
        v=signed.v,
        r=signed.r,
        s=signed.s,
        raw_transaction=bytes(signed.raw_transaction),
        hash=bytes(signed.hash),
    )


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING_NONCE = "fetching_nonce"
    SIGNING = "signing"
    BROADCASTING = "broadcasting"
    SUBMITTED = "submitted"
    FAILED = "failed"


class PipelineRun:
    """
    One submission: fetch nonce, build, sign, broadcast. Every step waits
    for the previous one and nothing is retried.
    """

    def __init__(
        self,
        pipeline: "TransactionPipeline",
        invocation: ContractInvocation | None = None,
        value: int | None = None,
        destination: str | None = None,
        data: bytes = b"",
    ):
        self.pipeline = pipeline
        self.invocation = invocation
        self.value = value
        self.destination = destination
        self.data = data
        self.state = PipelineState.IDLE
        self.request: TransactionRequest | None = None
        self.signed_transaction: SignedTransaction | None = None
        self.transaction_hash: HexBytes | None = None
        self.error: Exception | None = None

    def __repr__(self) -> str:
        return f"<PipelineRun {self.state.value}>"

    @property
    def logger(self) -> logging.Logger:
        return self.pipeline.logger

    def _transition(self, state: PipelineState) -> None:
        self.logger.debug(f"Pipeline {self.state.value} -> {state.value}.")
        self.state = state

    async def execute(self) -> HexBytes:
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"{self!r} already executed.")

        try:
            nonce = await self._fetch_nonce()
            self.request = self.pipeline.builder.build(
                nonce,
                invocation=self.invocation,
                destination=self.destination,
                value=self.value,
                data=self.data,
            )
            self.signed_transaction = await self._sign(self.request)
            self.transaction_hash = await self._broadcast(self.signed_transaction)

        except Exception as err:
            self.error = err
            self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.SUBMITTED)
        return self.transaction_hash

    async def _fetch_nonce(self) -> int:
        self._transition(PipelineState.FETCHING_NONCE)
        address = self.pipeline.address
        try:
            nonce = await self.pipeline.node.get_nonce(address)
        except NodeQueryError:
            raise
        except Exception as err:
            raise NodeQueryError(f"Failed to fetch nonce for {address}: {err}") from err

        self.logger.debug(f"Fetched nonce {nonce} for {address}.")
        return nonce

    async def _sign(self, request: TransactionRequest) -> SignedTransaction:
        self._transition(PipelineState.SIGNING)
        try:
            result = self.pipeline.transaction_signer(
                request, self.pipeline.private_key, self.pipeline.chain_id
            )
            if isinstance(result, Awaitable):
                result = await result

        except SigningError:
            raise
        except Exception as err:
            raise SigningError(f"Failed to sign transaction: {err}") from err

        return result

    async def _broadcast(self, signed_transaction: SignedTransaction) -> HexBytes:
        self._transition(PipelineState.BROADCASTING)
        try:
            transaction_hash = await self.pipeline.node.send_raw_transaction(
                signed_transaction.raw_transaction
            )
        except Exception as err:
            raise BroadcastError(
                f"Failed to broadcast transaction: {err}", signed_transaction=signed_transaction
            ) from err

        transaction_hash = HexBytes(transaction_hash)
        self.logger.info(f"Broadcast transaction {to_hex(bytes(transaction_hash), prefix=True)}.")
        return transaction_hash


class TransactionPipeline:
    """
    Submits transactions from one account on one chain. All collaborators are
    required up front; each :meth:`submit` runs in its own
    :class:`PipelineRun`, so concurrent submissions share no mutable state.
    Nonce conflicts between concurrent submissions are the caller's to avoid.
    """

    def __init__(
        self,
        node: "Node",
        private_key: Any,
        gas_provider: "GasProvider",
        chain_id: int,
        transaction_signer: TransactionSigner = sign_transaction,
        poll_interval: float = 1.0,
        log_level: int = logging.INFO,
    ):
        self.node = node
        self.private_key = to_private_key(private_key)
        self.gas_provider = gas_provider
        self.chain_id = int(chain_id)
        self.transaction_signer = transaction_signer
        self.poll_interval = poll_interval
        self.log_level = log_level
        self.logger = get_logger(__name__, log_level=log_level)

    def __repr__(self) -> str:
        return f"<TransactionPipeline {self.address} chain={self.chain_id}>"

    @property
    def address(self) -> str:
        return self.private_key.public_key.to_checksum_address()

    @property
    def builder(self) -> TransactionBuilder:
        return TransactionBuilder(self.address, self.gas_provider)

    async def submit(
        self,
        invocation: ContractInvocation | None = None,
        value: int | None = None,
        destination: str | None = None,
        watch_events: Sequence[SolidityEvent] | None = None,
        data: bytes = b"",
        on_receipt: Callable | None = None,
        on_event: Callable | None = None,
        on_error: Callable | None = None,
        observers: Sequence[Any] = (),
    ) -> Submission:
        """
        Fetch a fresh nonce, build, sign, and broadcast a transaction.

        When events, callbacks or observers are given, a
        :class:`~zrxpy.evm.watcher.TransactionWatcher` is started after the
        broadcast. Its notifications arrive independently of this return value.

        Args:
            invocation (:class:`~zrxpy.model.transaction.ContractInvocation` | None):
              A prepared contract call.
            value (int | None): Wei to send along.
            destination (str | None): Target when there is no invocation.
            watch_events (Sequence[:class:`~zrxpy.model.transaction.SolidityEvent`] | None):
              Events to wait for.
            data (bytes): Calldata when there is no invocation.
            on_receipt: Called once with the receipt.
            on_event: Called once per expected event.
            on_error: Called if watching fails.
            observers: Extra observers for the watcher.

        Returns:
            :class:`~zrxpy.model.transaction.Submission`

        Raises:
            :class:`~zrxpy.exceptions.NodeQueryError`: Nonce fetch failed.
            :class:`~zrxpy.exceptions.CannotBuildTransaction`: No target.
            :class:`~zrxpy.exceptions.SigningError`: Signing failed.
            :class:`~zrxpy.exceptions.BroadcastError`: The node refused the transaction.
        """
        run = PipelineRun(
            self,
            invocation=invocation,
            value=value,
            destination=destination,
            data=data,
        )
        transaction_hash = await run.execute()

        callbacks = (on_receipt, on_event, on_error)
        if watch_events is None and not observers and all(cb is None for cb in callbacks):
            return Submission(transaction_hash=transaction_hash)

        watcher = TransactionWatcher(
            transaction_hash,
            self.node,
            address=run.request.to if run.request else None,
            poll_interval=self.poll_interval,
            log_level=self.log_level,
        )
        if any(cb is not None for cb in callbacks):
            watcher.add_observer(
                CallbackObserver(on_receipt=on_receipt, on_event=on_event, on_error=on_error)
            )
        for observer in observers:
            watcher.add_observer(observer)

        watcher.start_watching(watch_events or ())
        return Submission(transaction_hash=transaction_hash, watcher=watcher)
