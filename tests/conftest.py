import asyncio

import pytest
from eth_utils import keccak

from zrxpy.config import GasConfig
from zrxpy.evm.gas import StaticGasProvider
from zrxpy.model.order import Order
from zrxpy.model.transaction import LogEntry, SolidityEvent, TransactionReceipt
from zrxpy.utils.hex import to_hex

# Well-known development key; never holds real funds.
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
EXCHANGE_ADDRESS = "0x61935cbdd02287b511119ddb11aeb42f1593b7ef"
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"
WETH_ASSET_DATA = "0xf47261b0000000000000000000000000c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
ZRX_ASSET_DATA = "0xf47261b0000000000000000000000000e41d2489571d322189246dafa5ebde1f4699f498"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def private_key():
    return PRIVATE_KEY


@pytest.fixture
def address():
    return ADDRESS


@pytest.fixture
def exchange_address():
    return EXCHANGE_ADDRESS


@pytest.fixture
def order():
    return Order(
        maker_address=ADDRESS,
        taker_address=NULL_ADDRESS,
        fee_recipient_address=NULL_ADDRESS,
        sender_address=NULL_ADDRESS,
        maker_asset_amount=1000,
        taker_asset_amount=2000,
        maker_fee=0,
        taker_fee=0,
        expiration_time_seconds=1_700_000_000,
        salt=42,
        maker_asset_data=WETH_ASSET_DATA,
        taker_asset_data=ZRX_ASSET_DATA,
        maker_fee_asset_data="0x",
        taker_fee_asset_data="0x",
        exchange_address=EXCHANGE_ADDRESS,
        chain_id=1,
    )


@pytest.fixture
def gas_provider():
    return StaticGasProvider(
        GasConfig(gas_limit=21_000, gas_price=10**9, method_gas_limits={"cancelOrder": 90_000})
    )


def make_receipt(
    transaction_hash: str, status: int = 1, logs: list[LogEntry] | None = None
) -> TransactionReceipt:
    return TransactionReceipt.model_validate(
        {
            "transactionHash": transaction_hash,
            "blockNumber": "0x10",
            "status": hex(status),
            "gasUsed": "0x5208",
            "logs": logs or [],
        }
    )


def make_log(transaction_hash: str, event: SolidityEvent, log_index: int = 0) -> LogEntry:
    return LogEntry.model_validate(
        {
            "address": EXCHANGE_ADDRESS,
            "topics": [event.topic],
            "data": "0x",
            "blockNumber": "0x10",
            "transactionHash": transaction_hash,
            "logIndex": hex(log_index),
        }
    )


class FakeNode:
    """
    In-memory node. Logs fed into ``logs`` are streamed to subscribers.
    """

    def __init__(self):
        self.nonce = 0
        self.receipt: TransactionReceipt | None = None
        self.call_result = b""
        self.nonce_error: Exception | None = None
        self.send_error: Exception | None = None
        self.receipt_error: Exception | None = None
        self.calls: list[str] = []
        self.sent: list[bytes] = []
        self.subscriptions: list[list[str]] = []
        self.closed_subscriptions = 0
        self.logs: asyncio.Queue = asyncio.Queue()

    async def get_nonce(self, address: str) -> int:
        self.calls.append("get_nonce")
        if self.nonce_error:
            raise self.nonce_error

        return self.nonce

    async def send_raw_transaction(self, raw_transaction: bytes) -> bytes:
        self.calls.append("send_raw_transaction")
        if self.send_error:
            raise self.send_error

        self.sent.append(raw_transaction)
        return keccak(raw_transaction)

    async def get_receipt(self, transaction_hash: bytes) -> TransactionReceipt | None:
        self.calls.append("get_receipt")
        if self.receipt_error:
            raise self.receipt_error

        return self.receipt

    async def subscribe_logs(self, address, topics):
        self.subscriptions.append(list(topics))
        try:
            while True:
                yield await self.logs.get()
        finally:
            self.closed_subscriptions += 1

    async def call(self, to: str, data: bytes) -> bytes:
        self.calls.append("call")
        return self.call_result


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def transaction_hash():
    return to_hex(keccak(text="transaction"), prefix=True)


@pytest.fixture
def receipt_factory():
    return make_receipt


@pytest.fixture
def log_factory():
    return make_log
