from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

from eth_abi import encode
from eth_pydantic_types import Address, HexStr
from eth_pydantic_types.hex.int import HexInt
from eth_utils import keccak
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from zrxpy.utils.hex import hex_to_bytes, to_hex

if TYPE_CHECKING:
    from zrxpy.evm.watcher import TransactionWatcher


@dataclass(frozen=True)
class ContractMethod:
    """
    A contract function, identified by name and argument types.
    """

    name: str
    inputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @cached_property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:4]

    def encode_input(self, *args) -> bytes:
        if len(args) != len(self.inputs):
            raise ValueError(
                f"{self.signature} takes {len(self.inputs)} arguments, got {len(args)}."
            )

        return self.selector + encode(list(self.inputs), list(args))

    def invoke(self, to: str, *args) -> "ContractInvocation":
        return ContractInvocation(to=to, method=self, data=self.encode_input(*args))


@dataclass(frozen=True)
class ContractInvocation:
    """
    A prepared contract call: target, method, and encoded calldata.
    """

    to: str
    method: ContractMethod
    data: bytes = b""

    @property
    def method_name(self) -> str:
        return self.method.name


class TransactionRequest(BaseModel):
    """
    An unsigned legacy transaction. Built once per submission attempt.
    """

    model_config = ConfigDict(frozen=True)

    nonce: int = Field(ge=0)
    sender: Address
    to: Address | None = None
    value: int = Field(default=0, ge=0)
    gas: int = Field(ge=0)
    gas_price: int = Field(ge=0)
    data: HexStr = HexStr("0x")

    def to_signable(self, chain_id: int) -> dict[str, Any]:
        """
        The transaction dict with the chain id bound in (EIP-155).
        """
        tx: dict[str, Any] = {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas,
            "value": self.value,
            "data": hex_to_bytes(self.data),
            "chainId": chain_id,
        }
        if self.to is not None:
            tx["to"] = self.to

        return tx


class SignedTransaction(BaseModel):
    """
    A signed transaction ready for broadcast. Single-use.
    """

    model_config = ConfigDict(frozen=True)

    request: TransactionRequest
    chain_id: int
    v: int
    r: int
    s: int
    raw_transaction: bytes
    hash: bytes


class LogEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    address: Address
    topics: list[HexStr] = []
    data: HexStr = HexStr("0x")
    block_number: HexInt | None = None
    transaction_hash: HexStr | None = None
    log_index: HexInt | None = None
    removed: bool = False

    @property
    def topic0(self) -> str | None:
        return self.topics[0] if self.topics else None


class TransactionReceipt(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    transaction_hash: HexStr
    block_number: HexInt
    block_hash: HexStr | None = None
    status: HexInt | None = None
    gas_used: HexInt | None = None
    contract_address: Address | None = None
    logs: list[LogEntry] = []

    @property
    def reverted(self) -> bool:
        return self.status == 0


@dataclass(frozen=True)
class SolidityEvent:
    """
    An event the watcher can wait for, identified by its topic.
    """

    name: str
    inputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @cached_property
    def topic(self) -> str:
        return to_hex(keccak(text=self.signature), prefix=True)


@dataclass(frozen=True)
class EmittedEvent:
    event: SolidityEvent
    log: LogEntry


@dataclass(frozen=True)
class Submission:
    """
    The result of a broadcast: the transaction hash, and the watcher when
    receipt or event tracking was requested.
    """

    transaction_hash: bytes
    watcher: "TransactionWatcher | None" = field(default=None, compare=False)
