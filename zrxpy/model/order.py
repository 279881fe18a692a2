from eth_pydantic_types import Address, HexStr
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from zrxpy.model.types import Uint256


class Order(BaseModel):
    """
    A 0x v3 order. Immutable once constructed.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    maker_address: Address
    taker_address: Address
    fee_recipient_address: Address
    sender_address: Address
    maker_asset_amount: Uint256
    taker_asset_amount: Uint256
    maker_fee: Uint256
    taker_fee: Uint256
    expiration_time_seconds: Uint256
    salt: Uint256
    maker_asset_data: HexStr
    taker_asset_data: HexStr
    maker_fee_asset_data: HexStr
    taker_fee_asset_data: HexStr
    exchange_address: Address
    chain_id: int = Field(ge=0)


class SignedOrder(Order):
    signature: HexStr
    """
    The ``0x``-prefixed signature, ending in the signature-type byte.
    """

    @classmethod
    def from_order(cls, order: Order, signature: str) -> "SignedOrder":
        return cls(**order.model_dump(), signature=signature)

    def to_order(self) -> Order:
        return Order(**self.model_dump(exclude={"signature"}))
