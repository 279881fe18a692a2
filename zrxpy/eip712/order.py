from typing import Any

from zrxpy.eip712.encoder import DOMAIN_TYPE, Entry
from zrxpy.model.domain import EIP712Domain
from zrxpy.model.order import Order
from zrxpy.utils.hex import hex_to_bytes

PROTOCOL_NAME = "0x Protocol"
PROTOCOL_VERSION = "3.0.0"
ORDER_TYPE = "Order"

# NOTE: The field order here is the struct layout the exchange contract hashes.
ORDER_TYPES: dict[str, list[Entry]] = {
    DOMAIN_TYPE: [
        Entry("name", "string"),
        Entry("version", "string"),
        Entry("chainId", "uint256"),
        Entry("verifyingContract", "address"),
    ],
    ORDER_TYPE: [
        Entry("makerAddress", "address"),
        Entry("takerAddress", "address"),
        Entry("feeRecipientAddress", "address"),
        Entry("senderAddress", "address"),
        Entry("makerAssetAmount", "uint256"),
        Entry("takerAssetAmount", "uint256"),
        Entry("makerFee", "uint256"),
        Entry("takerFee", "uint256"),
        Entry("expirationTimeSeconds", "uint256"),
        Entry("salt", "uint256"),
        Entry("makerAssetData", "bytes"),
        Entry("takerAssetData", "bytes"),
        Entry("makerFeeAssetData", "bytes"),
        Entry("takerFeeAssetData", "bytes"),
    ],
}


def order_to_message(order: Order) -> dict[str, Any]:
    """
    The ``Order`` struct values: amounts as plain integers and asset data as raw bytes.
    """
    return {
        "makerAddress": str(order.maker_address),
        "takerAddress": str(order.taker_address),
        "feeRecipientAddress": str(order.fee_recipient_address),
        "senderAddress": str(order.sender_address),
        "makerAssetAmount": int(order.maker_asset_amount),
        "takerAssetAmount": int(order.taker_asset_amount),
        "makerFee": int(order.maker_fee),
        "takerFee": int(order.taker_fee),
        "expirationTimeSeconds": int(order.expiration_time_seconds),
        "salt": int(order.salt),
        "makerAssetData": hex_to_bytes(order.maker_asset_data),
        "takerAssetData": hex_to_bytes(order.taker_asset_data),
        "makerFeeAssetData": hex_to_bytes(order.maker_fee_asset_data),
        "takerFeeAssetData": hex_to_bytes(order.taker_fee_asset_data),
    }


def order_to_domain(order: Order) -> EIP712Domain:
    return EIP712Domain(
        name=PROTOCOL_NAME,
        version=PROTOCOL_VERSION,
        chainId=order.chain_id,
        verifyingContract=order.exchange_address,
    )
