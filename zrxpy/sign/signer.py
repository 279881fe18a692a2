import logging
from collections.abc import Callable, Mapping
from typing import Any

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak, to_checksum_address

from zrxpy.eip712.encoder import TypedDataSchema, hash_structured_data, validate_structured_data
from zrxpy.eip712.order import ORDER_TYPE, ORDER_TYPES, order_to_domain, order_to_message
from zrxpy.exceptions import MalformedSignatureError, SigningError
from zrxpy.model.order import Order, SignedOrder
from zrxpy.model.signature import SignatureScheme
from zrxpy.sign.codec import decode_signature, encode_signature
from zrxpy.utils.hex import hex_to_bytes

logger = logging.getLogger(__name__)

ETH_SIGN_PREFIX = b"\x19Ethereum Signed Message:\n32"

SigningPrimitive = Callable[[bytes, Any], tuple[int, int | bytes, int | bytes]]


def to_private_key(private_key: "str | bytes | keys.PrivateKey") -> keys.PrivateKey:
    if isinstance(private_key, keys.PrivateKey):
        return private_key

    try:
        return keys.PrivateKey(hex_to_bytes(private_key))
    except (ValidationError, ValueError, TypeError) as err:
        raise SigningError(f"Invalid private key: {err}") from err


def ecdsa_sign(digest: bytes, private_key: "str | bytes | keys.PrivateKey") -> tuple[int, int, int]:
    """
    Sign a 32-byte digest with secp256k1.

    Args:
        digest (bytes): The message hash.
        private_key (str | bytes | ``eth_keys.keys.PrivateKey``): The signing key.

    Returns:
        tuple[int, int, int]: ``(v, r, s)`` with ``v`` in ``{0, 1}``.
    """
    key = to_private_key(private_key)
    try:
        signature = key.sign_msg_hash(digest)
    except (ValidationError, ValueError) as err:
        raise SigningError(f"Failed to sign digest: {err}") from err

    return signature.vrs


def eth_sign_digest(order_hash: bytes) -> bytes:
    return keccak(ETH_SIGN_PREFIX + order_hash)


def get_order_hash(order: Order, schema: TypedDataSchema = ORDER_TYPES) -> bytes:
    """
    The EIP-712 digest of an order, which is also its 0x order hash.
    """
    return hash_structured_data(schema, ORDER_TYPE, order_to_message(order), order_to_domain(order))


def _scheme_digest(order_hash: bytes, scheme: SignatureScheme) -> bytes:
    return eth_sign_digest(order_hash) if scheme is SignatureScheme.ETH_SIGN else order_hash


class OrderSigner:
    """
    Produces signed orders. The signing primitive only ever sees the digest
    and the key it is handed.
    """

    def __init__(
        self,
        signing_primitive: SigningPrimitive = ecdsa_sign,
        schema: Mapping = ORDER_TYPES,
    ):
        self.signing_primitive = signing_primitive
        self.schema = schema

    def sign(
        self,
        order: Order,
        private_key: Any,
        scheme: SignatureScheme = SignatureScheme.EIP712,
    ) -> SignedOrder:
        scheme = SignatureScheme(scheme)
        message = order_to_message(order)
        domain = order_to_domain(order)

        # Fail before touching the key when the message does not fit the schema.
        validate_structured_data(self.schema, ORDER_TYPE, message, domain=domain)
        order_hash = hash_structured_data(self.schema, ORDER_TYPE, message, domain)

        try:
            v, r, s = self.signing_primitive(_scheme_digest(order_hash, scheme), private_key)
        except SigningError:
            raise
        except Exception as err:
            raise SigningError(f"Signing primitive failed: {err}") from err

        signature = encode_signature(v, r, s, scheme)
        logger.debug(f"Signed order {order_hash.hex()} using {scheme.name}.")
        return SignedOrder.from_order(order, signature)


def recover_signer(signed_order: SignedOrder, schema: TypedDataSchema = ORDER_TYPES) -> str:
    """
    Recover the checksummed address that produced an order's signature.

    Raises:
        :class:`~zrxpy.exceptions.MalformedSignatureError`: If the signature
          cannot be decoded or no public key recovers from it.
        :class:`~zrxpy.exceptions.UnsupportedSchemeError`: If the type byte is unknown.
    """
    signature = decode_signature(signed_order.signature)
    digest = _scheme_digest(get_order_hash(signed_order.to_order(), schema), signature.scheme)
    try:
        public_key = keys.Signature(vrs=signature.vrs).recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as err:
        raise MalformedSignatureError(f"Cannot recover signer: {err}") from err

    return public_key.to_checksum_address()


def is_valid_signature(signed_order: SignedOrder, address: str | None = None) -> bool:
    """
    Check the signature recovers to ``address`` (defaults to the order's maker).
    """
    expected = to_checksum_address(address or signed_order.maker_address)
    return recover_signer(signed_order) == expected
