import pytest
from eth_keys import keys
from eth_utils import keccak

from zrxpy.eip712.order import ORDER_TYPE, ORDER_TYPES
from zrxpy.exceptions import (
    MalformedSignatureError,
    SchemaError,
    SigningError,
    UnsupportedSchemeError,
)
from zrxpy.model.order import SignedOrder
from zrxpy.model.signature import SignatureScheme
from zrxpy.sign.codec import decode_scheme, encode_signature
from zrxpy.sign.signer import (
    ETH_SIGN_PREFIX,
    OrderSigner,
    ecdsa_sign,
    get_order_hash,
    is_valid_signature,
    recover_signer,
    to_private_key,
)


@pytest.fixture
def signer():
    return OrderSigner()


def test_sign_twice_recovers_same_signer(signer, order, private_key, address):
    first = signer.sign(order, private_key)
    second = signer.sign(order, private_key)

    assert recover_signer(first) == address
    assert recover_signer(second) == address
    assert is_valid_signature(first)
    assert is_valid_signature(second, address=address)


def test_sign_keeps_order_fields(signer, order, private_key):
    signed = signer.sign(order, private_key)
    assert isinstance(signed, SignedOrder)
    assert signed.to_order() == order
    assert signed.maker_asset_amount == 1000
    assert len(bytes.fromhex(signed.signature[2:])) == 66
    assert decode_scheme(signed.signature) is SignatureScheme.EIP712


def test_sign_eth_sign(signer, order, private_key, address):
    signed = signer.sign(order, private_key, scheme=SignatureScheme.ETH_SIGN)
    assert signed.signature.endswith("03")
    assert recover_signer(signed) == address

    # The prefixed digest is what was signed, not the bare order hash.
    prefixed = keccak(ETH_SIGN_PREFIX + get_order_hash(order))
    expected = keys.PrivateKey(bytes.fromhex(private_key[2:])).public_key
    signature = keys.Signature(vrs=(int(signed.signature[2:4], 16) - 27, *_rs(signed)))
    assert signature.recover_public_key_from_msg_hash(prefixed) == expected


def _rs(signed: SignedOrder) -> tuple[int, int]:
    raw = bytes.fromhex(signed.signature[2:])
    return int.from_bytes(raw[1:33], "big"), int.from_bytes(raw[33:65], "big")


def test_sign_missing_order_type(order, private_key, mocker):
    primitive = mocker.Mock(return_value=(0, 1, 1))
    schema = {k: v for k, v in ORDER_TYPES.items() if k != ORDER_TYPE}
    signer = OrderSigner(signing_primitive=primitive, schema=schema)

    with pytest.raises(SchemaError):
        signer.sign(order, private_key)

    primitive.assert_not_called()


def test_sign_uses_primitive(order, mocker):
    r, s = 3, 4
    primitive = mocker.Mock(return_value=(1, r, s))
    signer = OrderSigner(signing_primitive=primitive)

    signed = signer.sign(order, "not-a-key")

    primitive.assert_called_once_with(get_order_hash(order), "not-a-key")
    assert signed.signature == encode_signature(1, r, s)


def test_sign_primitive_failure(order, mocker):
    primitive = mocker.Mock(side_effect=RuntimeError("hardware wallet unplugged"))
    signer = OrderSigner(signing_primitive=primitive)

    with pytest.raises(SigningError, match="hardware wallet unplugged"):
        signer.sign(order, b"\x01" * 32)


@pytest.mark.parametrize("key", ["0x1234", "zz" * 32, b"\x01" * 31])
def test_sign_malformed_key(signer, order, key):
    with pytest.raises(SigningError):
        signer.sign(order, key)


def test_ecdsa_sign(private_key, address):
    digest = keccak(text="digest")
    v, r, s = ecdsa_sign(digest, private_key)
    assert v in (0, 1)
    public_key = keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(digest)
    assert public_key.to_checksum_address() == address


def test_to_private_key(private_key, address):
    key = to_private_key(private_key)
    assert to_private_key(key) is key
    assert key.public_key.to_checksum_address() == address


def test_tampered_order_does_not_validate(signer, order, private_key):
    signed = signer.sign(order, private_key)
    tampered = signed.model_copy(update={"taker_asset_amount": 1})
    assert not is_valid_signature(tampered)


def test_is_valid_signature_other_address(signer, order, private_key):
    signed = signer.sign(order, private_key)
    assert not is_valid_signature(signed, address="0x" + "11" * 20)


def test_recover_signer_unsupported_scheme(signer, order, private_key):
    signed = signer.sign(order, private_key)
    bad = signed.model_copy(update={"signature": signed.signature[:-2] + "99"})
    with pytest.raises(UnsupportedSchemeError):
        recover_signer(bad)


def test_recover_signer_malformed(signer, order, private_key):
    signed = signer.sign(order, private_key)
    short = signed.model_copy(update={"signature": signed.signature[:-4] + "02"})
    with pytest.raises(MalformedSignatureError):
        recover_signer(short)
