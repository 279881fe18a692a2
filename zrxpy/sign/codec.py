from zrxpy.exceptions import MalformedSignatureError, UnsupportedSchemeError
from zrxpy.model.signature import SignatureData, SignatureScheme
from zrxpy.utils.hex import hex_to_bytes, to_hex

SIGNATURE_SIZE = 66
V_INDEX = 0
R_RANGE = slice(1, 33)
S_RANGE = slice(33, 65)
MIN_HEADER = 27
MAX_HEADER = 34


def _to_word(value: int | bytes, label: str) -> bytes:
    if isinstance(value, int):
        if value < 0 or value >= 2**256:
            raise MalformedSignatureError(f"{label} does not fit in 32 bytes.")

        return value.to_bytes(32, "big")

    if len(value) != 32:
        raise MalformedSignatureError(f"{label} must be 32 bytes, got {len(value)}.")

    return bytes(value)


def encode_signature(
    v: int, r: int | bytes, s: int | bytes, scheme: SignatureScheme = SignatureScheme.EIP712
) -> str:
    """
    Pack a signature as ``0x`` + ``[v + 27] ‖ r ‖ s ‖ [scheme]`` in lower-case hex.

    Args:
        v (int): The recovery id, ``0`` or ``1``.
        r (int | bytes): The 32-byte ``r`` value.
        s (int | bytes): The 32-byte ``s`` value.
        scheme (:class:`~zrxpy.model.signature.SignatureScheme`): The signature-type tag.

    Returns:
        str
    """
    if v not in (0, 1):
        raise MalformedSignatureError(f"Recovery id must be 0 or 1, got {v}.")

    try:
        tag = SignatureScheme(scheme)
    except ValueError:
        raise UnsupportedSchemeError(int(scheme))

    payload = bytes([v + 27]) + _to_word(r, "r") + _to_word(s, "s") + bytes([tag])
    return to_hex(payload, prefix=True)


def _signature_bytes(signature_hex: str | bytes) -> bytes:
    try:
        return hex_to_bytes(signature_hex)
    except ValueError as err:
        raise MalformedSignatureError(f"Signature is not valid hex: {err}") from err


def decode_scheme(signature_hex: str | bytes) -> SignatureScheme:
    """
    Read the signature type from the last byte of a signature.

    Raises:
        :class:`~zrxpy.exceptions.UnsupportedSchemeError`: When the tag is unknown.
        :class:`~zrxpy.exceptions.MalformedSignatureError`: When there is no tag at all.
    """
    signature = _signature_bytes(signature_hex)
    if not signature:
        raise MalformedSignatureError("Empty signature.")

    tag = signature[-1]
    try:
        return SignatureScheme(tag)
    except ValueError:
        raise UnsupportedSchemeError(tag)


def decode_signature(signature_hex: str | bytes) -> SignatureData:
    """
    Split a full signature into its header byte, ``r``, ``s``, and scheme.
    """
    signature = _signature_bytes(signature_hex)
    if len(signature) != SIGNATURE_SIZE:
        raise MalformedSignatureError(
            f"Signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}."
        )

    scheme = decode_scheme(signature)
    header = signature[V_INDEX]
    if header < MIN_HEADER or header > MAX_HEADER:
        raise MalformedSignatureError(f"Header byte out of range {header}.")

    return SignatureData(v=header, r=signature[R_RANGE], s=signature[S_RANGE], scheme=scheme)
