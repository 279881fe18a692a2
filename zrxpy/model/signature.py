from enum import IntEnum
from typing import NamedTuple


class SignatureScheme(IntEnum):
    """
    The trailing signature-type byte telling the exchange how to validate
    a signature.
    """

    EIP712 = 2
    ETH_SIGN = 3


class SignatureData(NamedTuple):
    v: int
    """
    The recovery id plus 27, as carried in the signature header byte.
    """

    r: bytes
    s: bytes
    scheme: SignatureScheme

    @property
    def vrs(self) -> tuple[int, int, int]:
        """
        ``(v, r, s)`` in the form secp256k1 recovery expects: ``v`` in ``{0, 1}``.
        """
        # Compressed-key headers (31..34) share recovery ids with 27..30.
        return (self.v - 27) % 4, int.from_bytes(self.r, "big"), int.from_bytes(self.s, "big")
