def clear_prefix(hex_str: str) -> str:
    return hex_str[2:] if hex_str.startswith(("0x", "0X")) else hex_str


def prefixed(hex_str: str) -> str:
    return hex_str if hex_str.startswith("0x") else f"0x{hex_str}"


def hex_to_bytes(value: str | bytes) -> bytes:
    """
    Convert a transport hex string (with or without the ``0x`` prefix)
    to raw bytes. Bytes are returned as-is.

    Raises:
        ValueError: If the string is not valid hex.
    """
    if isinstance(value, bytes):
        return value

    hex_str = clear_prefix(value)
    if len(hex_str) % 2 != 0:
        # Odd-length hex; left-pad so the first nibble is kept.
        hex_str = f"0{hex_str}"

    return bytes.fromhex(hex_str)


def to_hex(val, prefix: bool = False) -> str:
    if isinstance(val, str):
        return _str_to_hex(val, prefix=prefix)

    elif isinstance(val, int):
        return _str_to_hex(hex(val), prefix=prefix)

    elif isinstance(val, bytes):
        return _str_to_hex(val.hex(), prefix=prefix)

    raise TypeError(f"{type(val)} cannot be converted to hex.")


def _str_to_hex(val: str, prefix: bool = False) -> str:
    if prefix:
        return prefixed(val)

    return clear_prefix(val)
