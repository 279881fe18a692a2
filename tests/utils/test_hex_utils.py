import pytest

from zrxpy.utils.hex import clear_prefix, hex_to_bytes, prefixed, to_hex


@pytest.mark.parametrize("value", ["0xabcd", "0Xabcd", "abcd"])
def test_clear_prefix(value):
    assert clear_prefix(value) == "abcd"


def test_prefixed():
    assert prefixed("abcd") == "0xabcd"
    assert prefixed("0xabcd") == "0xabcd"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("0x", b""),
        ("0x0102", b"\x01\x02"),
        ("0102", b"\x01\x02"),
        ("0x102", b"\x01\x02"),
        (b"\x01", b"\x01"),
    ],
)
def test_hex_to_bytes(value, expected):
    assert hex_to_bytes(value) == expected


def test_hex_to_bytes_invalid():
    with pytest.raises(ValueError):
        hex_to_bytes("0xzz")


def test_to_hex():
    assert to_hex(b"\x01\xff") == "01ff"
    assert to_hex(b"\x01\xff", prefix=True) == "0x01ff"
    assert to_hex(255, prefix=True) == "0xff"
    assert to_hex("0xabc") == "abc"

    with pytest.raises(TypeError):
        to_hex(1.5)
