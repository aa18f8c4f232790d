"""
Tests for hex and quantity helpers.
"""
import pytest

from qtum_sdk.utils import ensure_hex0x, strip_hex0x, to_int, to_quantity


def test_hex_prefix():
    assert ensure_hex0x("abcd") == "0xabcd"
    assert ensure_hex0x("0xabcd") == "0xabcd"
    assert strip_hex0x("0xabcd") == "abcd"
    assert strip_hex0x("abcd") == "abcd"


@pytest.mark.parametrize("value, expected", [
    (None, None),
    (42, 42),
    ("0x2a", 42),
    ("0X2A", 42),
    ("42", 42),
])
def test_to_int(value, expected):
    assert to_int(value) == expected


def test_to_int_rejects_other_types():
    with pytest.raises(ValueError):
        to_int(4.2)


def test_to_quantity():
    assert to_quantity(0) == "0x0"
    assert to_quantity(100) == "0x64"
