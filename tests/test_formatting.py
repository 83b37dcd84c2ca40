import pytest

from txgraph.formatting import (
    flatten_display_label,
    from_nanos,
    is_bn_str,
    is_number_str,
    pretty_fees,
    pretty_number,
    to_hex_str,
    to_snake_case,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (1_000_000_000, "1"),
        (1_500_000_000, "1.5"),
        (1, "0.000000001"),
        ("2000000001", "2.000000001"),
        (-250_000_000, "-0.25"),
    ],
)
def test_from_nanos(value, expected):
    assert from_nanos(value) == expected


def test_pretty_fees():
    assert pretty_fees(None) is None
    assert pretty_fees(150) == "1.5%"


@pytest.mark.parametrize(
    "src, expected",
    [
        ("100", "100"),
        ("1000", "1_000"),
        ("-1234567", "-1_234_567"),
        ("1234.5678", "1_234.5678"),
        (1000000, "1_000_000"),
    ],
)
def test_pretty_number(src, expected):
    assert pretty_number(src) == expected


def test_number_predicates():
    assert is_bn_str("-42")
    assert not is_bn_str("4.2")
    assert is_number_str("4.2")
    assert is_number_str("-0.5")
    assert not is_number_str("0x10")
    assert not is_number_str(10)


def test_misc_helpers():
    assert to_hex_str(0xD53276DB) == "0xd53276db"
    assert to_snake_case("internalTransfer") == "internal_transfer"
    assert to_snake_case("payToV2") == "pay_to_v2"
    assert flatten_display_label("Alice<br/>wallet\nmain<br>jetton") == "Alice wallet main jetton"
