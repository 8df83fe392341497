"""Tests for the flex module."""

import pytest

from unifi_poller.flex import DecodeError, FlexBool, FlexInt, format_number


@pytest.mark.parametrize(
    ("value", "txt"),
    [
        (12, "12"),
        (12.5, "12.5"),
        (100.0, "100"),
        (0, "0"),
        (-3.25, "-3.25"),
        (1e16, "10000000000000000"),
        (1e-7, "0.0000001"),
        (0.1, "0.1"),
    ],
)
def test_number_text_form(value, txt) -> None:
    """Numbers get a positional, shortest text form."""
    flex = FlexInt.decode(value)
    assert flex.val == float(value)
    assert flex.txt == txt


@pytest.mark.parametrize("value", [0.1, 1 / 3, 123456789.123, 2**53, 6.02e23, 5e-324])
def test_text_form_round_trips(value) -> None:
    """Parsing the derived text gives back the original number."""
    assert float(format_number(value)) == value


def test_numeric_string() -> None:
    flex = FlexInt.decode("42.5")
    assert flex.val == 42.5
    assert flex.txt == "42.5"


def test_non_numeric_string_is_not_an_error() -> None:
    """Text that isn't a number keeps its text and a zero value."""
    flex = FlexInt.decode("eth0")
    assert flex.val == 0.0
    assert flex.txt == "eth0"


@pytest.mark.parametrize("text", ["\u0661\u0662", "\uff11\uff12", "1_000", " 12"])
def test_non_ascii_or_padded_digits_are_not_numeric(text) -> None:
    flex = FlexInt.decode(text)
    assert flex.val == 0.0
    assert flex.txt == text


def test_empty_array_is_zero() -> None:
    assert FlexInt.decode([]) == FlexInt(val=0.0, txt="")


@pytest.mark.parametrize(
    ("value", "kind"),
    [({}, "object"), ([1], "array"), (True, "boolean"), (None, "null")],
)
def test_rejected_shapes(value, kind) -> None:
    with pytest.raises(DecodeError) as info:
        FlexInt.decode(value, "uptime")
    assert info.value.field == "uptime"
    assert info.value.kind == kind
    assert "uptime" in str(info.value)


@pytest.mark.parametrize(
    ("value", "val", "txt"),
    [
        (True, True, "true"),
        (False, False, "false"),
        ("true", True, "true"),
        ("Enabled", True, "Enabled"),
        ("0", False, "0"),
        (1, True, "1"),
        (0, False, "0"),
    ],
)
def test_flex_bool(value, val, txt) -> None:
    flag = FlexBool.decode(value)
    assert flag.val is val
    assert flag.txt == txt


def test_flex_bool_rejects_object() -> None:
    with pytest.raises(DecodeError):
        FlexBool.decode({"up": True}, "wan1.up")
