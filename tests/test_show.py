import pytest

from labkit.show import (
    describe_float,
    describe_int,
    fshow_main,
    ishow_main,
    parse_number,
)


def test_parse_float_one():
    assert parse_number("1.0", True) == 0x3F800000


def test_parse_hex_pattern():
    assert parse_number("0x7f800000", True) == 0x7F800000


def test_parse_negative_wraps_to_unsigned():
    assert parse_number("-2147483648", False) == 0x80000000


@pytest.mark.parametrize("bits", [0, 1, 0x00800000, 0x3F800000, 0x7FC00000, 0xFFFFFFFF])
def test_hex_round_trip(bits):
    assert parse_number(hex(bits), False) == bits


def test_decimal_and_hex_agree():
    assert parse_number("8388608", False) == parse_number("0x00800000", False)


def test_octal_prefix():
    assert parse_number("010", False) == parse_number("8", False)


def test_float_rejected_when_not_allowed():
    with pytest.raises(ValueError):
        parse_number("1.5", False)


def test_float_with_trailing_garbage_rejected():
    with pytest.raises(ValueError):
        parse_number("1.5q", True)


def test_out_of_range_integer_rejected():
    with pytest.raises(ValueError):
        parse_number("0x100000000", False)


def test_too_negative_integer_rejected():
    with pytest.raises(ValueError):
        parse_number("-2147483649", False)


def test_float_overflow_becomes_infinity():
    assert parse_number("1e100", True) == 0x7F800000


def test_describe_infinity():
    text = describe_float(0x7F800000)
    assert "+Infinity" in text
    assert "0x7f800000" in text


def test_describe_negative_infinity():
    assert "-Infinity" in describe_float(0x80000000 | 0x7F800000)


def test_describe_nan():
    assert "Not-A-Number" in describe_float(0x7FC00000)


def test_describe_one_is_normalized():
    text = describe_float(0x3F800000)
    assert "Normalized." in text
    assert "2^(0)" in text


def test_describe_denorm():
    text = describe_float(1)
    assert text.splitlines()[-1].startswith("Denormalized.")


def test_describe_int_fields():
    text = describe_int(0xFFFFFFFF)
    assert "Signed = -1" in text
    assert "Unsigned = 4294967295" in text


def test_fshow_without_args_prints_usage(capsys):
    assert fshow_main([]) == 0
    assert capsys.readouterr().out.startswith("Usage: fshow")


def test_fshow_invalid_stops(capsys):
    fshow_main(["1.5q", "1.0"])
    out = capsys.readouterr().out
    assert "Invalid 32-bit number: '1.5q'" in out
    assert "Floating point value" not in out


def test_fshow_prints_block(capsys):
    fshow_main(["0x3f800000"])
    out = capsys.readouterr().out
    assert out.startswith("\nFloating point value")


def test_ishow_continues_after_bad_value(capsys):
    ishow_main(["1.5", "0x10"])
    out = capsys.readouterr().out
    assert "Cannot convert '1.5' to 32-bit number" in out
    assert "Hex = 0x00000010" in out