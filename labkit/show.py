"""Show 32-bit values as single-precision floats or as integers."""

from __future__ import annotations

import math
import re
import struct
import sys
from collections.abc import Sequence

FLOAT_SIZE = 32
FRAC_SIZE = 23
EXP_SIZE = 8
BIAS = (1 << (EXP_SIZE - 1)) - 1
FRAC_MASK = (1 << FRAC_SIZE) - 1
EXP_MASK = (1 << EXP_SIZE) - 1

_LLONG_MAX = (1 << 63) - 1
_LLONG_MIN = -(1 << 63)

_INT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)"
)


def _looks_like_float(text: str) -> bool:
    is_hex = False
    is_float = False
    for ch in text:
        if ch in "xX":
            is_hex = True
        elif ch in "eE":
            if not is_hex:
                is_float = True
        elif ch == ".":
            is_float = True
    return is_float


def _leading_integer(text: str) -> int:
    """Value of the longest integer prefix, with C base detection; 0 if none."""
    match = _INT_PREFIX.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    if sign == "-":
        value = -value
    return max(_LLONG_MIN, min(_LLONG_MAX, value))


def _parse_float(text: str) -> float:
    if text != text.rstrip() or "_" in text:
        raise ValueError(f"not a floating point number: {text!r}")
    body = text.lstrip()
    try:
        if "x" in body.lower():
            return float.fromhex(body)
        return float(body)
    except OverflowError:
        return -math.inf if body.startswith("-") else math.inf


def _single_bits(value: float) -> int:
    try:
        return struct.unpack("<I", struct.pack("<f", value))[0]
    except OverflowError:
        return 0xFF800000 if value < 0 else 0x7F800000


def parse_number(text: str, allow_float: bool = True) -> int:
    """Parse a decimal, hex, octal or (optionally) floating point value.

    Returns the 32-bit pattern as an unsigned int; raises ValueError when the
    text does not describe a 32-bit value.
    """
    if _looks_like_float(text):
        if not allow_float:
            raise ValueError(f"floating point value not allowed: {text!r}")
        return _single_bits(_parse_float(text))
    value = _leading_integer(text)
    if not -(1 << 31) <= value < (1 << 32):
        raise ValueError(f"value does not fit in 32 bits: {text!r}")
    return value & 0xFFFFFFFF


def _format_g10(value: float, sign: int) -> str:
    if math.isnan(value):
        return "-nan" if sign else "nan"
    return "%.10g" % value


def describe_float(bits: int) -> str:
    """Describe the fields of a single-precision bit pattern."""
    bits &= 0xFFFFFFFF
    value = struct.unpack("<f", struct.pack("<I", bits))[0]
    exp = (bits >> FRAC_SIZE) & EXP_MASK
    frac = bits & FRAC_MASK
    sign = (bits >> (FLOAT_SIZE - 1)) & 0x1
    sign_char = "-" if sign else "+"

    lines = [
        f"Floating point value {_format_g10(value, sign)}",
        f"Bit Representation 0x{bits:08x}, sign = {sign:x}, "
        f"exponent = 0x{exp:02x}, fraction = 0x{frac:06x}",
    ]
    if exp == EXP_MASK:
        lines.append(f"{sign_char}Infinity" if frac == 0 else "Not-A-Number")
    else:
        denorm = exp == 0
        unbiased = 1 - BIAS if denorm else exp - BIAS
        mantissa = frac if denorm else frac + (1 << FRAC_SIZE)
        fraction = mantissa / (1 << FRAC_SIZE)
        kind = "Denormalized" if denorm else "Normalized"
        lines.append(f"{kind}.  {sign_char}{fraction:.10f} X 2^({unbiased})")
    return "\n".join(lines) + "\n"


def describe_int(bits: int) -> str:
    """Describe a 32-bit pattern in hex, signed and unsigned decimal."""
    bits &= 0xFFFFFFFF
    signed = bits - (1 << 32) if bits & 0x80000000 else bits
    return f"Hex = 0x{bits:08x},\tSigned = {signed},\tUnsigned = {bits}"


def _usage(prog: str, detail: str) -> None:
    print(f"Usage: {prog} val1 val2 ...")
    print(detail)


def fshow_main(argv: Sequence[str] | None = None) -> int:
    """Print the floating point structure of each argument."""
    args = list(sys.argv[1:] if argv is None else argv)
    detail = "Values may be given as hex patterns or as floating point numbers"
    if not args:
        _usage("fshow", detail)
        return 0
    for text in args:
        try:
            bits = parse_number(text, True)
        except ValueError:
            print(f"Invalid 32-bit number: '{text}'")
            _usage("fshow", detail)
            return 0
        print()
        print(describe_float(bits), end="")
    return 0


def ishow_main(argv: Sequence[str] | None = None) -> int:
    """Print each argument as hex, signed and unsigned values."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _usage("ishow", "Values may be given in hex or decimal")
        return 0
    for text in args:
        try:
            bits = parse_number(text, False)
        except ValueError:
            print(f"Cannot convert '{text}' to 32-bit number")
            continue
        print(describe_int(bits))
    return 0