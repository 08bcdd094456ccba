"""Reference answers for the data lab puzzles, using plain arithmetic."""

from __future__ import annotations

import math
import struct

TMIN = -(1 << 31)
TMAX = (1 << 31) - 1
_ODD_BITS = 0xAAAAAAAA


def _s32(value: int) -> int:
    return ((value + (1 << 31)) & 0xFFFFFFFF) - (1 << 31)


def _single(value: float) -> float:
    """Round a double to single precision, overflowing to infinity."""
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def u2f(bits: int) -> float:
    """Interpret a 32-bit pattern as a single-precision float."""
    return struct.unpack("<f", struct.pack("<I", bits & 0xFFFFFFFF))[0]


def f2u(value: float) -> int:
    """Return the single-precision bit pattern of a float."""
    return struct.unpack("<I", struct.pack("<f", _single(value)))[0]


def bit_xor(x: int, y: int) -> int:
    return _s32(x) ^ _s32(y)


def tmin() -> int:
    return TMIN


def is_tmax(x: int) -> int:
    return int(_s32(x) == TMAX)


def all_odd_bits(x: int) -> int:
    return int((x & _ODD_BITS) == _ODD_BITS)


def negate(x: int) -> int:
    return _s32(-_s32(x))


def is_ascii_digit(x: int) -> int:
    return int(0x30 <= _s32(x) <= 0x39)


def conditional(x: int, y: int, z: int) -> int:
    return _s32(y) if _s32(x) else _s32(z)


def is_less_or_equal(x: int, y: int) -> int:
    return int(_s32(x) <= _s32(y))


def logical_neg(x: int) -> int:
    return int(not _s32(x))


def how_many_bits(x: int) -> int:
    x = _s32(x)
    magnitude = -x - 1 if x < 0 else x
    return magnitude.bit_length() + 1


def float_scale2(uf: int) -> int:
    uf &= 0xFFFFFFFF
    f = u2f(uf)
    if math.isnan(f):
        return uf
    return f2u(2 * f)


def float_float2int(uf: int) -> int:
    f = u2f(uf)
    if math.isnan(f) or math.isinf(f):
        return TMIN
    value = math.trunc(f)
    if not TMIN <= value <= TMAX:
        return TMIN
    return value


def float_power2(x: int) -> int:
    x = _s32(x)
    if x == TMIN:
        return 0
    result = 1.0
    factor = 2.0
    if x < 0:
        x = -x
        factor = 0.5
    while x > 0:
        if x & 0x1:
            result = _single(result * factor)
        factor = _single(factor * factor)
        x >>= 1
    return f2u(result)