import math
import struct

import pytest

from rvsim.softfloat import (
    ExceptionFlag,
    F32Result,
    RoundingMode,
    f32_add,
    f32_sub,
    rounding_mode_from_frm,
)

SIGN = 0x80000000
MAX_FINITE = 0x7F7FFFFF


def bits(x: float) -> int:
    return struct.unpack("<I", struct.pack("<f", x))[0]


def as_f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


@pytest.mark.parametrize(
    "frm, mode",
    [
        (0, RoundingMode.NEAR_EVEN),
        (1, RoundingMode.MIN_MAG),
        (2, RoundingMode.MIN),
        (3, RoundingMode.MAX),
        (4, RoundingMode.NEAR_MAX_MAG),
        (5, RoundingMode.NEAR_EVEN),
        (7, RoundingMode.NEAR_EVEN),
    ],
)
def test_rounding_mode_from_frm(frm, mode):
    assert rounding_mode_from_frm(frm) is mode


def test_exact_addition_has_no_flags():
    result = f32_add(bits(1.0), bits(2.0))
    assert result.bits == bits(3.0)
    assert result.flags == ExceptionFlag(0)


@pytest.mark.parametrize(
    "x, y",
    [(1.5, 2.25), (-7.0, 0.125), (1e10, -3.5), (0.1, 0.2), (123.456, -0.001)],
)
def test_matches_host_rounding(x, y):
    a, b = bits(x), bits(y)
    fa, fb = as_f32(x), as_f32(y)
    assert f32_add(a, b).value == as_f32(fa + fb)
    assert f32_sub(a, b).value == as_f32(fa - fb)


@pytest.mark.parametrize("x, y", [(1.5, 2.25), (-7.0, 0.125), (3e-39, 1e-3)])
def test_addition_commutes(x, y):
    assert f32_add(bits(x), bits(y)) == f32_add(bits(y), bits(x))


@pytest.mark.parametrize("x, y", [(5.0, 3.0), (-1.25, 8.0), (0.0, -0.0)])
def test_sub_is_add_of_negation(x, y):
    a, b = bits(x), bits(y)
    assert f32_sub(a, b) == f32_add(a, b ^ SIGN)


def test_exact_cancellation_sign_depends_on_mode():
    a = bits(2.5)
    assert f32_sub(a, a).bits == 0
    assert f32_sub(a, a, RoundingMode.MIN).bits == SIGN
    assert f32_add(SIGN, SIGN).bits == SIGN


def test_inexact_rounding_directions():
    one = bits(1.0)
    tiny = bits(2.0**-30)
    nearest = f32_add(one, tiny)
    assert nearest.bits == one
    assert nearest.flags == ExceptionFlag.INEXACT
    assert f32_add(one, tiny, RoundingMode.MAX).bits == one + 1
    assert f32_add(one, tiny, RoundingMode.MIN).bits == one
    assert f32_add(one, tiny, RoundingMode.MIN_MAG).bits == one


def test_overflow_to_infinity_and_to_max():
    result = f32_add(MAX_FINITE, MAX_FINITE)
    assert result.bits == bits(math.inf)
    assert result.flags == ExceptionFlag.OVERFLOW | ExceptionFlag.INEXACT
    assert f32_add(MAX_FINITE, MAX_FINITE, RoundingMode.MIN_MAG).bits == MAX_FINITE
    negative = f32_add(MAX_FINITE | SIGN, MAX_FINITE | SIGN, RoundingMode.MAX)
    assert negative.bits == MAX_FINITE | SIGN


def test_infinity_minus_infinity_is_invalid():
    inf = bits(math.inf)
    result = f32_sub(inf, inf)
    assert math.isnan(result.value)
    assert result.flags == ExceptionFlag.INVALID


def test_infinity_plus_finite_is_infinity():
    inf = bits(-math.inf)
    result = f32_add(inf, bits(42.0))
    assert result.bits == inf
    assert result.flags == ExceptionFlag(0)


def test_signaling_nan_raises_invalid_quiet_does_not():
    quiet = bits(math.nan) | 0x400000
    signaling = (quiet & ~0x400000) | 1
    assert f32_add(signaling, bits(1.0)).flags == ExceptionFlag.INVALID
    quiet_result = f32_add(quiet, bits(1.0))
    assert quiet_result.flags == ExceptionFlag(0)
    assert math.isnan(quiet_result.value)


def test_subnormal_sum_is_exact():
    result = f32_add(1, 1)
    assert result.bits == 2
    assert result.flags == ExceptionFlag(0)


def test_result_value_property():
    assert F32Result(bits(0.5), ExceptionFlag(0)).value == 0.5


@pytest.mark.parametrize("a, b", [(-1, 0), (0, 1 << 32)])
def test_rejects_out_of_range_operands(a, b):
    with pytest.raises(ValueError):
        f32_add(a, b)