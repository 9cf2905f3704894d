"""IEEE 754 single-precision addition and subtraction on raw bit patterns.

Operands and results are 32-bit unsigned integers holding the binary32
encoding.  Every operation reports the exception flags it raised, using the
same bit positions as the RISC-V ``fflags`` field.
"""

import enum
import struct
from dataclasses import dataclass

_MASK32 = 0xFFFFFFFF
_SIGN_BIT = 0x80000000
_EXP_MASK = 0xFF
_FRAC_MASK = 0x7FFFFF
_QUIET_BIT = 0x400000
_HIDDEN_BIT = 0x800000
_MAX_FINITE = 0x7F7FFFFF
_INFINITY = 0x7F800000
DEFAULT_NAN = 0x7FC00000

# Exponent of the least significant bit of a subnormal significand.
_MIN_SCALE = -149


class RoundingMode(enum.IntEnum):
    """Rounding directions understood by the arithmetic routines."""

    NEAR_EVEN = 0
    MIN_MAG = 1
    MIN = 2
    MAX = 3
    NEAR_MAX_MAG = 4
    ODD = 6


class ExceptionFlag(enum.IntFlag):
    """IEEE exception flags, laid out like the RISC-V ``fflags`` bits."""

    INEXACT = 0x01
    UNDERFLOW = 0x02
    OVERFLOW = 0x04
    INFINITE = 0x08
    INVALID = 0x10


@dataclass(frozen=True)
class F32Result:
    """The bit pattern produced by an operation and the flags it raised."""

    bits: int
    flags: ExceptionFlag

    @property
    def value(self) -> float:
        """The result as a Python float."""
        return struct.unpack("<f", struct.pack("<I", self.bits))[0]


_FRM_MODES = {
    0: RoundingMode.NEAR_EVEN,
    1: RoundingMode.MIN_MAG,
    2: RoundingMode.MIN,
    3: RoundingMode.MAX,
    4: RoundingMode.NEAR_MAX_MAG,
}


def rounding_mode_from_frm(frm: int) -> RoundingMode:
    """Map a RISC-V ``frm`` field to a rounding mode.

    Reserved and dynamic encodings fall back to round-to-nearest-even.
    """
    return _FRM_MODES.get(frm, RoundingMode.NEAR_EVEN)


def _check_bits(value: int, name: str) -> None:
    if not 0 <= value <= _MASK32:
        raise ValueError(f"{name} must be a 32-bit pattern, got {value!r}")


def _fields(bits: int) -> tuple[int, int, int]:
    return bits >> 31, (bits >> 23) & _EXP_MASK, bits & _FRAC_MASK


def _is_nan(bits: int) -> bool:
    _, exp, frac = _fields(bits)
    return exp == _EXP_MASK and frac != 0


def _is_signaling_nan(bits: int) -> bool:
    return _is_nan(bits) and not bits & _QUIET_BIT


def _magnitude(exp: int, frac: int) -> tuple[int, int]:
    """Return (significand, scale) so that the value is significand * 2**scale."""
    if exp == 0:
        return frac, _MIN_SCALE
    return frac | _HIDDEN_BIT, exp - 150


def _rounds_up(mode: RoundingMode, sign: bool, sig: int, rem: int, half: int) -> bool:
    if mode is RoundingMode.NEAR_EVEN:
        return rem > half or (rem == half and bool(sig & 1))
    if mode is RoundingMode.NEAR_MAX_MAG:
        return rem >= half
    if mode is RoundingMode.MIN:
        return sign and rem != 0
    if mode is RoundingMode.MAX:
        return not sign and rem != 0
    return False


def _overflow(sign: bool, mode: RoundingMode) -> F32Result:
    to_infinity = (
        mode in (RoundingMode.NEAR_EVEN, RoundingMode.NEAR_MAX_MAG)
        or (mode is RoundingMode.MIN and sign)
        or (mode is RoundingMode.MAX and not sign)
    )
    magnitude = _INFINITY if to_infinity else _MAX_FINITE
    return F32Result(
        (_SIGN_BIT if sign else 0) | magnitude,
        ExceptionFlag.OVERFLOW | ExceptionFlag.INEXACT,
    )


def _round_pack(sign: bool, mag: int, scale: int, mode: RoundingMode) -> F32Result:
    """Round ``(-1)**sign * mag * 2**scale`` to binary32."""
    width = mag.bit_length()
    top = scale + width - 1
    shift = width - 24 if top >= -126 else _MIN_SCALE - scale
    inexact = False
    if shift <= 0:
        sig = mag << -shift
    else:
        sig = mag >> shift
        rem = mag & ((1 << shift) - 1)
        half = 1 << (shift - 1)
        inexact = rem != 0
        if _rounds_up(mode, sign, sig, rem, half):
            sig += 1
        elif mode is RoundingMode.ODD and inexact:
            sig |= 1
    exponent = scale + shift
    if sig >> 24:
        sig >>= 1
        exponent += 1

    flags = ExceptionFlag(0)
    tiny = sig < _HIDDEN_BIT
    if inexact:
        flags |= ExceptionFlag.INEXACT
        if tiny:
            flags |= ExceptionFlag.UNDERFLOW
    sign_bits = _SIGN_BIT if sign else 0
    if tiny:
        return F32Result(sign_bits | sig, flags)
    biased = exponent + 150
    if biased >= _EXP_MASK:
        return _overflow(sign, mode)
    return F32Result(sign_bits | (biased << 23) | (sig & _FRAC_MASK), flags)


def _add(a: int, b: int, mode: RoundingMode) -> F32Result:
    if _is_nan(a) or _is_nan(b):
        invalid = _is_signaling_nan(a) or _is_signaling_nan(b)
        return F32Result(DEFAULT_NAN, ExceptionFlag.INVALID if invalid else ExceptionFlag(0))

    sign_a, exp_a, frac_a = _fields(a)
    sign_b, exp_b, frac_b = _fields(b)
    if exp_a == _EXP_MASK:
        if exp_b == _EXP_MASK and sign_a != sign_b:
            return F32Result(DEFAULT_NAN, ExceptionFlag.INVALID)
        return F32Result(a, ExceptionFlag(0))
    if exp_b == _EXP_MASK:
        return F32Result(b, ExceptionFlag(0))

    sig_a, scale_a = _magnitude(exp_a, frac_a)
    sig_b, scale_b = _magnitude(exp_b, frac_b)
    scale = min(scale_a, scale_b)
    term_a = sig_a << (scale_a - scale)
    term_b = sig_b << (scale_b - scale)
    total = (-term_a if sign_a else term_a) + (-term_b if sign_b else term_b)

    if total == 0:
        if sign_a == sign_b:
            negative = bool(sign_a)
        else:
            negative = mode is RoundingMode.MIN
        return F32Result(_SIGN_BIT if negative else 0, ExceptionFlag(0))
    return _round_pack(total < 0, abs(total), scale, mode)


def f32_add(a: int, b: int, rounding_mode: RoundingMode = RoundingMode.NEAR_EVEN) -> F32Result:
    """Add two binary32 bit patterns."""
    _check_bits(a, "a")
    _check_bits(b, "b")
    return _add(a, b, RoundingMode(rounding_mode))


def f32_sub(a: int, b: int, rounding_mode: RoundingMode = RoundingMode.NEAR_EVEN) -> F32Result:
    """Subtract the binary32 bit pattern ``b`` from ``a``."""
    _check_bits(a, "a")
    _check_bits(b, "b")
    return _add(a, b ^ _SIGN_BIT, RoundingMode(rounding_mode))