"""Comparisons and shifts on 128-bit unsigned integers held as two 64-bit words.

Every value is given as a high word ``a64`` and a low word ``a0``.  Results
that are 128-bit values come back as a ``(high, low)`` pair.
"""

from typing import NamedTuple

_MASK64 = (1 << 64) - 1
_MASK128 = (1 << 128) - 1


class UInt128(NamedTuple):
    """A 128-bit unsigned value split into its high and low 64-bit words."""

    v64: int
    v0: int


def _check_word(value: int, name: str) -> None:
    if not 0 <= value <= _MASK64:
        raise ValueError(f"{name} must be an unsigned 64-bit integer, got {value!r}")


def _join(a64: int, a0: int) -> int:
    _check_word(a64, "a64")
    _check_word(a0, "a0")
    return (a64 << 64) | a0


def _split(value: int) -> UInt128:
    value &= _MASK128
    return UInt128(value >> 64, value & _MASK64)


def _check_short_dist(dist: int) -> None:
    if not 1 <= dist <= 63:
        raise ValueError(f"dist must be in the range 1 to 63, got {dist!r}")


def _compare_operands(a64: int, a0: int, b64: int, b0: int) -> tuple[int, int]:
    a = _join(a64, a0)
    _check_word(b64, "b64")
    _check_word(b0, "b0")
    return a, (b64 << 64) | b0


def eq128(a64: int, a0: int, b64: int, b0: int) -> bool:
    """True if the 128-bit values ``a64:a0`` and ``b64:b0`` are equal."""
    a, b = _compare_operands(a64, a0, b64, b0)
    return a == b


def le128(a64: int, a0: int, b64: int, b0: int) -> bool:
    """True if ``a64:a0`` is less than or equal to ``b64:b0``."""
    a, b = _compare_operands(a64, a0, b64, b0)
    return a <= b


def lt128(a64: int, a0: int, b64: int, b0: int) -> bool:
    """True if ``a64:a0`` is strictly less than ``b64:b0``."""
    a, b = _compare_operands(a64, a0, b64, b0)
    return a < b


def short_shift_left128(a64: int, a0: int, dist: int) -> UInt128:
    """Shift ``a64:a0`` left by 1..63 bits; bits shifted out are lost."""
    a = _join(a64, a0)
    _check_short_dist(dist)
    return _split(a << dist)


def short_shift_right128(a64: int, a0: int, dist: int) -> UInt128:
    """Shift ``a64:a0`` right by 1..63 bits; bits shifted out are lost."""
    a = _join(a64, a0)
    _check_short_dist(dist)
    return _split(a >> dist)


def _jam(a: int, dist: int) -> UInt128:
    if dist < 128:
        lost = a & ((1 << dist) - 1)
        return _split((a >> dist) | int(lost != 0))
    return _split(int(a != 0))


def short_shift_right_jam128(a64: int, a0: int, dist: int) -> UInt128:
    """Shift ``a64:a0`` right by 1..63 bits, jamming lost bits into bit 0."""
    a = _join(a64, a0)
    _check_short_dist(dist)
    return _jam(a, dist)


def shift_right_jam128(a64: int, a0: int, dist: int) -> UInt128:
    """Shift ``a64:a0`` right by any nonzero distance, with jamming.

    For distances of 128 or more the result is 0 or 1 depending on whether
    the original value is zero.
    """
    a = _join(a64, a0)
    if dist <= 0:
        raise ValueError(f"shift distance must be positive, got {dist!r}")
    return _jam(a, dist)