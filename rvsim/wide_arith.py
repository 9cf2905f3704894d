"""Addition, subtraction and multiplication on 128-bit unsigned integers.

A 128-bit operand is given as a high word ``a64`` and a low word ``a0``.
Results are returned as a ``UInt128`` pair of (high, low) 64-bit words.
Arithmetic wraps modulo 2**128 wherever the result would not fit.
"""

from rvsim.wide import UInt128

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1
_MASK128 = (1 << 128) - 1


def _check(value: int, mask: int, name: str) -> int:
    if not 0 <= value <= mask:
        width = mask.bit_length()
        raise ValueError(f"{name} must be an unsigned {width}-bit integer, got {value!r}")
    return value


def _join(high: int, low: int, high_name: str, low_name: str) -> int:
    _check(high, _MASK64, high_name)
    _check(low, _MASK64, low_name)
    return (high << 64) | low


def _split(value: int) -> UInt128:
    value &= _MASK128
    return UInt128(value >> 64, value & _MASK64)


def add128(a64: int, a0: int, b64: int, b0: int) -> UInt128:
    """Sum of ``a64:a0`` and ``b64:b0`` modulo 2**128; any carry out is lost."""
    a = _join(a64, a0, "a64", "a0")
    b = _join(b64, b0, "b64", "b0")
    return _split(a + b)


def sub128(a64: int, a0: int, b64: int, b0: int) -> UInt128:
    """Difference ``a64:a0 - b64:b0`` modulo 2**128; any borrow out is lost."""
    a = _join(a64, a0, "a64", "a0")
    b = _join(b64, b0, "b64", "b0")
    return _split(a - b)


def mul64_to_128(a: int, b: int) -> UInt128:
    """Full 128-bit product of two 64-bit values."""
    _check(a, _MASK64, "a")
    _check(b, _MASK64, "b")
    return _split(a * b)


def mul64_by_shifted32_to_128(a: int, b: int) -> UInt128:
    """The 128-bit product of a 64-bit ``a``, a 32-bit ``b`` and 2**32."""
    _check(a, _MASK64, "a")
    _check(b, _MASK32, "b")
    return _split((a * b) << 32)


def mul128_by32(a64: int, a0: int, b: int) -> UInt128:
    """Product of ``a64:a0`` and a 32-bit ``b`` modulo 2**128."""
    a = _join(a64, a0, "a64", "a0")
    _check(b, _MASK32, "b")
    return _split(a * b)