"""Shift-right-with-jam and leading-zero counting on fixed-width integers.

A "jammed" right shift keeps a sticky bit: if any nonzero bits are shifted
off, the least-significant bit of the result is forced to 1.  The floating
point routines use this to preserve inexactness through alignment shifts.
"""

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


def _check_unsigned(value: int, width: int, name: str = "a") -> None:
    if not 0 <= value < (1 << width):
        raise ValueError(f"{name} must be an unsigned {width}-bit integer, got {value!r}")


def _check_dist(dist: int) -> None:
    if dist <= 0:
        raise ValueError(f"shift distance must be positive, got {dist!r}")


def short_shift_right_jam64(a: int, dist: int) -> int:
    """Shift a 64-bit value right by 1..63 bits, jamming lost bits into bit 0."""
    _check_unsigned(a, 64)
    if not 1 <= dist <= 63:
        raise ValueError(f"dist must be in the range 1 to 63, got {dist!r}")
    return (a >> dist) | int((a & ((1 << dist) - 1)) != 0)


def shift_right_jam32(a: int, dist: int) -> int:
    """Shift a 32-bit value right by any nonzero distance, with jamming.

    For distances of 31 or more the result is 0 or 1 depending on whether
    ``a`` is zero.
    """
    _check_unsigned(a, 32)
    _check_dist(dist)
    if dist < 31:
        lost = (a << (-dist & 31)) & _MASK32
        return (a >> dist) | int(lost != 0)
    return int(a != 0)


def shift_right_jam64(a: int, dist: int) -> int:
    """Shift a 64-bit value right by any nonzero distance, with jamming.

    For distances of 63 or more the result is 0 or 1 depending on whether
    ``a`` is zero.
    """
    _check_unsigned(a, 64)
    _check_dist(dist)
    if dist < 63:
        lost = (a << (-dist & 63)) & _MASK64
        return (a >> dist) | int(lost != 0)
    return int(a != 0)


def _count_leading_zeros(a: int, width: int) -> int:
    _check_unsigned(a, width)
    return width - a.bit_length()


def count_leading_zeros8(a: int) -> int:
    """Number of leading zero bits in an 8-bit value; 8 for zero."""
    return _count_leading_zeros(a, 8)


def count_leading_zeros16(a: int) -> int:
    """Number of leading zero bits in a 16-bit value; 16 for zero."""
    return _count_leading_zeros(a, 16)


def count_leading_zeros32(a: int) -> int:
    """Number of leading zero bits in a 32-bit value; 32 for zero."""
    return _count_leading_zeros(a, 32)


def count_leading_zeros64(a: int) -> int:
    """Number of leading zero bits in a 64-bit value; 64 for zero."""
    return _count_leading_zeros(a, 64)