import pytest

from rvsim.wide import (
    eq128,
    le128,
    lt128,
    short_shift_left128,
    short_shift_right128,
    short_shift_right_jam128,
    shift_right_jam128,
)

MASK64 = (1 << 64) - 1

SAMPLES = [
    (0, 0),
    (0, 1),
    (1, 0),
    (0, MASK64),
    (MASK64, MASK64),
    (0x0123456789ABCDEF, 0xFEDCBA9876543210),
    (0x8000000000000000, 0),
]


@pytest.mark.parametrize("a", SAMPLES)
def test_eq128_reflexive(a):
    assert eq128(*a, *a) is True
    assert le128(*a, *a) is True
    assert lt128(*a, *a) is False


@pytest.mark.parametrize("a", SAMPLES)
@pytest.mark.parametrize("b", SAMPLES)
def test_comparisons_are_consistent(a, b):
    assert le128(*a, *b) == (lt128(*a, *b) or eq128(*a, *b))
    assert lt128(*a, *b) == (not le128(*b, *a))
    assert eq128(*a, *b) == (a == b)


def test_high_word_dominates_ordering():
    assert lt128(0, MASK64, 1, 0) is True
    assert lt128(1, 0, 0, MASK64) is False
    assert le128(0, MASK64, 1, 0) is True


@pytest.mark.parametrize("dist", [1, 5, 33, 63])
def test_right_then_left_restores_when_low_bits_clear(dist):
    a64, a0 = 0xABCDEF0123456789, 0x1111111111111111 & ~((1 << dist) - 1) & MASK64
    shifted = short_shift_right128(a64, a0, dist)
    assert tuple(short_shift_left128(*shifted, dist)) == (a64, a0)


def test_short_shift_left_carries_across_words():
    assert tuple(short_shift_left128(0, 1 << 63, 1)) == (1, 0)


def test_short_shift_right_carries_across_words():
    assert tuple(short_shift_right128(1, 0, 1)) == (0, 1 << 63)


def test_shift_left_drops_high_bits():
    result = short_shift_left128(MASK64, MASK64, 63)
    assert result.v0 == (MASK64 << 63) & MASK64
    assert result.v64 == MASK64


@pytest.mark.parametrize("dist", [1, 16, 63])
def test_jam_matches_plain_shift_when_nothing_lost(dist):
    a64, a0 = 0x7654321076543210, 0
    assert short_shift_right_jam128(a64, a0, dist) == short_shift_right128(a64, a0, dist)


@pytest.mark.parametrize("dist", [1, 16, 63])
def test_jam_sets_sticky_bit_when_bits_lost(dist):
    a64, a0 = 0x7654321076543210, 1
    plain = short_shift_right128(a64, a0, dist)
    jammed = short_shift_right_jam128(a64, a0, dist)
    assert jammed.v64 == plain.v64
    assert jammed.v0 == plain.v0 | 1


def test_jam_keeps_lowest_bit_alive():
    assert tuple(short_shift_right_jam128(0, 1, 1)) == (0, 1)


@pytest.mark.parametrize("dist", [1, 2, 31, 62, 63])
@pytest.mark.parametrize("a", SAMPLES)
def test_long_jam_agrees_with_short_jam(a, dist):
    assert shift_right_jam128(*a, dist) == short_shift_right_jam128(*a, dist)


@pytest.mark.parametrize("dist", [128, 129, 1000])
def test_long_jam_collapses_to_sticky_bit(dist):
    assert tuple(shift_right_jam128(0, 0, dist)) == (0, 0)
    assert tuple(shift_right_jam128(1 << 63, 0, dist)) == (0, 1)
    assert tuple(shift_right_jam128(0, 1, dist)) == (0, 1)


def test_long_jam_by_64_moves_high_word_down():
    result = shift_right_jam128(0x1234, 0, 64)
    assert tuple(result) == (0, 0x1234)
    jammed = shift_right_jam128(0x1234, 5, 64)
    assert tuple(jammed) == (0, 0x1234 | 1)


@pytest.mark.parametrize("dist", [0, 64, -1])
def test_short_shifts_reject_bad_distance(dist):
    with pytest.raises(ValueError):
        short_shift_left128(1, 1, dist)
    with pytest.raises(ValueError):
        short_shift_right128(1, 1, dist)
    with pytest.raises(ValueError):
        short_shift_right_jam128(1, 1, dist)


def test_long_jam_rejects_zero_distance():
    with pytest.raises(ValueError):
        shift_right_jam128(1, 1, 0)


@pytest.mark.parametrize("bad", [-1, 1 << 64])
def test_words_must_be_64_bit(bad):
    with pytest.raises(ValueError):
        eq128(bad, 0, 0, 0)
    with pytest.raises(ValueError):
        lt128(0, 0, 0, bad)
    with pytest.raises(ValueError):
        short_shift_left128(0, bad, 1)
    with pytest.raises(ValueError):
        shift_right_jam128(bad, 0, 3)