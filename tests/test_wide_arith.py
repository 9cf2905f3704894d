import pytest

from rvsim.wide import short_shift_left128
from rvsim.wide_arith import (
    add128,
    mul128_by32,
    mul64_by_shifted32_to_128,
    mul64_to_128,
    sub128,
)

MAX64 = 0xFFFFFFFFFFFFFFFF
MAX32 = 0xFFFFFFFF

SAMPLES = [
    (0, 0),
    (0, 1),
    (1, 0),
    (0x0123456789ABCDEF, 0xFEDCBA9876543210),
    (MAX64, MAX64),
    (0x8000000000000000, 0x7FFFFFFFFFFFFFFF),
]


def test_add_carries_from_low_word():
    assert add128(0, MAX64, 0, 1) == (1, 0)


def test_add_wraps_at_128_bits():
    assert add128(MAX64, MAX64, 0, 1) == (0, 0)


def test_sub_borrows_into_high_word():
    assert sub128(1, 0, 0, 1) == (0, MAX64)


def test_sub_wraps_below_zero():
    assert sub128(0, 0, 0, 1) == (MAX64, MAX64)


@pytest.mark.parametrize("a", SAMPLES)
@pytest.mark.parametrize("b", SAMPLES)
def test_add_then_sub_round_trips(a, b):
    total = add128(*a, *b)
    assert sub128(*total, *b) == a


@pytest.mark.parametrize("a", SAMPLES)
@pytest.mark.parametrize("b", SAMPLES)
def test_add_is_commutative(a, b):
    assert add128(*a, *b) == add128(*b, *a)


@pytest.mark.parametrize("a", SAMPLES)
def test_sub_self_is_zero(a):
    assert sub128(*a, *a) == (0, 0)


def test_mul64_largest_operands():
    assert mul64_to_128(MAX64, MAX64) == (MAX64 - 1, 1)


@pytest.mark.parametrize("a", [0, 1, 0x123456789, MAX64])
def test_mul64_by_one_is_identity(a):
    assert mul64_to_128(a, 1) == (0, a)


@pytest.mark.parametrize("a", [0, 7, 0xDEADBEEFCAFEBABE, MAX64])
@pytest.mark.parametrize("b", [0, 3, 0x1234ABCD, MAX64])
def test_mul64_is_commutative(a, b):
    assert mul64_to_128(a, b) == mul64_to_128(b, a)


@pytest.mark.parametrize("a", [0, 1, 0x0123456789ABCDEF, MAX64])
@pytest.mark.parametrize("b", [0, 1, 0x89ABCDEF, MAX32])
def test_shifted32_matches_product_shifted_left(a, b):
    product = mul64_to_128(a, b)
    assert mul64_by_shifted32_to_128(a, b) == short_shift_left128(*product, 32)


@pytest.mark.parametrize("a", [0, 1, 0x0123456789ABCDEF, MAX64])
@pytest.mark.parametrize("b", [0, 1, 0x89ABCDEF, MAX32])
def test_mul128_by32_agrees_with_mul64_on_low_word(a, b):
    assert mul128_by32(0, a, b) == mul64_to_128(a, b)


@pytest.mark.parametrize("a", SAMPLES)
def test_mul128_by_one_is_identity(a):
    assert mul128_by32(*a, 1) == a


@pytest.mark.parametrize("a", SAMPLES)
def test_mul128_by_two_equals_doubling(a):
    assert mul128_by32(*a, 2) == add128(*a, *a)


def test_mul128_wraps_at_128_bits():
    assert mul128_by32(MAX64, MAX64, MAX32) == sub128(0, 0, *mul128_by32(0, 0, 0)[:0] or (0, MAX32))


@pytest.mark.parametrize(
    "call",
    [
        lambda: add128(MAX64 + 1, 0, 0, 0),
        lambda: add128(0, 0, 0, -1),
        lambda: sub128(0, MAX64 + 1, 0, 0),
        lambda: mul64_to_128(-1, 1),
        lambda: mul64_to_128(1, MAX64 + 1),
        lambda: mul64_by_shifted32_to_128(1, MAX32 + 1),
        lambda: mul128_by32(0, 0, MAX32 + 1),
        lambda: mul128_by32(MAX64 + 1, 0, 1),
    ],
)
def test_out_of_range_operands_raise(call):
    with pytest.raises(ValueError):
        call()