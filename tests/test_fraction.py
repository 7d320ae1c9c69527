"""Unit tests for exact fraction arithmetic."""

import pytest

from engrave.errors import ZeroDenominator
from engrave.fraction import Fraction


@pytest.mark.parametrize("n, d", [(1, 2), (3, 4), (-5, 7), (16384, 3), (0, 9)])
def test_value_matches_float_division(n: int, d: int) -> None:
    assert Fraction(n, d).value() == n / d


@pytest.mark.parametrize("k", [2, 3, -1, -7, 1000])
def test_equal_after_scaling_both_terms(k: int) -> None:
    assert Fraction(3, 8) == Fraction(3 * k, 8 * k)


def test_zero_denominator_rejected_at_construction() -> None:
    with pytest.raises(ZeroDenominator):
        Fraction(1, 0)


def test_divide_by_zero_value_fails() -> None:
    with pytest.raises(ZeroDenominator):
        Fraction(1, 2).divide(Fraction(0, 5))


def test_gcd_zero_cases() -> None:
    assert Fraction.gcd(0, 0) == 0
    assert Fraction.gcd(12, 0) == 12
    assert Fraction.gcd(0, 9) == 9


@pytest.mark.parametrize("a, b", [(4, 6), (7, 13), (12, 18), (1, 1), (16384, 48)])
def test_lcm_times_gcd_is_product(a: int, b: int) -> None:
    assert Fraction.lcm(a, b) * Fraction.gcd(a, b) == a * b


def test_lcm_with_zero_is_zero() -> None:
    assert Fraction.lcm(0, 5) == 0
    assert Fraction.lcm(5, 0) == 0


def test_lcmm_empty_single_and_order_independent() -> None:
    assert Fraction.lcmm([]) == 0
    assert Fraction.lcmm([7]) == 7
    assert Fraction.lcmm([4, 6, 10]) == 60
    assert Fraction.lcmm([10, 4, 6]) == Fraction.lcmm([6, 10, 4])


def test_mutating_operations_chain_and_return_self() -> None:
    value = Fraction(1, 2)
    result = value.add(1, 4).multiply(2).subtract(Fraction(1, 2))
    assert result is value
    assert value == Fraction(1, 1)


def test_divide_by_integer() -> None:
    assert Fraction(3, 4).divide(3) == Fraction(1, 4)


def test_simplify_is_idempotent_and_normalizes_sign() -> None:
    value = Fraction(6, -8).simplify()
    assert (value.numerator, value.denominator) == (-3, 4)
    value.simplify()
    assert (value.numerator, value.denominator) == (-3, 4)


def test_clone_is_equal_but_distinct() -> None:
    original = Fraction(5, 6)
    clone = original.clone()
    assert clone == original
    assert clone is not original
    clone.add(1)
    assert original == Fraction(5, 6)


def test_copy_keeps_identity() -> None:
    target = Fraction(1, 3)
    same = target.copy(Fraction(7, 9))
    assert same is target
    assert (target.numerator, target.denominator) == (7, 9)


def test_operators_do_not_mutate() -> None:
    a = Fraction(1, 2)
    b = Fraction(1, 3)
    assert a + b == Fraction(5, 6)
    assert a - b == Fraction(1, 6)
    assert a * b == Fraction(1, 6)
    assert a / b == Fraction(3, 2)
    assert 1 - a == Fraction(1, 2)
    assert (a.numerator, a.denominator) == (1, 2)
    assert (b.numerator, b.denominator) == (1, 3)


def test_comparisons_cross_multiply() -> None:
    assert Fraction(1, 3) < Fraction(1, 2)
    assert Fraction(2, 4) <= Fraction(1, 2)
    assert Fraction(-1, 2) < Fraction(1, -3)
    assert Fraction(4, 2) == 2
    assert Fraction(5, 2) > 2
    assert Fraction(1, 2) != Fraction(1, 3)


def test_huge_values_compare_exactly() -> None:
    big = 10**30
    assert Fraction(big + 1, big) > Fraction(big, big)


def test_fraction_is_unhashable_but_key_is_exact() -> None:
    with pytest.raises(TypeError):
        hash(Fraction(1, 2))
    assert Fraction(2, 4).key() == Fraction(1, 2).key() == (1, 2)
    assert Fraction(3, -6).key() == (-1, 2)


def test_quotient_and_remainder_truncate_toward_zero() -> None:
    assert Fraction(5, 2).quotient() == 2
    assert Fraction(5, 2).remainder() == 1
    assert Fraction(-5, 2).quotient() == -2
    assert Fraction(-5, 2).remainder() == -1


def test_parse() -> None:
    assert Fraction().parse("5/2") == Fraction(5, 2)
    assert Fraction().parse(" 3 ") == Fraction(3, 1)
    with pytest.raises(ValueError):
        Fraction().parse("three")
    with pytest.raises(ZeroDenominator):
        Fraction().parse("1/0")


def test_make_abs() -> None:
    assert Fraction(-3, 4).make_abs() == Fraction(3, 4)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Fraction(5, 2), "2 1/2"),
        (Fraction(4, 2), "2"),
        (Fraction(0, 3), "0"),
        (Fraction(1, 4), "1/4"),
        (Fraction(-3, 2), "-1 1/2"),
    ],
)
def test_to_mixed_string(value: Fraction, expected: str) -> None:
    assert value.to_mixed_string() == expected


def test_string_forms() -> None:
    assert str(Fraction(2, 4)) == "2/4"
    assert Fraction(2, 4).to_simplified_string() == "1/2"
    assert repr(Fraction(1, 3)) == "Fraction(1, 3)"


def test_rejects_non_integer_operands() -> None:
    with pytest.raises(TypeError):
        Fraction(1, 2).add(0.5)  # type: ignore[arg-type]


def test_equality_with_bool_is_not_supported() -> None:
    assert Fraction(1, 1).__eq__(True) is NotImplemented
    assert Fraction(1, 1) != True  # noqa: E712
    assert Fraction(0, 1) != False  # noqa: E712
