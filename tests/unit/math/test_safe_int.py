"""Tests for SafeInt checked arithmetic."""

import pytest

from pairswap.safe_int import (
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt wraps an int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can copy another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_negative_rejected(self):
        """Amounts are unsigned; negatives are rejected at construction."""
        with pytest.raises(Uint256Overflow):
            SafeInt(-1)

    def test_above_uint256_rejected(self):
        """Values above 2**256-1 are rejected when bounded."""
        with pytest.raises(Uint256Overflow):
            SafeInt(UINT256_MAX + 1)

    def test_unbounded_allows_wide_values(self):
        """bounded=False keeps arbitrary precision."""
        assert SafeInt(UINT256_MAX + 1, bounded=False).value == UINT256_MAX + 1

    def test_invalid_types_rejected(self):
        """Strings, floats and bools are not amounts."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            SafeInt(3.0)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add_and_mul(self):
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15
        assert (S(6) * 7).value == 42
        assert (6 * S(7)).value == 42

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises Underflow with the operands in the message."""
        with pytest.raises(Underflow) as exc_info:
            S(5) - S(10)
        assert "5 - 10" in str(exc_info.value)

    def test_rsub_underflow_raises(self):
        with pytest.raises(Underflow):
            5 - S(10)

    def test_sub_to_zero(self):
        assert (S(5) - 5).value == 0

    def test_mul_overflow_raises(self):
        """A product above uint256 is a fatal error, not a wraparound."""
        with pytest.raises(Uint256Overflow):
            S(2**200) * 2**100

    def test_add_overflow_raises(self):
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX) + 1

    def test_unbounded_propagates(self):
        """Values derived from an unbounded SafeInt stay unbounded."""
        result = S(2**200, bounded=False) * 2**100
        assert result.value == 2**300

    def test_floordiv_truncates(self):
        assert (S(10) // 3).value == 3
        assert (10 // S(3)).value == 3

    def test_division_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // 0
        with pytest.raises(DivisionByZero):
            10 // S(0)
        with pytest.raises(DivisionByZero):
            S(10) % 0

    def test_truediv_rejected(self):
        """True division would produce floats; it is refused."""
        with pytest.raises(TypeError):
            S(10) / 3  # type: ignore[operator]

    def test_errors_are_arithmetic_errors(self):
        assert issubclass(SafeIntError, ArithmeticError)
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(DivisionByZero, SafeIntError)
        assert issubclass(Uint256Overflow, SafeIntError)


class TestSafeIntNamedOperations:
    """Tests for min and mul_div."""

    def test_min(self):
        assert S(3).min(5).value == 3
        assert S(7).min(S(5)).value == 5

    def test_mul_div_multiplies_first(self):
        """mul_div keeps precision by multiplying before dividing."""
        assert S(7).mul_div(3, 2).value == 10
        assert (S(7) // 2 * 3).value == 9

    def test_mul_div_zero_denominator(self):
        with pytest.raises(DivisionByZero):
            S(7).mul_div(3, 0)


class TestSafeIntComparison:
    """Comparisons work against ints and SafeInts."""

    def test_comparisons(self):
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(3) < 5
        assert S(5) <= S(5)
        assert S(6) > 5
        assert S(6) >= 6

    def test_bool(self):
        assert not S(0)
        assert S(1)

    def test_int_and_index(self):
        assert int(S(9)) == 9
        assert [0, 1, 2][S(1)] == 1
