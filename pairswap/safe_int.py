"""Checked integer wrapper for reserve, share and token-amount arithmetic.

Every amount the engine handles is an unsigned 256-bit quantity. SafeInt
keeps Python's arbitrary-precision ints but turns the conditions that would
revert on a fixed-width machine into explicit errors:
- Division or modulo by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Any result above 2**256 - 1 raises Uint256Overflow (when bounded)

Usage pattern:
    from pairswap.safe_int import S

    def amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        with_fee = S(amount_in) * 997
        return (with_fee * reserve_out // (S(reserve_in) * 1000 + with_fee)).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division or modulo by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value is negative or exceeds the uint256 maximum."""

    pass


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Construction rejects negative values. Results of ``+`` and ``*`` are
    checked against UINT256_MAX unless the instance was created with
    ``bounded=False``; the flag propagates to derived values.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value", "_bounded")
    _value: int
    _bounded: bool

    def __init__(self, value: int | SafeInt, *, bounded: bool = True) -> None:
        """Wrap an integer or copy another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Uint256Overflow: If value is negative, or above 2**256-1 when bounded
        """
        if isinstance(value, SafeInt):
            raw = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            raw = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self._bounded = bounded
        self._value = self._check(raw)

    def _check(self, result: int) -> int:
        if result < 0:
            raise Uint256Overflow(f"Negative value cannot be uint256: {result}")
        if self._bounded and result > UINT256_MAX:
            raise Uint256Overflow(f"Value exceeds uint256 max: {result}")
        return result

    def _wrap(self, result: int) -> SafeInt:
        return SafeInt(self._check(result), bounded=self._bounded)

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return self._wrap(self._value + _extract_value(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return self._wrap(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return self._wrap(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return self._wrap(self._value * _extract_value(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, truncating toward zero.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return self._wrap(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        if self._value == 0:
            raise DivisionByZero(f"Division by zero: {other} // 0")
        return self._wrap(other // self._value)

    def __mod__(self, other: SafeInt | int) -> SafeInt:
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Modulo by zero: {self._value} % 0")
        return self._wrap(self._value % other_val)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use //")

    __rtruediv__ = __truediv__

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Named operations ---

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return the smaller of self and other."""
        return self._wrap(min(self._value, _extract_value(other)))

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute ``self * numerator // denominator`` with every step checked."""
        return (self * numerator) // denominator


def _extract_value(x: SafeInt | int) -> int:
    """Extract the integer value from a SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
