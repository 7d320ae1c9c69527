"""Exact rational arithmetic for tick and duration math."""

from __future__ import annotations

from functools import reduce
from typing import Iterable, Union

from engrave.errors import ZeroDenominator

Operand = Union["Fraction", int]


class Fraction:
    """
    A mutable rational number.

    The named methods (``add``, ``subtract``, ``multiply``, ``divide``,
    ``simplify``, ``copy``, ``set``) mutate in place and return ``self`` so
    calls can be chained. The Python operators (``+ - * /``) never mutate and
    always return a new Fraction, which is what the formatter uses.

    Comparisons are exact: both sides are cross-multiplied, never converted
    to floats. Use ``value()`` only for display and pixel metrics.
    """

    __slots__ = ("numerator", "denominator")

    def __init__(self, numerator: int = 1, denominator: int = 1) -> None:
        if denominator == 0:
            raise ZeroDenominator(f"Fraction {numerator}/0 has a zero denominator.")
        self.numerator = numerator
        self.denominator = denominator

    # ------------------------------------------------------------------
    # Integer helpers
    # ------------------------------------------------------------------

    @staticmethod
    def gcd(a: int, b: int) -> int:
        """Greatest common divisor; ``gcd(0, b) == b``, ``gcd(a, 0) == a``."""
        while b != 0:
            a, b = b, a % b
        return a

    @staticmethod
    def lcm(a: int, b: int) -> int:
        """Lowest common multiple; zero whenever either term is zero."""
        divisor = Fraction.gcd(a, b)
        if b == 0 or divisor == 0:
            return 0
        return (a * b) // divisor

    @staticmethod
    def lcmm(args: Iterable[int]) -> int:
        """Lowest common multiple of a sequence; ``0`` for an empty one."""
        values = list(args)
        if not values:
            return 0
        return reduce(Fraction.lcm, values[1:], values[0])

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def set(self, numerator: int = 1, denominator: int = 1) -> Fraction:
        if denominator == 0:
            raise ZeroDenominator(f"Fraction {numerator}/0 has a zero denominator.")
        self.numerator = numerator
        self.denominator = denominator
        return self

    def simplify(self) -> Fraction:
        """Reduce by the gcd and move any sign onto the numerator."""
        divisor = Fraction.gcd(self.numerator, self.denominator)
        if divisor == 0:
            return self
        numerator = self.numerator // divisor
        denominator = self.denominator // divisor
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        return self.set(numerator, denominator)

    def add(self, other: Operand, denominator: int = 1) -> Fraction:
        other = _coerce(other, denominator)
        common = Fraction.lcm(self.denominator, other.denominator)
        numerator = (
            self.numerator * (common // self.denominator)
            + other.numerator * (common // other.denominator)
        )
        return self.set(numerator, common)

    def subtract(self, other: Operand, denominator: int = 1) -> Fraction:
        other = _coerce(other, denominator)
        common = Fraction.lcm(self.denominator, other.denominator)
        numerator = (
            self.numerator * (common // self.denominator)
            - other.numerator * (common // other.denominator)
        )
        return self.set(numerator, common)

    def multiply(self, other: Operand, denominator: int = 1) -> Fraction:
        other = _coerce(other, denominator)
        return self.set(
            self.numerator * other.numerator,
            self.denominator * other.denominator,
        )

    def divide(self, other: Operand, denominator: int = 1) -> Fraction:
        other = _coerce(other, denominator)
        if other.numerator == 0:
            raise ZeroDenominator(f"Cannot divide {self} by zero-valued fraction {other}.")
        return self.set(
            self.numerator * other.denominator,
            self.denominator * other.numerator,
        )

    def copy(self, other: Operand) -> Fraction:
        """Overwrite this value's parts from ``other`` without changing identity."""
        other = _coerce(other, 1)
        return self.set(other.numerator, other.denominator)

    def make_abs(self) -> Fraction:
        self.numerator = abs(self.numerator)
        self.denominator = abs(self.denominator)
        return self

    def parse(self, text: str) -> Fraction:
        """Set from a string such as ``"5/2"`` or ``"3"``."""
        head, _, tail = text.strip().partition("/")
        try:
            numerator = int(head)
            denominator = int(tail) if tail else 1
        except ValueError as exc:
            raise ValueError(f"Cannot parse fraction from '{text}'.") from exc
        return self.set(numerator, denominator)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def clone(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def value(self) -> float:
        return self.numerator / self.denominator

    def quotient(self) -> int:
        """Integer part, truncated toward zero (5/2 -> 2, -5/2 -> -2)."""
        whole = abs(self.numerator) // abs(self.denominator)
        return whole if self.numerator * self.denominator >= 0 else -whole

    def remainder(self) -> int:
        """Remainder matching ``quotient`` (5/2 -> 1, -5/2 -> -1)."""
        return self.numerator - self.quotient() * self.denominator

    def key(self) -> tuple[int, int]:
        """Reduced ``(numerator, denominator)`` pair usable as an exact dict key."""
        reduced = self.clone().simplify()
        return reduced.numerator, reduced.denominator

    def to_simplified_string(self) -> str:
        return str(self.clone().simplify())

    def to_mixed_string(self) -> str:
        """Render as a mixed number, e.g. ``"2 1/2"`` for 5/2."""
        whole = self.quotient()
        rest = self.clone().subtract(whole).simplify()
        if whole != 0:
            rest.make_abs()
            if rest.numerator == 0:
                return str(whole)
            return f"{whole} {rest.to_simplified_string()}"
        if rest.numerator == 0:
            return "0"
        return rest.to_simplified_string()

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def _compare(self, other: Operand) -> int:
        other = _coerce(other, 1)
        diff = self.numerator * other.denominator - other.numerator * self.denominator
        if self.denominator * other.denominator < 0:
            diff = -diff
        return (diff > 0) - (diff < 0)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, bool) or not isinstance(other, (Fraction, int)):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: Operand) -> bool:
        return self._compare(other) < 0

    def __le__(self, other: Operand) -> bool:
        return self._compare(other) <= 0

    def __gt__(self, other: Operand) -> bool:
        return self._compare(other) > 0

    def __ge__(self, other: Operand) -> bool:
        return self._compare(other) >= 0

    # Mutable, so not hashable; use key() for dictionaries.
    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: Operand) -> Fraction:
        return self.clone().add(other)

    def __radd__(self, other: int) -> Fraction:
        return self.clone().add(other)

    def __sub__(self, other: Operand) -> Fraction:
        return self.clone().subtract(other)

    def __rsub__(self, other: int) -> Fraction:
        return Fraction(other, 1).subtract(self)

    def __mul__(self, other: Operand) -> Fraction:
        return self.clone().multiply(other)

    def __rmul__(self, other: int) -> Fraction:
        return self.clone().multiply(other)

    def __truediv__(self, other: Operand) -> Fraction:
        return self.clone().divide(other)

    def __float__(self) -> float:
        return self.value()

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"

    def __repr__(self) -> str:
        return f"Fraction({self.numerator}, {self.denominator})"


def _coerce(value: Operand, denominator: int) -> Fraction:
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected Fraction or int, got {type(value).__name__}.")
    return Fraction(value, denominator)
