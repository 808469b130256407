import re
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow, ROUND_HALF_UP
from functools import total_ordering
from typing import Union

from errors import InvalidAmount

# Fixed point: every Amount carries exactly 4 fractional digits.
SCALE = Decimal("0.0001")
MAX_DIGITS = 34
# Plain decimal notation: no exponents, underscores, NaN or Infinity
_DECIMAL_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")

# ROUND_HALF_UP in decimal rounds half away from zero, for negatives too.
_ROUNDING_CONTEXT = Context(prec=MAX_DIGITS, rounding=ROUND_HALF_UP, traps=[InvalidOperation, Overflow])
# Arithmetic must never round silently.
_EXACT_CONTEXT = Context(prec=MAX_DIGITS, rounding=ROUND_HALF_UP, traps=[InvalidOperation, Overflow, Inexact])


@total_ordering
class Amount:
    """
    Immutable fixed-point monetary value with 4 fractional digits.
    Arithmetic is exact and may go negative; sign rules belong to the ledger.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[Decimal, int] = 0):
        if isinstance(value, (float, bool)) or not isinstance(value, (Decimal, int)):
            raise TypeError(f"Amount requires a Decimal or int, got {type(value).__name__}")

        value = Decimal(value)
        if not value.is_finite():
            raise InvalidAmount(f"Amount must be finite, got {value}")

        try:
            quantized = value.quantize(SCALE, context=_ROUNDING_CONTEXT)
        except (InvalidOperation, Overflow) as e:
            raise InvalidAmount(f"Amount {value} exceeds {MAX_DIGITS} significant digits") from e

        # -0.0000 renders as "-0.0000" otherwise
        if not quantized:
            quantized = abs(quantized)
        self._value = quantized

    @classmethod
    def from_decimal_string(cls, text: str) -> "Amount":
        """Parse a decimal string like "1.5" or " -0.00015 ", rounding to 4 fractional digits."""
        if not isinstance(text, str) or not _DECIMAL_PATTERN.fullmatch(text.strip()):
            raise InvalidAmount(f"Cannot parse amount {text!r}")
        return cls(Decimal(text.strip()))

    @classmethod
    def zero(cls) -> "Amount":
        return cls(0)

    def add(self, other: "Amount") -> "Amount":
        return Amount(self._exact(_EXACT_CONTEXT.add, other))

    def subtract(self, other: "Amount") -> "Amount":
        return Amount(self._exact(_EXACT_CONTEXT.subtract, other))

    def compare(self, other: "Amount") -> int:
        """Return -1, 0 or 1 as self is less than, equal to or greater than other."""
        return int(self._value.compare(other._value))

    def is_negative(self) -> bool:
        return self._value < 0

    def to_decimal(self) -> Decimal:
        return self._value

    def _exact(self, operation, other: "Amount") -> Decimal:
        try:
            return operation(self._value, other._value)
        except (Inexact, Overflow) as e:
            raise InvalidAmount(f"Amount arithmetic on {self} and {other} exceeds {MAX_DIGITS} significant digits") from e

    def __add__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> "Amount":
        return Amount(-self._value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return f"{self._value:f}"

    def __repr__(self) -> str:
        return f"Amount('{self}')"
