"""Fixed-point money value used for every balance and grant amount.

Amounts are held as an integer number of cents. Parsing accepts strings,
integers and ``Decimal`` values with at most two fractional digits; binary
floats are refused outright so rounding error can never reach a balance.
At the system boundary a ``Money`` always renders as a decimal string with
exactly two fractional digits (``"40000.00"``).
"""

from decimal import Decimal, InvalidOperation
from functools import total_ordering
from typing import Any, Union

from pydantic_core import core_schema

from .exceptions import InvalidAmountError

CENT = Decimal("0.01")

# DECIMAL(15, 2)
MAX_CENTS = 10 ** 15 - 1

MoneyLike = Union["Money", Decimal, int, str]


@total_ordering
class Money:
    """Immutable amount of currency in minor units."""

    __slots__ = ("_cents",)

    def __init__(self, cents: int = 0):
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise TypeError(f"Money expects integer cents, got {type(cents).__name__}")
        if abs(cents) > MAX_CENTS:
            raise InvalidAmountError("Amount exceeds the maximum supported value", value=cents)
        object.__setattr__(self, "_cents", cents)

    def __setattr__(self, name, value):
        raise AttributeError("Money is immutable")

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(cents)

    @classmethod
    def parse(cls, value: Any) -> "Money":
        """Parse a string, int, Decimal or Money into Money.

        Raises InvalidAmountError for floats, booleans, non-numeric input,
        non-finite values and amounts with more than two decimal places.
        """
        if isinstance(value, Money):
            return value
        if isinstance(value, bool) or isinstance(value, float):
            raise InvalidAmountError(
                "Amounts must be given as strings, integers or decimals, not floats",
                value=value,
            )
        if isinstance(value, int):
            return cls(value * 100)
        if isinstance(value, str):
            text = value.strip().replace(",", "")
            if text.startswith("$"):
                text = text[1:]
            if not text:
                raise InvalidAmountError("Amount is required", value=value)
            try:
                value = Decimal(text)
            except InvalidOperation:
                raise InvalidAmountError(f"Invalid amount: {text!r}", value=text) from None
        if not isinstance(value, Decimal):
            raise InvalidAmountError(f"Unsupported amount type: {type(value).__name__}", value=value)
        if not value.is_finite():
            raise InvalidAmountError("Amount must be a finite number", value=value)
        try:
            quantized = value.quantize(CENT)
        except InvalidOperation:
            raise InvalidAmountError("Amount exceeds the maximum supported value", value=value) from None
        if value != quantized:
            raise InvalidAmountError("Amount cannot have more than two decimal places", value=value)
        return cls(int(quantized * 100))

    @property
    def cents(self) -> int:
        return self._cents

    def to_decimal(self) -> Decimal:
        return (Decimal(self._cents) / 100).quantize(CENT)

    def to_fixed(self) -> str:
        """Render with exactly two fractional digits."""
        return f"{self.to_decimal():.2f}"

    def is_negative(self) -> bool:
        return self._cents < 0

    def is_zero(self) -> bool:
        return self._cents == 0

    def is_positive(self) -> bool:
        return self._cents > 0

    def less_than(self, other: MoneyLike) -> bool:
        return self < Money.parse(other)

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self._cents + other._cents)

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self._cents - other._cents)

    def __neg__(self):
        return Money(-self._cents)

    def __eq__(self, other):
        if isinstance(other, Money):
            return self._cents == other._cents
        if isinstance(other, (int, Decimal, str)) and not isinstance(other, bool):
            try:
                return self._cents == Money.parse(other)._cents
            except InvalidAmountError:
                return False
        return NotImplemented

    def __lt__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self._cents < other._cents

    def __hash__(self):
        return hash(("Money", self._cents))

    def __bool__(self):
        return self._cents != 0

    def __str__(self):
        return self.to_fixed()

    def __repr__(self):
        return f"Money('{self.to_fixed()}')"

    # Pydantic integration: validate from str/int/Decimal, serialize as "0.00"
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            _validate_money,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda m: m.to_fixed(),
                when_used="always",
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {
            "type": "string",
            "pattern": r"^-?\d+\.\d{2}$",
            "examples": ["10000.00"],
        }


def _validate_money(value: Any) -> Money:
    # JSON numbers arrive as floats; take their shortest repr, never their binary value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Money.parse(value)
    except InvalidAmountError as exc:
        raise ValueError(exc.message) from exc
