"""Money value object - Decimal amount tagged with an ISO currency code"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Union

from service_planner.domain.exceptions import CurrencyMismatchError, InvalidArgumentError

Number = Union[int, float, Decimal]


def _to_decimal(value: Any) -> Decimal:
    """Convert a scalar to Decimal without binary float artifacts"""
    if isinstance(value, bool):
        raise InvalidArgumentError("Amount must be numeric")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidArgumentError(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise InvalidArgumentError(f"Amount must be finite: {value!r}")
    return result


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary amount.

    Arithmetic is done on Decimal and never rounds; operations between two
    Money values require the same currency code.
    """

    amount: Decimal
    currency: str

    def __post_init__(self):
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        if not isinstance(self.currency, str) or not self.currency.strip():
            raise InvalidArgumentError("Currency code must be a non-empty string")
        object.__setattr__(self, "currency", self.currency.strip().upper())

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(Decimal("0"), currency)

    @classmethod
    def from_major(cls, amount: Number, currency: str) -> "Money":
        return cls(_to_decimal(amount), currency)

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Currency mismatch: {self.currency} vs {other.currency}"
            )

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: Number) -> "Money":
        return Money(self.amount * _to_decimal(factor), self.currency)

    def divide(self, divisor: Number) -> "Money":
        divisor = _to_decimal(divisor)
        if divisor == 0:
            raise InvalidArgumentError("Cannot divide money by zero")
        return Money(self.amount / divisor, self.currency)

    def ratio(self, other: "Money") -> float:
        """self / other as a plain float"""
        self._check_currency(other)
        if other.amount == 0:
            raise InvalidArgumentError("Cannot take ratio against zero")
        return float(self.amount / other.amount)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:,.2f}"

    def to_dict(self) -> Dict[str, str]:
        # Amount as string keeps full Decimal precision through JSON
        return {"amount": str(self.amount), "currency": self.currency}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Money":
        try:
            return cls(_to_decimal(data["amount"]), data["currency"])
        except (KeyError, TypeError) as e:
            raise InvalidArgumentError(f"Invalid money payload: {data!r}") from e
