"""
Currency and Money Module

ISO 4217 currency codes and an immutable Money type with Decimal precision.
The ledger holds a single currency; amounts are always quantized to its
precision. NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from dataclasses import dataclass
from typing import Any, Dict, Union
from enum import Enum

# Set global decimal context for financial precision
getcontext().prec = 28


class Currency(Enum):
    """ISO 4217 Currency Codes with precision info"""
    USD = ("USD", 2)  # US Dollar
    EUR = ("EUR", 2)  # Euro
    GBP = ("GBP", 2)  # British Pound
    INR = ("INR", 2)  # Indian Rupee
    JPY = ("JPY", 0)  # Japanese Yen, no minor unit

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        try:
            return cls[code.upper()]
        except KeyError:
            raise ValueError(f"Unsupported currency code: {code}")


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and proper precision.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        rounded = self.amount.quantize(
            Decimal('0.1') ** self.currency.precision,
            rounding=ROUND_HALF_UP
        )
        object.__setattr__(self, 'amount', rounded)

    @classmethod
    def zero(cls, currency: Currency) -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {verb} {self.currency.code} and {other.currency.code}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> 'Money':
        return Money(-self.amount, self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __hash__(self) -> int:
        return hash((self.amount, self.currency.code))

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_string(self) -> str:
        """Format for display"""
        return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"

    def to_dict(self) -> Dict[str, str]:
        return {'amount': str(self.amount), 'currency': self.currency.code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Money':
        return cls(Decimal(data['amount']), Currency.from_code(data['currency']))


def to_money(value: Union[Money, Decimal, int, str], currency: Currency) -> Money:
    """
    Coerce a caller-supplied amount into Money in the given currency

    Raises:
        ValueError: If the value is not a finite number, is a float, or is
            Money in another currency
    """
    if isinstance(value, Money):
        if value.currency != currency:
            raise ValueError(
                f"Amount currency {value.currency.code} does not match ledger currency {currency.code}"
            )
        return value

    if isinstance(value, float):
        raise ValueError("Monetary amounts must be Decimal, int or str, not float")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Cannot convert '{value}' to a monetary amount")

    if not amount.is_finite():
        raise ValueError(f"Cannot convert '{value}' to a monetary amount")

    return Money(amount, currency)
