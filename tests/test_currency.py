"""
Test suite for Money and amount coercion
"""

import pytest
from decimal import Decimal

from minibank.currency import Money, Currency, to_money


class TestMoney:

    def test_rounds_to_currency_precision(self):
        assert Money(Decimal('10.005'), Currency.USD).amount == Decimal('10.01')
        assert Money(Decimal('10.5'), Currency.JPY).amount == Decimal('11')

    def test_arithmetic_and_comparison(self):
        a = Money(Decimal('100.00'), Currency.USD)
        b = Money(Decimal('40.00'), Currency.USD)
        assert a - b == Money(Decimal('60.00'), Currency.USD)
        assert a + b == Money(Decimal('140.00'), Currency.USD)
        assert -b == Money(Decimal('-40.00'), Currency.USD)
        assert a >= b and b < a

    def test_mixed_currency_rejected(self):
        with pytest.raises(ValueError, match="Cannot add"):
            Money(Decimal('1'), Currency.USD) + Money(Decimal('1'), Currency.EUR)

    def test_dict_round_trip(self):
        money = Money(Decimal('5000.00'), Currency.INR)
        assert money.to_dict() == {'amount': '5000.00', 'currency': 'INR'}
        assert Money.from_dict(money.to_dict()) == money


class TestToMoney:

    @pytest.mark.parametrize("value", [Decimal('12.50'), "12.50", " 12.5 "])
    def test_accepts_decimal_and_strings(self, value):
        assert to_money(value, Currency.USD) == Money(Decimal('12.50'), Currency.USD)

    def test_accepts_int(self):
        assert to_money(3000, Currency.USD).amount == Decimal('3000.00')

    @pytest.mark.parametrize("value", [12.5, "abc", "NaN", "Infinity", None])
    def test_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            to_money(value, Currency.USD)

    def test_rejects_foreign_currency_money(self):
        with pytest.raises(ValueError, match="does not match ledger currency"):
            to_money(Money(Decimal('1'), Currency.EUR), Currency.USD)
