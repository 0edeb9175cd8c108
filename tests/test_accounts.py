"""
Test suite for accounts module

Tests account opening, type parsing, balance lookups and balance changes.
"""

import pytest
from decimal import Decimal

from minibank.currency import Money, Currency
from minibank.storage import InMemoryStorage
from minibank.audit import AuditTrail, AuditEventType
from minibank.customers import CustomerManager
from minibank.accounts import AccountManager, Account, AccountType
from minibank.errors import ValidationError, NotFoundError


class TestAccountType:

    @pytest.mark.parametrize("value,expected", [
        ("Savings", AccountType.SAVINGS),
        ("savings", AccountType.SAVINGS),
        ("CURRENT", AccountType.CURRENT),
        (AccountType.CURRENT, AccountType.CURRENT),
    ])
    def test_parse(self, value, expected):
        assert AccountType.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown account type"):
            AccountType.parse("Checking")


class TestAccountManager:

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.audit_trail = AuditTrail(self.storage)
        self.customer_manager = CustomerManager(self.storage, self.audit_trail)
        self.account_manager = AccountManager(
            self.storage, self.customer_manager, self.audit_trail
        )
        self.customer = self.customer_manager.open_customer("Alice Johnson", "alice@example.com")

    def test_open_account(self):
        account = self.account_manager.open_account(
            self.customer.id, AccountType.SAVINGS, Decimal("5000.00")
        )

        assert account.id == 1
        assert account.customer_id == self.customer.id
        assert account.account_type == AccountType.SAVINGS
        assert account.balance == Money(Decimal("5000.00"), Currency.USD)
        assert self.account_manager.get_account(account.id) == account

    def test_initial_balance_defaults_to_zero(self):
        account = self.account_manager.open_account(self.customer.id, "Current")
        assert account.balance.amount == Decimal("0.00")
        assert account.balance.is_zero()

    def test_initial_balance_accepts_strings(self):
        account = self.account_manager.open_account(self.customer.id, "Savings", "7000")
        assert account.balance.amount == Decimal("7000.00")

    def test_unknown_customer(self):
        with pytest.raises(NotFoundError, match="Customer 99 not found"):
            self.account_manager.open_account(99, "Savings", Decimal("100"))
        assert self.storage.count("accounts") == 0

    def test_negative_initial_balance(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            self.account_manager.open_account(self.customer.id, "Savings", Decimal("-1"))

    def test_invalid_initial_balance(self):
        with pytest.raises(ValidationError):
            self.account_manager.open_account(self.customer.id, "Savings", "lots")

    def test_customer_accounts(self):
        other = self.customer_manager.open_customer("Bob Smith", "bob@example.com")
        first = self.account_manager.open_account(self.customer.id, "Savings")
        self.account_manager.open_account(other.id, "Current")
        second = self.account_manager.open_account(self.customer.id, "Current")

        accounts = self.account_manager.get_customer_accounts(self.customer.id)
        assert [a.id for a in accounts] == [first.id, second.id]

    def test_balances(self):
        a = self.account_manager.open_account(self.customer.id, "Savings", Decimal("100.10"))
        self.account_manager.open_account(self.customer.id, "Current", Decimal("200.20"))

        assert self.account_manager.get_balance(a.id).amount == Decimal("100.10")
        assert self.account_manager.total_balance().amount == Decimal("300.30")

    def test_get_balance_missing_account(self):
        with pytest.raises(NotFoundError, match="Account 5 not found"):
            self.account_manager.get_balance(5)

    def test_apply_balance_change(self):
        account = self.account_manager.open_account(self.customer.id, "Savings", Decimal("50"))

        with self.storage.atomic():
            self.account_manager.apply_balance_change(
                account.id, Money(Decimal("-20.00"), Currency.USD)
            )

        assert self.account_manager.get_balance(account.id).amount == Decimal("30.00")

    def test_ledger_currency(self):
        manager = AccountManager(
            self.storage, self.customer_manager, self.audit_trail, currency=Currency.INR
        )
        account = manager.open_account(self.customer.id, "Savings", "10")
        assert account.currency == Currency.INR
        assert manager.get_account(account.id).balance.currency == Currency.INR

    def test_account_opening_audited(self):
        account = self.account_manager.open_account(self.customer.id, "Savings", Decimal("10"))
        events = self.audit_trail.get_events_for_entity("account", account.id)
        assert len(events) == 1
        assert events[0].event_type == AuditEventType.ACCOUNT_OPENED
        assert events[0].metadata["initial_balance"] == "10.00"


class TestAccountRecord:

    def test_has_funds_for(self, bank):
        customer_id = bank.open_customer("Alice", "alice@example.com")
        account = bank.get_account(bank.open_account(customer_id, "Savings", "100"))

        assert account.has_funds_for(Money(Decimal("100.00"), Currency.USD))
        assert not account.has_funds_for(Money(Decimal("100.01"), Currency.USD))

    def test_serialized_form(self, bank):
        customer_id = bank.open_customer("Alice", "alice@example.com")
        account = bank.get_account(bank.open_account(customer_id, "Current", "12.5"))

        data = account.to_dict()
        assert data["account_type"] == "Current"
        assert data["balance"] == {"amount": "12.50", "currency": "USD"}
        assert Account.from_dict(data) == account
