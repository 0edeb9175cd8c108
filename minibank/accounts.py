"""
Account Management Module

Opens Savings and Current accounts for existing customers and exposes their
balances. Balances change only through transfers (see transactions.py),
which call ``apply_balance_change`` inside their unit of work.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from .currency import Money, Currency, to_money
from .storage import StorageInterface, StorageRecord
from .audit import AuditTrail, AuditEventType
from .customers import CustomerManager
from .errors import ValidationError, NotFoundError
from .logging_config import get_logger, log_action


class AccountType(Enum):
    """Account products offered by the bank"""
    SAVINGS = "Savings"
    CURRENT = "Current"

    @classmethod
    def parse(cls, value: Union['AccountType', str]) -> 'AccountType':
        """Accept an AccountType, its name or its value (case-insensitive)"""
        if isinstance(value, AccountType):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if wanted in (member.name.lower(), member.value.lower()):
                    return member
        raise ValidationError(f"Unknown account type: {value}")


@dataclass
class Account(StorageRecord):
    """
    Customer account holding a single-currency balance
    """
    customer_id: int
    account_type: AccountType
    balance: Money

    @property
    def currency(self) -> Currency:
        return self.balance.currency

    def has_funds_for(self, amount: Money) -> bool:
        """True when the balance covers the amount"""
        return self.balance >= amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        data = dict(data)
        data['account_type'] = AccountType(data['account_type'])
        data['balance'] = Money.from_dict(data['balance'])
        return super().from_dict(data)


class AccountManager:
    """
    Manages account opening and balance lookups
    """

    def __init__(
        self,
        storage: StorageInterface,
        customer_manager: CustomerManager,
        audit_trail: AuditTrail,
        currency: Currency = Currency.USD
    ):
        self.storage = storage
        self.customer_manager = customer_manager
        self.audit_trail = audit_trail
        self.currency = currency
        self.table_name = "accounts"
        self.logger = get_logger("minibank.accounts")

    def open_account(
        self,
        customer_id: int,
        account_type: Union[AccountType, str],
        initial_balance: Union[Money, Decimal, int, str] = Decimal('0.00')
    ) -> Account:
        """
        Open a new account

        Args:
            customer_id: ID of the owning customer
            account_type: Savings or Current
            initial_balance: Opening balance, defaults to 0.00

        Returns:
            Created Account object

        Raises:
            NotFoundError: If the customer does not exist
            ValidationError: If the type is unknown or the balance is negative
        """
        account_type = AccountType.parse(account_type)
        try:
            balance = to_money(initial_balance, self.currency)
        except ValueError as e:
            raise ValidationError(str(e))
        if balance.is_negative():
            raise ValidationError("Initial balance cannot be negative")

        with self.storage.atomic():
            self.customer_manager.require_customer(customer_id)

            now = datetime.now(timezone.utc)
            account = Account(
                id=self.storage.next_id(self.table_name),
                created_at=now,
                updated_at=now,
                customer_id=customer_id,
                account_type=account_type,
                balance=balance
            )
            self._save_account(account)

        log_action(
            self.logger, "info", f"{account_type.value} account opened",
            action="open_account", resource=f"account:{account.id}",
            extra={
                "account_id": account.id,
                "customer_id": customer_id,
                "initial_balance": balance.to_string()
            }
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.ACCOUNT_OPENED,
            entity_type="account",
            entity_id=account.id,
            metadata={
                "customer_id": customer_id,
                "account_type": account_type.value,
                "initial_balance": balance.amount
            }
        )

        return account

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID"""
        data = self.storage.load(self.table_name, account_id)
        if data:
            return Account.from_dict(data)
        return None

    def require_account(self, account_id: int) -> Account:
        """Get account by ID or raise NotFoundError"""
        account = self.get_account(account_id)
        if not account:
            raise NotFoundError("account", account_id)
        return account

    def list_accounts(self) -> List[Account]:
        """All accounts in opening order"""
        accounts = [Account.from_dict(data) for data in self.storage.load_all(self.table_name)]
        accounts.sort(key=lambda a: a.id)
        return accounts

    def get_customer_accounts(self, customer_id: int) -> List[Account]:
        """Get all accounts owned by a customer"""
        data = self.storage.find(self.table_name, {"customer_id": customer_id})
        return sorted((Account.from_dict(d) for d in data), key=lambda a: a.id)

    def get_balance(self, account_id: int) -> Money:
        return self.require_account(account_id).balance

    def total_balance(self) -> Money:
        """Sum of balances across all accounts"""
        total = Money.zero(self.currency)
        for account in self.list_accounts():
            total = total + account.balance
        return total

    def apply_balance_change(self, account_id: int, delta: Money) -> Account:
        """
        Add delta (possibly negative) to an account balance.
        Must be called inside the caller's storage.atomic() block.
        """
        account = self.require_account(account_id)
        account.balance = account.balance + delta
        account.updated_at = datetime.now(timezone.utc)
        self._save_account(account)
        return account

    def _save_account(self, account: Account) -> None:
        self.storage.save(self.table_name, account.id, account.to_dict())
