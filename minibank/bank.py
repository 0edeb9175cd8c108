"""
MiniBank Facade

Wires storage, audit trail, managers and reporting together and exposes the
ledger operations under one object.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Union, Any

from .config import MiniBankConfig, get_config
from .currency import Currency, Money
from .storage import StorageInterface, InMemoryStorage, SQLiteStorage
from .audit import AuditTrail
from .customers import CustomerManager, Customer
from .accounts import AccountManager, Account, AccountType
from .transactions import TransferProcessor, Transaction
from .reporting import ReportingEngine, TransactionViewRow, MonthlySpendingRow, TopCustomerRow
from .logging_config import get_logger


def create_storage(config: MiniBankConfig) -> StorageInterface:
    """Build the storage backend named in config"""
    backend = config.storage_backend.lower()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(config.database_path)
    raise ValueError(f"Unsupported storage backend: {config.storage_backend}")


class MiniBank:
    """Ledger store with all components initialized"""

    def __init__(self, config: Optional[MiniBankConfig] = None,
                 storage: Optional[StorageInterface] = None):
        self.config = config or get_config()
        self.storage = storage or create_storage(self.config)
        self.logger = get_logger("minibank.bank")

        currency = Currency.from_code(self.config.currency)
        self.audit_trail = AuditTrail(self.storage, enabled=self.config.enable_audit_logging)
        self.customer_manager = CustomerManager(self.storage, self.audit_trail)
        self.account_manager = AccountManager(
            self.storage, self.customer_manager, self.audit_trail, currency=currency
        )
        self.transfer_processor = TransferProcessor(
            self.storage, self.account_manager, self.audit_trail,
            large_transaction_threshold=self.config.large_threshold
        )
        self.reporting_engine = ReportingEngine(
            self.customer_manager, self.account_manager, self.transfer_processor,
            suspicious_threshold=self.config.suspicious_threshold,
            top_customers_limit=self.config.top_customers_limit
        )

    # Write operations

    def open_customer(self, name: str, email: str, phone: Optional[str] = None) -> int:
        """Register a customer and return its id"""
        return self.customer_manager.open_customer(name, email, phone).id

    def open_account(self, customer_id: int, account_type: Union[AccountType, str],
                     initial_balance: Union[Money, Decimal, int, str] = Decimal('0.00')) -> int:
        """Open an account and return its id"""
        return self.account_manager.open_account(customer_id, account_type, initial_balance).id

    def transfer(self, from_account_id: int, to_account_id: int,
                 amount: Union[Money, Decimal, int, str]) -> int:
        """Transfer funds and return the transaction id"""
        return self.transfer_processor.transfer(from_account_id, to_account_id, amount).id

    # Lookups

    def get_customer(self, customer_id: int) -> Customer:
        return self.customer_manager.require_customer(customer_id)

    def get_account(self, account_id: int) -> Account:
        return self.account_manager.require_account(account_id)

    def get_balance(self, account_id: int) -> Decimal:
        return self.account_manager.get_balance(account_id).amount

    def balances(self) -> Dict[int, Decimal]:
        """Balance of every account keyed by account id"""
        return {a.id: a.balance.amount for a in self.account_manager.list_accounts()}

    def list_transactions(self, account_id: Optional[int] = None) -> List[Transaction]:
        return self.transfer_processor.list_transactions(account_id)

    # Reports

    def list_transactions_view(self) -> List[TransactionViewRow]:
        return self.reporting_engine.transaction_view()

    def monthly_spending(self) -> List[MonthlySpendingRow]:
        return self.reporting_engine.monthly_spending()

    def suspicious_transactions(self) -> List[TransactionViewRow]:
        return self.reporting_engine.suspicious_transactions()

    def top_customers(self, limit: Optional[int] = None) -> List[TopCustomerRow]:
        return self.reporting_engine.top_customers(limit)

    def verify_audit_trail(self) -> Dict[str, Any]:
        return self.audit_trail.verify_integrity()

    def close(self) -> None:
        self.storage.close()
