"""
Transaction Processing Module

Moves money between accounts. A transfer checks the sender's balance, debits
the sender, credits the receiver and appends the ledger row as one unit of
work. Transfers above the large-transaction threshold append a zero-amount
log row for the same account pair in that same unit of work.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from enum import Enum

from .currency import Money, Currency, to_money
from .storage import StorageInterface, StorageRecord
from .audit import AuditTrail, AuditEventType
from .accounts import AccountManager
from .errors import ValidationError, InsufficientBalanceError, NotFoundError
from .logging_config import get_logger, log_action


DEFAULT_LARGE_TRANSACTION_THRESHOLD = Decimal('5000.00')


class TransactionKind(Enum):
    """Kinds of ledger rows"""
    TRANSFER = "transfer"                      # Real movement of funds
    LARGE_TRANSFER_LOG = "large_transfer_log"  # Zero-amount audit marker


@dataclass
class Transaction(StorageRecord):
    """
    Immutable ledger row
    """
    from_account_id: int
    to_account_id: int
    amount: Money
    transaction_date: datetime
    kind: TransactionKind = TransactionKind.TRANSFER
    related_transaction_id: Optional[int] = None  # Set on log rows

    def __post_init__(self):
        # Log rows carry 0.00 and bypass the positive-amount rule
        if self.kind == TransactionKind.TRANSFER:
            if not self.amount.is_positive():
                raise ValidationError("Transaction amount must be positive")
        elif not self.amount.is_zero():
            raise ValidationError("Large transfer log rows must carry a zero amount")

    @property
    def is_log_row(self) -> bool:
        return self.kind == TransactionKind.LARGE_TRANSFER_LOG

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        data = dict(data)
        data['amount'] = Money.from_dict(data['amount'])
        data['kind'] = TransactionKind(data['kind'])
        data['transaction_date'] = datetime.fromisoformat(data['transaction_date'])
        return super().from_dict(data)


class TransferProcessor:
    """
    Executes transfers and reads the ledger
    """

    def __init__(
        self,
        storage: StorageInterface,
        account_manager: AccountManager,
        audit_trail: AuditTrail,
        large_transaction_threshold: Decimal = DEFAULT_LARGE_TRANSACTION_THRESHOLD
    ):
        self.storage = storage
        self.account_manager = account_manager
        self.audit_trail = audit_trail
        self.large_transaction_threshold = Decimal(large_transaction_threshold)
        self.table_name = "transactions"
        self.logger = get_logger("minibank.transactions")

    @property
    def currency(self) -> Currency:
        return self.account_manager.currency

    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Union[Money, Decimal, int, str]
    ) -> Transaction:
        """
        Transfer funds between two accounts

        Args:
            from_account_id: Sender account ID
            to_account_id: Receiver account ID
            amount: Positive amount in the ledger currency

        Returns:
            The recorded transfer Transaction

        Raises:
            ValidationError: If the amount is not a positive number
            NotFoundError: If either account does not exist
            InsufficientBalanceError: If the sender cannot cover the amount
        """
        try:
            money = to_money(amount, self.currency)
        except ValueError as e:
            raise ValidationError(str(e))
        if not money.is_positive():
            raise ValidationError("Transfer amount must be positive")

        try:
            with self.storage.atomic():
                sender = self.account_manager.require_account(from_account_id)
                self.account_manager.require_account(to_account_id)

                if not sender.has_funds_for(money):
                    raise InsufficientBalanceError(from_account_id, sender.balance, money)

                self.account_manager.apply_balance_change(from_account_id, -money)
                self.account_manager.apply_balance_change(to_account_id, money)
                transaction = self._record(from_account_id, to_account_id, money)

                log_row = None
                if money.amount > self.large_transaction_threshold:
                    log_row = self._record(
                        from_account_id, to_account_id, Money.zero(self.currency),
                        kind=TransactionKind.LARGE_TRANSFER_LOG,
                        related_transaction_id=transaction.id
                    )
        except (InsufficientBalanceError, NotFoundError) as e:
            self._reject(from_account_id, to_account_id, money, e)
            raise

        log_action(
            self.logger, "info", "Transfer posted",
            action="transfer", resource=f"transaction:{transaction.id}",
            extra={
                "transaction_id": transaction.id,
                "from_account": from_account_id,
                "to_account": to_account_id,
                "amount": money.to_string()
            }
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_POSTED,
            entity_type="transaction",
            entity_id=transaction.id,
            metadata={
                "from_account": from_account_id,
                "to_account": to_account_id,
                "amount": money.amount
            }
        )

        if log_row:
            self.logger.info(
                "Large transfer %s logged as transaction %s", transaction.id, log_row.id
            )
            self.audit_trail.log_event(
                event_type=AuditEventType.LARGE_TRANSACTION_LOGGED,
                entity_type="transaction",
                entity_id=log_row.id,
                metadata={
                    "related_transaction_id": transaction.id,
                    "threshold": self.large_transaction_threshold
                }
            )

        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID"""
        data = self.storage.load(self.table_name, transaction_id)
        if data:
            return Transaction.from_dict(data)
        return None

    def list_transactions(self, account_id: Optional[int] = None) -> List[Transaction]:
        """
        Ledger rows in insertion order, including log rows

        Args:
            account_id: Only rows where this account is sender or receiver
        """
        transactions = [Transaction.from_dict(data) for data in self.storage.load_all(self.table_name)]
        if account_id is not None:
            transactions = [
                t for t in transactions
                if account_id in (t.from_account_id, t.to_account_id)
            ]
        transactions.sort(key=lambda t: t.id)
        return transactions

    def _record(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Money,
        kind: TransactionKind = TransactionKind.TRANSFER,
        related_transaction_id: Optional[int] = None
    ) -> Transaction:
        now = datetime.now(timezone.utc)
        transaction = Transaction(
            id=self.storage.next_id(self.table_name),
            created_at=now,
            updated_at=now,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            transaction_date=now,
            kind=kind,
            related_transaction_id=related_transaction_id
        )
        self.storage.save(self.table_name, transaction.id, transaction.to_dict())
        return transaction

    def _reject(self, from_account_id, to_account_id, amount: Money, error: Exception) -> None:
        log_action(
            self.logger, "warning", f"Transfer rejected: {error}",
            action="transfer", resource=f"account:{from_account_id}",
            extra={
                "from_account": from_account_id,
                "to_account": to_account_id,
                "amount": amount.to_string(),
                "reason": getattr(error, 'error_code', type(error).__name__)
            }
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_REJECTED,
            entity_type="account",
            entity_id=from_account_id,
            metadata={
                "to_account": to_account_id,
                "amount": amount.amount,
                "reason": str(error)
            }
        )
