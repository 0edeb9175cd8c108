"""
Reporting Engine Module

Read-only reports derived from the ledger. Every report is recomputed from
storage on each call; nothing is cached or materialized.
"""

from collections import OrderedDict
from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence, Union
from enum import Enum
import csv
import io
import json

from .currency import Money
from .storage import serialize_value
from .accounts import AccountManager
from .customers import CustomerManager
from .transactions import TransferProcessor
from .errors import ValidationError


DEFAULT_SUSPICIOUS_THRESHOLD = Decimal('10000.00')
DEFAULT_TOP_CUSTOMERS_LIMIT = 5


class ReportFormat(Enum):
    """Output formats for reports"""
    DICT = "dict"
    CSV = "csv"
    JSON = "json"


@dataclass
class TransactionViewRow:
    """One ledger row joined with sender and receiver names"""
    transaction_id: int
    sender: str
    receiver: str
    amount: Decimal
    transaction_date: datetime


@dataclass
class MonthlySpendingRow:
    customer_name: str
    month: int  # 1-12
    total_spent: Decimal


@dataclass
class TopCustomerRow:
    customer_name: str
    transaction_count: int


ReportRow = Union[TransactionViewRow, MonthlySpendingRow, TopCustomerRow]


class ReportingEngine:
    """
    Derived views over customers, accounts and transactions
    """

    def __init__(
        self,
        customer_manager: CustomerManager,
        account_manager: AccountManager,
        transfer_processor: TransferProcessor,
        suspicious_threshold: Decimal = DEFAULT_SUSPICIOUS_THRESHOLD,
        top_customers_limit: int = DEFAULT_TOP_CUSTOMERS_LIMIT
    ):
        self.customer_manager = customer_manager
        self.account_manager = account_manager
        self.transfer_processor = transfer_processor
        self.suspicious_threshold = Decimal(suspicious_threshold)
        self.top_customers_limit = top_customers_limit

    def _owner_names(self) -> Dict[int, str]:
        """Map account id to the owning customer's name"""
        customers = {c.id: c.name for c in self.customer_manager.list_customers()}
        return {
            account.id: customers[account.customer_id]
            for account in self.account_manager.list_accounts()
            if account.customer_id in customers
        }

    def _joined(self) -> List[tuple]:
        """Transactions paired with sender/receiver names, dropping rows that do not join"""
        owners = self._owner_names()
        rows = []
        for transaction in self.transfer_processor.list_transactions():
            sender = owners.get(transaction.from_account_id)
            receiver = owners.get(transaction.to_account_id)
            if sender is None or receiver is None:
                continue
            rows.append((transaction, sender, receiver))
        return rows

    def transaction_view(self) -> List[TransactionViewRow]:
        """Every transaction with sender and receiver names, in insertion order"""
        return [
            TransactionViewRow(
                transaction_id=transaction.id,
                sender=sender,
                receiver=receiver,
                amount=transaction.amount.amount,
                transaction_date=transaction.transaction_date
            )
            for transaction, sender, receiver in self._joined()
        ]

    def monthly_spending(self) -> List[MonthlySpendingRow]:
        """
        Total sent per sender customer name and month number

        Months are grouped by number only (1-12), so the same month in
        different years falls into one bucket. Log rows add zero.
        """
        totals: Dict[tuple, Money] = {}
        for transaction, sender, _ in self._joined():
            key = (sender, transaction.transaction_date.month)
            if key in totals:
                totals[key] = totals[key] + transaction.amount
            else:
                totals[key] = transaction.amount

        return [
            MonthlySpendingRow(customer_name=name, month=month, total_spent=total.amount)
            for (name, month), total in sorted(totals.items(), key=lambda item: item[0])
        ]

    def suspicious_transactions(self, threshold: Optional[Decimal] = None) -> List[TransactionViewRow]:
        """Transaction view rows whose amount exceeds the suspicious threshold"""
        limit = self.suspicious_threshold if threshold is None else Decimal(threshold)
        return [row for row in self.transaction_view() if row.amount > limit]

    def top_customers(self, limit: Optional[int] = None) -> List[TopCustomerRow]:
        """
        Sender customers ranked by number of ledger rows (log rows included)

        Ties keep the order in which customers first appear in the ledger.
        """
        if limit is None:
            limit = self.top_customers_limit
        if limit < 0:
            raise ValidationError("Limit cannot be negative")

        counts: "OrderedDict[str, int]" = OrderedDict()
        for _, sender, _ in self._joined():
            counts[sender] = counts.get(sender, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [
            TopCustomerRow(customer_name=name, transaction_count=count)
            for name, count in ranked[:limit]
        ]

    def export(self, rows: Sequence[ReportRow],
               report_format: ReportFormat = ReportFormat.DICT) -> Union[List[Dict[str, Any]], str]:
        """Render report rows as dictionaries, CSV text or JSON text"""
        records = [serialize_value(asdict(row)) for row in rows]

        if report_format == ReportFormat.DICT:
            return records
        if report_format == ReportFormat.JSON:
            return json.dumps(records, indent=2)

        output = io.StringIO()
        if records:
            writer = csv.DictWriter(output, fieldnames=list(records[0].keys()))
            writer.writeheader()
            writer.writerows(records)
        return output.getvalue()
