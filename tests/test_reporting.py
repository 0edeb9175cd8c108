"""
Test suite for reporting module

Tests the joined transaction view, monthly spending, suspicious transactions,
top customers and report export.
"""

import csv
import io
import json

import pytest
from decimal import Decimal
from datetime import datetime, timezone

from minibank.reporting import (
    ReportingEngine, ReportFormat, TransactionViewRow, MonthlySpendingRow, TopCustomerRow
)
from minibank.errors import ValidationError

from conftest import make_bank, seed_sample_bank


def run_scenario(bank):
    acc1, acc2, acc3 = seed_sample_bank(bank)
    bank.transfer(acc1, acc2, Decimal("2000.00"))
    bank.transfer(acc2, acc3, Decimal("3000.00"))
    bank.transfer(acc3, acc1, Decimal("8000.00"))
    return acc1, acc2, acc3


class TestTransactionView:

    def test_empty_ledger(self, bank):
        assert bank.list_transactions_view() == []
        assert bank.monthly_spending() == []
        assert bank.top_customers() == []

    def test_rows_join_names_in_insertion_order(self, bank):
        run_scenario(bank)

        rows = bank.list_transactions_view()
        assert [(r.transaction_id, r.sender, r.receiver, r.amount) for r in rows] == [
            (1, "Alice Johnson", "Bob Smith", Decimal("2000.00")),
            (2, "Bob Smith", "Charlie Brown", Decimal("3000.00")),
            (3, "Charlie Brown", "Alice Johnson", Decimal("8000.00")),
            (4, "Charlie Brown", "Alice Johnson", Decimal("0.00")),
        ]
        assert all(isinstance(r.transaction_date, datetime) for r in rows)

    def test_view_reflects_later_transfers(self, bank):
        acc1, acc2, _ = seed_sample_bank(bank)
        bank.transfer(acc1, acc2, Decimal("1"))
        assert len(bank.list_transactions_view()) == 1

        bank.transfer(acc2, acc1, Decimal("1"))
        assert len(bank.list_transactions_view()) == 2

    def test_reports_are_idempotent(self, bank):
        run_scenario(bank)
        assert bank.list_transactions_view() == bank.list_transactions_view()
        assert bank.monthly_spending() == bank.monthly_spending()
        assert bank.top_customers() == bank.top_customers()


class TestMonthlySpending:

    def test_totals_per_sender(self, bank):
        run_scenario(bank)
        month = datetime.now(timezone.utc).month

        assert bank.monthly_spending() == [
            MonthlySpendingRow("Alice Johnson", month, Decimal("2000.00")),
            MonthlySpendingRow("Bob Smith", month, Decimal("3000.00")),
            MonthlySpendingRow("Charlie Brown", month, Decimal("8000.00")),
        ]

    def test_repeat_transfers_accumulate(self, bank):
        acc1, acc2, _ = seed_sample_bank(bank)
        bank.transfer(acc1, acc2, Decimal("100.25"))
        bank.transfer(acc1, acc2, Decimal("200.50"))

        rows = bank.monthly_spending()
        assert len(rows) == 1
        assert rows[0].customer_name == "Alice Johnson"
        assert rows[0].total_spent == Decimal("300.75")

    def test_same_month_number_merges_across_years(self, sample_bank):
        sample_bank.transfer(1, 2, Decimal("10"))
        sample_bank.transfer(1, 2, Decimal("20"))

        # Backdate the first row by one year
        record = sample_bank.storage.load("transactions", 1)
        moved = datetime.fromisoformat(record["transaction_date"])
        record["transaction_date"] = moved.replace(year=moved.year - 1).isoformat()
        sample_bank.storage.save("transactions", 1, record)

        rows = sample_bank.monthly_spending()
        assert len(rows) == 1
        assert rows[0].total_spent == Decimal("30.00")


class TestSuspiciousTransactions:

    def test_none_above_default_threshold(self, bank):
        run_scenario(bank)
        assert bank.suspicious_transactions() == []

    def test_strictly_greater_than_threshold(self, bank):
        acc1, acc2, _ = seed_sample_bank(bank)
        bank.transfer(acc2, acc1, Decimal("10000.00"))
        assert bank.suspicious_transactions() == []

    def test_configured_threshold(self):
        bank = make_bank(suspicious_transaction_threshold="5000.00")
        run_scenario(bank)

        rows = bank.suspicious_transactions()
        assert len(rows) == 1
        assert rows[0].transaction_id == 3
        assert rows[0].amount == Decimal("8000.00")

    def test_threshold_argument(self, bank):
        run_scenario(bank)
        rows = bank.reporting_engine.suspicious_transactions(threshold=Decimal("2500"))
        assert [r.transaction_id for r in rows] == [2, 3]


class TestTopCustomers:

    def test_ranking_counts_log_rows(self, bank):
        run_scenario(bank)
        assert bank.top_customers() == [
            TopCustomerRow("Charlie Brown", 2),
            TopCustomerRow("Alice Johnson", 1),
            TopCustomerRow("Bob Smith", 1),
        ]

    def test_limit(self, bank):
        run_scenario(bank)
        assert [r.customer_name for r in bank.top_customers(limit=1)] == ["Charlie Brown"]
        assert bank.top_customers(limit=0) == []

    def test_default_limit_is_five(self, bank):
        accounts = []
        for i in range(7):
            customer_id = bank.open_customer(f"Customer {i}", f"c{i}@example.com")
            accounts.append(bank.open_account(customer_id, "Savings", Decimal("100")))
        for i, account_id in enumerate(accounts):
            bank.transfer(account_id, accounts[(i + 1) % 7], Decimal("1"))

        assert len(bank.top_customers()) == 5

    def test_negative_limit_rejected(self, bank):
        with pytest.raises(ValidationError):
            bank.top_customers(limit=-1)

    def test_customers_sharing_a_name_are_grouped(self, bank):
        first = bank.open_customer("Sam Lee", "sam1@example.com")
        second = bank.open_customer("Sam Lee", "sam2@example.com")
        other = bank.open_customer("Dana", "dana@example.com")
        a1 = bank.open_account(first, "Savings", Decimal("100"))
        a2 = bank.open_account(second, "Savings", Decimal("100"))
        a3 = bank.open_account(other, "Current", Decimal("100"))

        bank.transfer(a3, a1, Decimal("1"))
        bank.transfer(a1, a3, Decimal("1"))
        bank.transfer(a2, a3, Decimal("1"))

        assert bank.top_customers() == [TopCustomerRow("Sam Lee", 2), TopCustomerRow("Dana", 1)]


class TestExport:

    def setup_method(self):
        self.bank = make_bank()
        run_scenario(self.bank)
        self.engine: ReportingEngine = self.bank.reporting_engine

    def test_dict_export(self):
        records = self.engine.export(self.engine.top_customers())
        assert records[0] == {"customer_name": "Charlie Brown", "transaction_count": 2}

    def test_csv_export(self):
        text = self.engine.export(self.engine.transaction_view(), ReportFormat.CSV)
        rows = list(csv.DictReader(io.StringIO(text)))

        assert len(rows) == 4
        assert rows[0]["sender"] == "Alice Johnson"
        assert rows[0]["amount"] == "2000.00"
        assert rows[3]["amount"] == "0.00"

    def test_json_export(self):
        text = self.engine.export(self.engine.monthly_spending(), ReportFormat.JSON)
        data = json.loads(text)
        assert [d["total_spent"] for d in data] == ["2000.00", "3000.00", "8000.00"]

    def test_empty_csv_export(self):
        assert self.engine.export([], ReportFormat.CSV) == ""

    def test_view_row_serializes_date(self):
        row = self.engine.transaction_view()[0]
        assert isinstance(row, TransactionViewRow)
        exported = self.engine.export([row])[0]
        assert exported["transaction_date"] == row.transaction_date.isoformat()
