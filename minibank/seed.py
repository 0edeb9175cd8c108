"""Seed script for the MiniBank sample ledger

Loads the three sample customers and accounts, runs the demo transfers and
prints every report. When the sample customers already exist the seeding
step is skipped and only the reports are printed.

Run with: python -m minibank.seed
"""

from decimal import Decimal
from typing import List, Tuple

from .bank import MiniBank
from .config import get_config
from .errors import MiniBankError, InsufficientBalanceError
from .reporting import ReportFormat
from .logging_config import setup_logging


SAMPLE_CUSTOMERS = [
    ("Alice Johnson", "alice@example.com", "9876543210"),
    ("Bob Smith", "bob@example.com", "9876501234"),
    ("Charlie Brown", "charlie@example.com", "9876512345"),
]

SAMPLE_ACCOUNTS = [
    # (customer index, account type, opening balance)
    (0, "Savings", Decimal("5000.00")),
    (1, "Current", Decimal("10000.00")),
    (2, "Savings", Decimal("7000.00")),
]

# (sender account index, receiver account index, amount)
DEMO_TRANSFERS = [
    (0, 1, Decimal("2000.00")),
    (1, 2, Decimal("3000.00")),
    (2, 0, Decimal("8000.00")),
    (2, 0, Decimal("999999.00")),
]


def sample_data_loaded(bank: MiniBank) -> bool:
    """True when any sample customer is already registered"""
    return any(
        bank.customer_manager.get_customer_by_email(email) is not None
        for _, email, _ in SAMPLE_CUSTOMERS
    )


def seed_sample_data(bank: MiniBank) -> List[int]:
    """Create the sample customers and accounts, returning account ids in order"""
    customer_ids = [bank.open_customer(name, email, phone) for name, email, phone in SAMPLE_CUSTOMERS]
    return [
        bank.open_account(customer_ids[index], account_type, balance)
        for index, account_type, balance in SAMPLE_ACCOUNTS
    ]


def run_demo_transfers(bank: MiniBank, account_ids: List[int]) -> List[Tuple[int, int, Decimal, str]]:
    """Run the demo transfers, returning (from, to, amount, outcome) per transfer"""
    results = []
    for sender, receiver, amount in DEMO_TRANSFERS:
        from_id, to_id = account_ids[sender], account_ids[receiver]
        try:
            transaction_id = bank.transfer(from_id, to_id, amount)
            outcome = f"transaction {transaction_id}"
        except InsufficientBalanceError as e:
            outcome = str(e)
        results.append((from_id, to_id, amount, outcome))
    return results


def main():
    config = get_config()
    setup_logging(config.log_level, "text", config.log_file)
    bank = MiniBank(config)

    try:
        if sample_data_loaded(bank):
            print("Sample data already loaded, skipping seed and demo transfers")
        else:
            account_ids = seed_sample_data(bank)
            for from_id, to_id, amount, outcome in run_demo_transfers(bank, account_ids):
                print(f"Transfer {from_id} -> {to_id} of {amount}: {outcome}")

        engine = bank.reporting_engine
        reports = [
            ("TransactionView", engine.transaction_view()),
            ("MonthlySpending", engine.monthly_spending()),
            ("SuspiciousTransactions", engine.suspicious_transactions()),
            ("TopCustomers", engine.top_customers()),
        ]
        for title, rows in reports:
            print(f"\n== {title} ==")
            print(engine.export(rows, report_format=ReportFormat.CSV))
    except MiniBankError as e:
        print(f"Error during seeding: {e}")
    finally:
        bank.close()


if __name__ == "__main__":
    main()
