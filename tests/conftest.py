"""
Shared fixtures for the MiniBank test suite
"""

from decimal import Decimal

import pytest

from minibank.bank import MiniBank
from minibank.config import MiniBankConfig
from minibank.storage import InMemoryStorage


def make_bank(storage=None, **overrides) -> MiniBank:
    """In-memory MiniBank with optional config overrides"""
    settings = {"storage_backend": "memory"}
    settings.update(overrides)
    return MiniBank(MiniBankConfig(**settings), storage=storage or InMemoryStorage())


def seed_sample_bank(bank: MiniBank):
    """Alice/Bob/Charlie with accounts holding 5000 / 10000 / 7000"""
    alice = bank.open_customer("Alice Johnson", "alice@example.com", "9876543210")
    bob = bank.open_customer("Bob Smith", "bob@example.com", "9876501234")
    charlie = bank.open_customer("Charlie Brown", "charlie@example.com", "9876512345")

    acc1 = bank.open_account(alice, "Savings", Decimal("5000.00"))
    acc2 = bank.open_account(bob, "Current", Decimal("10000.00"))
    acc3 = bank.open_account(charlie, "Savings", Decimal("7000.00"))
    return acc1, acc2, acc3


@pytest.fixture
def bank():
    return make_bank()


@pytest.fixture
def sample_bank():
    bank = make_bank()
    seed_sample_bank(bank)
    return bank
