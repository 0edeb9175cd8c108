"""
MiniBank

A small banking ledger: customers, Savings/Current accounts, atomic transfers
with large-transfer logging, and read-only reports over the ledger.
"""

__version__ = "1.0.0"
