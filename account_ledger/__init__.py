"""
Account Ledger

An in-memory account ledger with append-only activity logs, deleted-account
log retention, and binary-file persistence with rollback on storage failure.
"""

__version__ = "1.0.0"
