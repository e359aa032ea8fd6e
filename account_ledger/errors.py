"""
Ledger Error Module

Result codes returned to the menu layer and the exception hierarchy that
carries them. Every ledger failure maps to exactly one ResultCode.
"""

from enum import Enum
from typing import Optional


class ResultCode(Enum):
    """Outcome of a ledger operation"""
    OK = "ok"
    NOT_FOUND = "not_found"
    BAD_PIN = "bad_pin"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SELF_TRANSFER = "self_transfer"
    DESTINATION_NOT_FOUND = "destination_not_found"
    DUPLICATE_IDENTITY = "duplicate_identity"
    STORAGE_FAILURE = "storage_failure"
    NO_LOGS = "no_logs"


class LedgerError(Exception):
    """Base exception for all ledger failures"""
    code: ResultCode = ResultCode.OK

    def __init__(self, message: str, account_id: Optional[int] = None):
        super().__init__(message)
        self.account_id = account_id


class AccountNotFoundError(LedgerError):
    """No active account with the given id"""
    code = ResultCode.NOT_FOUND


class DestinationNotFoundError(AccountNotFoundError):
    """Transfer destination does not exist"""
    code = ResultCode.DESTINATION_NOT_FOUND


class BadPinError(LedgerError):
    """PIN does not match"""
    code = ResultCode.BAD_PIN


class InvalidAmountError(LedgerError):
    """Amount is non-positive or breaks the denomination rule"""
    code = ResultCode.INVALID_AMOUNT


class InsufficientFundsError(LedgerError):
    """Debit would take the balance below the configured floor"""
    code = ResultCode.INSUFFICIENT_FUNDS


class SelfTransferError(LedgerError):
    """Source and destination of a transfer are the same account"""
    code = ResultCode.SELF_TRANSFER


class DuplicateIdentityError(LedgerError):
    """Another active account already holds the identity number"""
    code = ResultCode.DUPLICATE_IDENTITY


class StorageFailureError(LedgerError):
    """Persisting the store failed; the in-memory change was rolled back"""
    code = ResultCode.STORAGE_FAILURE


class NoLogsError(LedgerError):
    """Account has no activity log entries"""
    code = ResultCode.NO_LOGS
