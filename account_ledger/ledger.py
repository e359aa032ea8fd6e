"""
Ledger Module

Account lifecycle and money movement over the account store. Every mutating
operation validates fully before touching state, applies the change, appends
to the account's activity log and persists the whole store. If persisting
fails the in-memory change is rolled back, a failure entry is logged on the
account and StorageFailureError propagates.

Validation order for money movement is fixed so that exactly one error
applies per call: existence, PIN, amount shape, funds, persistence.
"""

from dataclasses import replace
from typing import Callable, List, Optional

from .activity_log import LogEntry
from .config import LedgerConfig, get_config
from .errors import (
    AccountNotFoundError, BadPinError, DestinationNotFoundError,
    DuplicateIdentityError, InsufficientFundsError, InvalidAmountError,
    LedgerError, NoLogsError, SelfTransferError, StorageFailureError
)
from .logging_config import get_logger, log_action
from .models import (
    INT64_MAX, Account, AccountProfile, format_account_number, validate_pin
)
from .storage import StorageInterface
from .store import AccountStore


class Ledger:
    """
    The bank: owns the account store and enforces the business rules
    """

    def __init__(self, storage: StorageInterface, config: Optional[LedgerConfig] = None):
        self.storage = storage
        self.config = config or get_config()
        self.store = AccountStore()
        self.logger = get_logger("account_ledger.ledger")

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory state with the persisted resources"""
        self.store.clear()
        self.storage.load(self.store)
        log_action(
            self.logger, "info", "Ledger loaded",
            action="load",
            extra={
                "accounts": len(self.store),
                "archived": len(self.store.archive),
                "next_id": self.store.next_id()
            }
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_account(self, account_id: int) -> Account:
        return self.store.find(account_id)

    def account_exists(self, account_id: int) -> bool:
        return account_id in self.store

    def is_archived(self, account_id: int) -> bool:
        return account_id in self.store.archive

    def list_accounts(self) -> List[Account]:
        return self.store.accounts()

    def max_assigned_id(self) -> int:
        return self.store.max_assigned_id()

    def generate_next_id(self) -> int:
        return self.store.next_id()

    def check_pin(self, account_id: int, pin: int) -> Account:
        """Authenticate against an account without touching it"""
        return self._authenticate(account_id, pin, "check_pin")

    def get_balance(self, account_id: int, pin: int) -> int:
        account = self._authenticate(account_id, pin, "get_balance")
        return account.balance

    def mini_statement(self, account_id: int, pin: int,
                       count: Optional[int] = None) -> List[LogEntry]:
        """
        Most recent log entries of an account, oldest first

        Args:
            account_id: Account to read
            pin: Account PIN
            count: Number of entries (defaults to the configured statement size)

        Raises:
            AccountNotFoundError, BadPinError, NoLogsError
        """
        account = self._authenticate(account_id, pin, "mini_statement")
        if not account.activity_log:
            raise self._reject("mini_statement", NoLogsError(
                f"Account {account_id} has no log entries", account_id))
        if count is None:
            count = self.config.mini_statement_size
        return account.activity_log.tail(count)

    def view_logs(self, account_id: int) -> List[LogEntry]:
        """Full log of an active account, or of a deleted one from the archive"""
        account = self.store.get(account_id)
        if account is not None:
            return list(account.activity_log)
        archived = self.store.archive.get(account_id)
        if archived is not None:
            return list(archived)
        raise self._reject("view_logs", AccountNotFoundError(
            f"No logs found for account {account_id}", account_id))

    # ------------------------------------------------------------------
    # Account lifecycle
    # ------------------------------------------------------------------

    def create_account(self, profile: AccountProfile, pin: int, initial_balance: int) -> int:
        """
        Open a new account and return its id

        Raises:
            DuplicateIdentityError: An active account holds the identity number
            InvalidAmountError: Opening balance below the configured minimum
            StorageFailureError: Nothing was created
            ValueError: PIN outside 0000-9999; the console only passes
                four-digit PINs, so this signals a caller bug
        """
        if (not self._is_int(initial_balance) or initial_balance < 0
                or initial_balance < self.config.minimum_opening_balance
                or initial_balance > INT64_MAX):
            raise self._reject("create_account", InvalidAmountError(
                f"Opening balance must be at least {self.config.minimum_opening_balance}"))

        existing = self.store.find_by_identity(profile.identity_number)
        if existing is not None:
            raise self._reject("create_account", DuplicateIdentityError(
                f"Identity {profile.identity_number} already belongs to account "
                f"{existing.account_number}", existing.account_id))
        validate_pin(pin)

        account = Account(
            account_id=self.store.next_id(),
            profile=replace(profile),
            pin=pin,
            balance=initial_balance
        )
        account.activity_log.record("Account created")
        self.store.add(account)

        self._commit(
            "create_account", account.account_id,
            rollback=lambda: self.store.discard(account.account_id)
        )
        return account.account_id

    def delete_account(self, account_id: int) -> None:
        """Remove an account; its log moves to the archive"""
        account = self._find(account_id, "delete_account")
        position = self.store.position_of(account_id)

        account.activity_log.record("Account deleted")
        self.store.remove(account_id)

        def rollback():
            self.store.restore(account, position)
            account.activity_log.pop_last()

        self._commit(
            "delete_account", account_id, rollback,
            failed=[account], failure_message="Account deletion failed"
        )

    def change_info(self, account_id: int, profile: AccountProfile,
                    new_pin: Optional[int] = None) -> None:
        """
        Replace the holder details of an account, optionally resetting its PIN

        Raises:
            AccountNotFoundError, DuplicateIdentityError, StorageFailureError
        """
        account = self._find(account_id, "change_info")
        if new_pin is not None:
            validate_pin(new_pin)

        other = self.store.find_by_identity(profile.identity_number, exclude_id=account_id)
        if other is not None:
            raise self._reject("change_info", DuplicateIdentityError(
                f"Identity {profile.identity_number} already belongs to account "
                f"{other.account_number}", account_id))

        old_profile, old_pin = account.profile, account.pin
        account.profile = replace(profile)
        if new_pin is not None:
            account.pin = new_pin
        account.activity_log.record("Info changed")

        def rollback():
            account.profile = old_profile
            account.pin = old_pin
            account.activity_log.pop_last()

        self._commit(
            "change_info", account_id, rollback,
            failed=[account], failure_message="Info change failed"
        )

    def change_pin(self, account_id: int, old_pin: int, new_pin: int) -> None:
        account = self._authenticate(account_id, old_pin, "change_pin")
        validate_pin(new_pin)

        account.pin = new_pin
        account.activity_log.record("PIN changed")

        def rollback():
            account.pin = old_pin
            account.activity_log.pop_last()

        self._commit(
            "change_pin", account_id, rollback,
            failed=[account], failure_message="PIN change failed"
        )

    # ------------------------------------------------------------------
    # Money movement
    # ------------------------------------------------------------------

    def deposit(self, account_id: int, pin: int, amount: int) -> int:
        """
        Credit an account and return the new balance

        Raises:
            AccountNotFoundError, BadPinError, InvalidAmountError, StorageFailureError
        """
        account = self._authenticate(account_id, pin, "deposit")
        self._validate_amount(amount, account_id, "deposit")
        self._validate_credit(account, amount, "deposit")

        before = account.balance
        account.balance += amount
        account.activity_log.record(
            f"Deposit +{self._money(amount)}, before={self._money(before)}, "
            f"after={self._money(account.balance)}")

        def rollback():
            account.balance = before
            account.activity_log.pop_last()

        self._commit(
            "deposit", account_id, rollback,
            failed=[account], failure_message=f"Deposit +{self._money(amount)} failed",
            extra={"amount": amount, "balance": account.balance}
        )
        return account.balance

    def withdraw(self, account_id: int, pin: int, amount: int) -> int:
        """
        Debit an account and return the new balance

        Raises:
            AccountNotFoundError, BadPinError, InvalidAmountError,
            InsufficientFundsError, StorageFailureError
        """
        account = self._authenticate(account_id, pin, "withdraw")
        self._validate_amount(amount, account_id, "withdraw")
        self._validate_debit(account, amount, "withdraw")

        before = account.balance
        account.balance -= amount
        account.activity_log.record(
            f"Withdraw -{self._money(amount)}, before={self._money(before)}, "
            f"after={self._money(account.balance)}")

        def rollback():
            account.balance = before
            account.activity_log.pop_last()

        self._commit(
            "withdraw", account_id, rollback,
            failed=[account], failure_message=f"Withdraw -{self._money(amount)} failed",
            extra={"amount": amount, "balance": account.balance}
        )
        return account.balance

    def transfer(self, source_id: int, pin: int, destination_id: int, amount: int) -> int:
        """
        Move funds between two accounts and return the new source balance

        Both legs are persisted together and reversed together.

        Raises:
            AccountNotFoundError, SelfTransferError, DestinationNotFoundError,
            BadPinError, InvalidAmountError, InsufficientFundsError,
            StorageFailureError
        """
        source = self._find(source_id, "transfer")
        if destination_id == source_id:
            raise self._reject("transfer", SelfTransferError(
                "Cannot transfer to the same account", source_id))
        destination = self.store.get(destination_id)
        if destination is None:
            raise self._reject("transfer", DestinationNotFoundError(
                f"Destination account {destination_id} not found", destination_id))
        self._verify_pin(source, pin, "transfer")
        self._validate_amount(amount, source_id, "transfer")
        self._validate_debit(source, amount, "transfer")
        self._validate_credit(destination, amount, "transfer")

        source_before = source.balance
        destination_before = destination.balance
        source.balance -= amount
        destination.balance += amount
        source.activity_log.record(
            f"Transfer -{self._money(amount)} to account {format_account_number(destination_id)}, "
            f"before={self._money(source_before)}, after={self._money(source.balance)}")
        destination.activity_log.record(
            f"Transfer +{self._money(amount)} from account {format_account_number(source_id)}, "
            f"before={self._money(destination_before)}, after={self._money(destination.balance)}")

        def rollback():
            source.balance = source_before
            destination.balance = destination_before
            source.activity_log.pop_last()
            destination.activity_log.pop_last()

        self._commit(
            "transfer", source_id, rollback,
            failed=[source],
            failure_message=(f"Transfer -{self._money(amount)} to account "
                             f"{format_account_number(destination_id)} failed"),
            extra={"amount": amount, "destination": destination_id}
        )
        return source.balance

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, account_id: int, action: str) -> Account:
        try:
            return self.store.find(account_id)
        except AccountNotFoundError as e:
            raise self._reject(action, e)

    def _authenticate(self, account_id: int, pin: int, action: str) -> Account:
        account = self._find(account_id, action)
        self._verify_pin(account, pin, action)
        return account

    def _verify_pin(self, account: Account, pin: int, action: str) -> None:
        if not account.verify_pin(pin):
            raise self._reject(action, BadPinError(
                f"Wrong PIN for account {account.account_number}", account.account_id))

    def _validate_amount(self, amount: int, account_id: int, action: str) -> None:
        if not self._is_int(amount) or amount <= 0:
            raise self._reject(action, InvalidAmountError(
                "Amount must be a positive whole number", account_id))
        step = self.config.denomination
        if step > 1 and amount % step:
            raise self._reject(action, InvalidAmountError(
                f"Amount must be a multiple of {step}", account_id))

    def _validate_debit(self, account: Account, amount: int, action: str) -> None:
        floor = max(0, self.config.minimum_balance)
        if account.balance - amount < floor:
            raise self._reject(action, InsufficientFundsError(
                f"Insufficient funds: balance {self._money(account.balance)}, "
                f"requested {self._money(amount)}", account.account_id))

    def _validate_credit(self, account: Account, amount: int, action: str) -> None:
        if account.balance + amount > INT64_MAX:
            raise self._reject(action, InvalidAmountError(
                "Amount would overflow the account balance", account.account_id))

    def _commit(self, action: str, account_id: int, rollback: Callable[[], object],
                failed: Optional[List[Account]] = None, failure_message: str = "",
                extra: Optional[dict] = None) -> None:
        """Persist the store, undoing the in-memory change if that fails"""
        try:
            self.storage.save(self.store)
        except StorageFailureError as e:
            rollback()
            for account in failed or []:
                account.activity_log.record(f"{failure_message}: storage error")
            e.account_id = account_id
            log_action(
                self.logger, "error", f"{action} rolled back: {e}",
                action=action, resource=f"account:{account_id}"
            )
            raise

        log_action(
            self.logger, "info", f"{action} completed",
            action=action, resource=f"account:{account_id}", extra=extra
        )

    def _reject(self, action: str, error: LedgerError) -> LedgerError:
        log_action(
            self.logger, "warning", f"{action} refused: {error}",
            action=action,
            resource=f"account:{error.account_id}" if error.account_id is not None else None,
            extra={"code": error.code.value}
        )
        return error

    def _money(self, amount: int) -> str:
        return f"{self.config.currency_label} {amount}"

    @staticmethod
    def _is_int(value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)
