"""
Account Store Module

Active accounts keyed by their sequential integer id, plus the archive of
deleted accounts' logs. An id lives in at most one of the two.
"""

from typing import Dict, Iterator, List, Optional

from .activity_log import ActivityLog, LogArchive
from .errors import AccountNotFoundError
from .models import Account, normalize_identity


class AccountStore:
    """
    In-memory collection of active accounts and archived logs
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self.archive = LogArchive()

    def add(self, account: Account) -> None:
        """Insert a new active account"""
        account_id = account.account_id
        if account_id in self._accounts or account_id in self.archive:
            raise ValueError(f"Account id {account_id} is already assigned")
        self._accounts[account_id] = account

    def get(self, account_id: int) -> Optional[Account]:
        return self._accounts.get(account_id)

    def find(self, account_id: int) -> Account:
        """Look up an active account, raising if it does not exist"""
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found", account_id)
        return account

    def find_by_identity(self, identity_number: str,
                         exclude_id: Optional[int] = None) -> Optional[Account]:
        """Find the active account holding an identity number, if any"""
        identity = normalize_identity(identity_number)
        for account in self._accounts.values():
            if account.account_id != exclude_id and account.identity_number == identity:
                return account
        return None

    def remove(self, account_id: int) -> Account:
        """
        Detach an account and move its log into the archive

        Returns the detached account, whose activity log is left empty.
        """
        account = self.find(account_id)
        del self._accounts[account_id]
        self.archive.add(account_id, account.activity_log.entries())
        account.activity_log = ActivityLog()
        return account

    def restore(self, account: Account, position: int) -> None:
        """Undo remove(): take the log back from the archive and re-insert"""
        entries = self.archive.discard(account.account_id)
        account.activity_log = ActivityLog(entries)
        items = list(self._accounts.items())
        items.insert(position, (account.account_id, account))
        self._accounts = dict(items)

    def position_of(self, account_id: int) -> int:
        return list(self._accounts).index(account_id)

    def discard(self, account_id: int) -> Account:
        """Drop an active account without archiving. Only used to undo a create."""
        return self._accounts.pop(account_id)

    def max_assigned_id(self) -> int:
        """Highest id ever assigned, active or archived"""
        return max([0, *self._accounts, *self.archive.ids()])

    def next_id(self) -> int:
        return self.max_assigned_id() + 1

    def accounts(self) -> List[Account]:
        """Active accounts in store order"""
        return list(self._accounts.values())

    def clear(self) -> None:
        self._accounts = {}
        self.archive = LogArchive()

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts())

    def __len__(self) -> int:
        return len(self._accounts)
