"""
Test suite for the account store

Tests id assignment, identity lookup and the move of logs into the archive.
"""

import pytest

from account_ledger.errors import AccountNotFoundError, ResultCode
from account_ledger.models import Account, AccountProfile, AccountType, Gender
from account_ledger.store import AccountStore


def make_account(account_id, identity="AB12345", balance=500):
    profile = AccountProfile(
        holder_name="Test Holder",
        identity_number=identity,
        gender=Gender.FEMALE,
        account_type=AccountType.CURRENT,
    )
    return Account(account_id=account_id, profile=profile, pin=1234, balance=balance)


class TestAccountStore:
    """Test AccountStore functionality"""
    
    def setup_method(self):
        """Set up test fixtures"""
        self.store = AccountStore()
    
    def test_empty_store(self):
        assert len(self.store) == 0
        assert self.store.max_assigned_id() == 0
        assert self.store.next_id() == 1
    
    def test_add_and_find(self):
        account = make_account(1)
        self.store.add(account)
        
        assert self.store.find(1) is account
        assert self.store.get(2) is None
        assert 1 in self.store
        assert list(self.store) == [account]
    
    def test_find_missing_raises(self):
        with pytest.raises(AccountNotFoundError) as exc_info:
            self.store.find(99)
        assert exc_info.value.code == ResultCode.NOT_FOUND
        assert exc_info.value.account_id == 99
    
    def test_duplicate_id_rejected(self):
        self.store.add(make_account(1))
        with pytest.raises(ValueError, match="already assigned"):
            self.store.add(make_account(1, identity="ZZ99999"))
    
    def test_find_by_identity(self):
        self.store.add(make_account(1, identity="AB12345"))
        self.store.add(make_account(2, identity="CD67890"))
        
        assert self.store.find_by_identity("ab 12345").account_id == 1
        assert self.store.find_by_identity("AB12345", exclude_id=1) is None
        assert self.store.find_by_identity("EF00000") is None
    
    def test_remove_moves_log_to_archive(self):
        account = make_account(1)
        account.activity_log.record("Account created")
        account.activity_log.record("Account deleted")
        self.store.add(account)
        
        removed = self.store.remove(1)
        
        assert removed is account
        assert 1 not in self.store
        assert 1 in self.store.archive
        assert [e.message for e in self.store.archive.get(1)] == ["Account created", "Account deleted"]
        # The log belongs to the archive only
        assert len(removed.activity_log) == 0
    
    def test_removed_id_cannot_be_reused(self):
        self.store.add(make_account(1))
        self.store.remove(1)
        
        with pytest.raises(ValueError):
            self.store.add(make_account(1))
    
    def test_max_id_includes_archived(self):
        for account_id in (1, 2, 3):
            self.store.add(make_account(account_id, identity=f"ID0000{account_id}"))
        self.store.remove(3)
        
        assert self.store.max_assigned_id() == 3
        assert self.store.next_id() == 4
    
    def test_restore_undoes_remove(self):
        for account_id in (1, 2, 3):
            self.store.add(make_account(account_id, identity=f"ID0000{account_id}"))
        account = self.store.find(2)
        account.activity_log.record("Account created")
        position = self.store.position_of(2)
        
        self.store.remove(2)
        self.store.restore(account, position)
        
        assert [a.account_id for a in self.store] == [1, 2, 3]
        assert 2 not in self.store.archive
        assert [e.message for e in account.activity_log] == ["Account created"]
    
    def test_clear(self):
        self.store.add(make_account(1))
        self.store.remove(1)
        self.store.clear()
        
        assert len(self.store) == 0
        assert len(self.store.archive) == 0
