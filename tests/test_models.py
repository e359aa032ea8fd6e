"""
Test suite for the account data model

Tests profile normalization and validation, account invariants and the
display helpers.
"""

import pytest

from account_ledger.models import (
    Account, AccountProfile, AccountType, Gender,
    format_account_number, format_pin, normalize_identity
)


def make_profile(**overrides):
    fields = {
        "holder_name": "Ali Hassan",
        "identity_number": "ab12345",
        "gender": Gender.MALE,
        "account_type": AccountType.SAVINGS,
    }
    fields.update(overrides)
    return AccountProfile(**fields)


class TestAccountProfile:
    """Test profile validation"""
    
    def test_identity_is_normalized(self):
        """Identity numbers are uppercased with whitespace removed"""
        profile = make_profile(identity_number=" ab 123 45 ")
        assert profile.identity_number == "AB12345"
    
    def test_name_whitespace_collapsed(self):
        profile = make_profile(holder_name="  Sara   Lee ")
        assert profile.holder_name == "Sara Lee"
    
    def test_stored_forms_accepted(self):
        """Single-character gender and type labels convert to enums"""
        profile = make_profile(gender="f", account_type="Current")
        assert profile.gender == Gender.FEMALE
        assert profile.account_type == AccountType.CURRENT
    
    @pytest.mark.parametrize("name", ["", "Al B", "John3 Doe", "Anne-Marie"])
    def test_invalid_names_rejected(self, name):
        with pytest.raises(ValueError):
            make_profile(holder_name=name)
    
    @pytest.mark.parametrize("identity", ["AB123", "AB1234567X", "AB-1234", ""])
    def test_invalid_identity_rejected(self, identity):
        with pytest.raises(ValueError, match="6-9"):
            make_profile(identity_number=identity)
    
    def test_invalid_gender_rejected(self):
        with pytest.raises(ValueError):
            make_profile(gender="X")


class TestAccount:
    """Test Account invariants"""
    
    def test_valid_account(self):
        account = Account(account_id=7, profile=make_profile(), pin=42, balance=500)
        
        assert account.account_number == "0007"
        assert account.holder_name == "Ali Hassan"
        assert account.identity_number == "AB12345"
        assert account.verify_pin(42)
        assert not account.verify_pin(1234)
        assert len(account.activity_log) == 0
    
    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Account(account_id=1, profile=make_profile(), pin=1234, balance=-1)
    
    @pytest.mark.parametrize("pin", [-1, 10000, True])
    def test_invalid_pin_rejected(self, pin):
        with pytest.raises(ValueError, match="4-digit"):
            Account(account_id=1, profile=make_profile(), pin=pin)
    
    def test_non_positive_id_rejected(self):
        with pytest.raises(ValueError):
            Account(account_id=0, profile=make_profile(), pin=1234)
    
    def test_summary_hides_identity_and_pin(self):
        account = Account(account_id=3, profile=make_profile(), pin=1234, balance=900)
        
        summary = account.summary()
        assert "AB12345" not in summary
        assert "1234" not in summary
        assert "RM 900" in summary
        
        details = account.details("USD")
        assert "Passport No: AB12345" in details
        assert "Type: Savings" in details
        assert "USD 900" in details


def test_formatting_helpers():
    assert format_account_number(12) == "0012"
    assert format_account_number(123456) == "123456"
    assert format_pin(7) == "0007"
    assert normalize_identity("x1 y2\tz3") == "X1Y2Z3"
