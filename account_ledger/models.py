"""
Account Data Model Module

Account records, their editable profile, and the display helpers the menu
layer uses to render them. Balances are whole currency units.
"""

from dataclasses import dataclass, field
from enum import Enum
import re

from .activity_log import ActivityLog


MAX_PIN = 9999
INT64_MAX = 2 ** 63 - 1

_NAME_PATTERN = re.compile(r'^[A-Za-z ]+$')
_IDENTITY_PATTERN = re.compile(r'^[A-Z0-9]{6,9}$')


class Gender(Enum):
    """Account holder gender, stored as a single character"""
    MALE = "M"
    FEMALE = "F"

    @property
    def label(self) -> str:
        return "Male" if self is Gender.MALE else "Female"


class AccountType(Enum):
    """Deposit account types"""
    CURRENT = "Current"
    SAVINGS = "Savings"


def normalize_identity(identity_number: str) -> str:
    """Uppercase and strip all whitespace from a passport/ID number"""
    return "".join(identity_number.split()).upper()


def format_account_number(account_id: int) -> str:
    """Zero-padded account number as shown to operators"""
    return f"{account_id:04d}"


def format_pin(pin: int) -> str:
    """Zero-padded PIN, for the admin account listing only"""
    return f"{pin:04d}"


def validate_pin(pin: int) -> int:
    if isinstance(pin, bool) or not isinstance(pin, int) or not 0 <= pin <= MAX_PIN:
        raise ValueError("PIN must be a 4-digit number")
    return pin


@dataclass
class AccountProfile:
    """
    Editable holder details of an account

    Normalizes the identity number and validates every field on construction.
    """
    holder_name: str
    identity_number: str
    gender: Gender
    account_type: AccountType

    def __post_init__(self):
        self.holder_name = " ".join(self.holder_name.split())
        if not self.holder_name or not _NAME_PATTERN.match(self.holder_name):
            raise ValueError("Holder name must contain letters and spaces only")
        if sum(1 for ch in self.holder_name if ch.isalpha()) < 4:
            raise ValueError("Holder name must have at least 4 letters")

        self.identity_number = normalize_identity(self.identity_number)
        if not _IDENTITY_PATTERN.match(self.identity_number):
            raise ValueError("Identity number must be 6-9 letters/digits")

        # Accept the stored single-character / label forms as well as enums
        if not isinstance(self.gender, Gender):
            self.gender = Gender(str(self.gender).upper()[:1])
        if not isinstance(self.account_type, AccountType):
            self.account_type = AccountType(str(self.account_type).capitalize())


@dataclass
class Account:
    """
    Active bank account

    The activity log is owned by the account until deletion, when it moves
    to the archive.
    """
    account_id: int
    profile: AccountProfile
    pin: int
    balance: int = 0
    activity_log: ActivityLog = field(default_factory=ActivityLog)

    def __post_init__(self):
        if self.account_id <= 0:
            raise ValueError("Account id must be positive")
        validate_pin(self.pin)
        if not 0 <= self.balance <= INT64_MAX:
            raise ValueError("Balance must be a non-negative 64-bit integer")

    @property
    def holder_name(self) -> str:
        return self.profile.holder_name

    @property
    def identity_number(self) -> str:
        return self.profile.identity_number

    @property
    def gender(self) -> Gender:
        return self.profile.gender

    @property
    def account_type(self) -> AccountType:
        return self.profile.account_type

    @property
    def account_number(self) -> str:
        return format_account_number(self.account_id)

    def verify_pin(self, pin: int) -> bool:
        return self.pin == pin

    def summary(self, currency_label: str = "RM") -> str:
        """One-line description without identity number or PIN"""
        return (f"Account No: {self.account_number}; Name: {self.holder_name}; "
                f"Gender: {self.gender.label}; Balance: {currency_label} {self.balance}")

    def details(self, currency_label: str = "RM") -> str:
        """Full description for staff and admin"""
        return (f"Account No: {self.account_number}; Name: {self.holder_name}; "
                f"Passport No: {self.identity_number}; Gender: {self.gender.label}; "
                f"Type: {self.account_type.value}; PIN: {format_pin(self.pin)}; "
                f"Balance: {currency_label} {self.balance}")
