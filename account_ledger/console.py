"""
Console Menu Module

Role-gated text menus over the ledger: admin and staff panels behind access
codes from the configuration, and the ATM / CDM services behind the account
PIN. The console only parses input and renders results; every rule lives in
the Ledger.
"""

from typing import Callable, Dict, List, Optional

from .activity_log import LogEntry
from .config import LedgerConfig, get_config
from .errors import LedgerError, ResultCode
from .ledger import Ledger
from .logging_config import get_logger
from .models import AccountProfile, format_account_number


MESSAGES: Dict[ResultCode, str] = {
    ResultCode.NOT_FOUND: "Account not found.",
    ResultCode.BAD_PIN: "PIN incorrect.",
    ResultCode.INVALID_AMOUNT: "Invalid amount.",
    ResultCode.INSUFFICIENT_FUNDS: "Insufficient funds.",
    ResultCode.SELF_TRANSFER: "Cannot transfer to the same account.",
    ResultCode.DESTINATION_NOT_FOUND: "Recipient account not found.",
    ResultCode.DUPLICATE_IDENTITY: "An account with this passport number already exists.",
    ResultCode.STORAGE_FAILURE: "Could not save changes. Nothing was changed.",
    ResultCode.NO_LOGS: "No transactions.",
}

MenuItems = List[tuple]


class Console:
    """Interactive menu loop around a Ledger"""

    def __init__(self, ledger: Ledger, config: Optional[LedgerConfig] = None,
                 input_func: Callable[[str], str] = input,
                 output_func: Callable[[str], None] = print):
        self.ledger = ledger
        self.config = config or get_config()
        self._input = input_func
        self._output = output_func
        self.logger = get_logger("account_ledger.console")

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Login menu; returns when the operator exits or input ends"""
        try:
            self._menu("LOGIN PANEL", [
                ("ADMIN Login", self._admin_login),
                ("STAFF Login", self._staff_login),
                ("ATM/CDM Service", self.atm_cdm_panel),
            ], back_label="Exit")
        except EOFError:
            pass
        self._output("Bye!")

    def _admin_login(self) -> None:
        if self._access_granted("Enter Admin PIN: ", self.config.admin_access_code, "admin"):
            self.admin_panel()

    def _staff_login(self) -> None:
        if self._access_granted("Enter Staff PIN: ", self.config.staff_access_code, "staff"):
            self.staff_panel()

    def admin_panel(self) -> None:
        self._menu("ADMIN PANEL", [
            ("Create Account", self.create_account),
            ("Delete Account", self.delete_account),
            ("Search Account", self.show_account),
            ("Show All Accounts", self.show_all_accounts),
            ("Edit Information", self.edit_information),
            ("Show Logs (including deleted accounts)", self.show_logs),
        ])

    def staff_panel(self) -> None:
        self._menu("STAFF PANEL", [
            ("Check Account Info", self.show_account),
            ("Deposit Cash", self.staff_deposit),
            ("Withdraw Cash", self.staff_withdraw),
            ("Check Logs of User", self.show_logs),
        ])

    def atm_cdm_panel(self) -> None:
        self._menu("ATM / CDM", [
            ("ATM Service", lambda: self._with_card(self.atm_service)),
            ("CDM Service", lambda: self._with_card(self.cdm_service)),
        ])

    def atm_service(self, session: dict) -> None:
        self._menu("ATM SERVICE", [
            ("Withdraw Cash", lambda: self._withdraw(session["account_id"], session["pin"])),
            ("Check Account Balance", lambda: self._balance(session)),
            ("Mini Statement", lambda: self._mini_statement(session)),
            ("Transfer Money to Another Account", lambda: self._transfer(session, "Transfer")),
            ("Change PIN", lambda: self._change_pin(session)),
        ])

    def cdm_service(self, session: dict) -> None:
        self._menu("CDM SERVICE", [
            ("Deposit to My Account", lambda: self._deposit(session["account_id"], session["pin"])),
            ("Deposit to Another Account", lambda: self._transfer(session, "Deposit")),
            ("Check Account Balance", lambda: self._balance(session)),
            ("Mini Statement", lambda: self._mini_statement(session)),
        ])

    # ------------------------------------------------------------------
    # Admin and staff actions
    # ------------------------------------------------------------------

    def create_account(self) -> None:
        profile = self._read_profile()
        if profile is None:
            return
        pin = self._read_pin("Enter PIN: ")
        balance = self._read_int(
            f"Enter Balance (Min:{self.config.minimum_opening_balance}): "
            f"{self.config.currency_label} ")
        account_id = self._attempt(self.ledger.create_account, profile, pin, balance)
        if account_id is not None:
            self._output("Account created successfully.")
            self._output(f"Generated Account Number: {format_account_number(account_id)}")

    def delete_account(self) -> None:
        account_id = self._read_int("Enter Account Number to Delete: ")
        if self._attempt(self.ledger.delete_account, account_id, default=False) is None:
            self._output("Account deleted.")

    def show_account(self) -> None:
        account_id = self._read_int("Enter Account Number: ")
        account = self._attempt(self.ledger.find_account, account_id)
        if account is not None:
            self._output(account.details(self.config.currency_label))

    def show_all_accounts(self) -> None:
        accounts = self.ledger.list_accounts()
        if not accounts:
            self._output("No accounts found.")
        for account in accounts:
            self._output(account.details(self.config.currency_label))

    def edit_information(self) -> None:
        account_id = self._read_int("Enter Account Number: ")
        if not self.ledger.account_exists(account_id):
            self._output(MESSAGES[ResultCode.NOT_FOUND])
            return
        profile = self._read_profile()
        if profile is None:
            return
        new_pin = self._read_pin("Enter New PIN: ")
        if self._attempt(self.ledger.change_info, account_id, profile, new_pin,
                         default=False) is None:
            self._output("Information changed.")

    def show_logs(self) -> None:
        account_id = self._read_int("Enter Account Number: ")
        entries = self._attempt(self.ledger.view_logs, account_id)
        if entries is None:
            return
        if self.ledger.is_archived(account_id):
            self._output(f"Account {format_account_number(account_id)} was deleted.")
        self._print_entries(entries)

    def staff_deposit(self) -> None:
        account_id = self._read_int("Enter Account Number: ")
        pin = self._read_pin("Enter PIN: ")
        self._deposit(account_id, pin)

    def staff_withdraw(self) -> None:
        account_id = self._read_int("Enter Account Number: ")
        pin = self._read_pin("Enter PIN: ")
        self._withdraw(account_id, pin)

    # ------------------------------------------------------------------
    # Card holder actions
    # ------------------------------------------------------------------

    def _with_card(self, service: Callable[[dict], None]) -> None:
        account_id = self._read_int("Enter Account Number: ")
        if not self.ledger.account_exists(account_id):
            self._output(MESSAGES[ResultCode.NOT_FOUND])
            return
        pin = self._read_pin("Enter PIN: ")
        if self._attempt(self.ledger.check_pin, account_id, pin) is not None:
            service({"account_id": account_id, "pin": pin})

    def _deposit(self, account_id: int, pin: int) -> None:
        amount = self._read_int(f"Enter Amount to Deposit: {self.config.currency_label} ")
        balance = self._attempt(self.ledger.deposit, account_id, pin, amount)
        if balance is not None:
            self._output(f"Deposit successful. New balance: {self.config.currency_label} {balance}")

    def _withdraw(self, account_id: int, pin: int) -> None:
        amount = self._read_int(f"Enter Amount to Withdraw: {self.config.currency_label} ")
        balance = self._attempt(self.ledger.withdraw, account_id, pin, amount)
        if balance is not None:
            self._output(f"Withdraw successful. New balance: {self.config.currency_label} {balance}")

    def _transfer(self, session: dict, label: str) -> None:
        destination = self._read_int("Enter Recipient Account Number: ")
        if not self.ledger.account_exists(destination):
            self._output(MESSAGES[ResultCode.DESTINATION_NOT_FOUND])
            return
        amount = self._read_int(f"Enter Amount: {self.config.currency_label} ")
        if self._attempt(self.ledger.transfer, session["account_id"], session["pin"],
                         destination, amount) is not None:
            self._output(f"{label} successful.")

    def _balance(self, session: dict) -> None:
        balance = self._attempt(self.ledger.get_balance, session["account_id"], session["pin"])
        if balance is not None:
            self._output(f"Current Balance: {self.config.currency_label} {balance}")

    def _mini_statement(self, session: dict) -> None:
        entries = self._attempt(self.ledger.mini_statement, session["account_id"], session["pin"])
        if entries is not None:
            self._print_entries(entries)

    def _change_pin(self, session: dict) -> None:
        old_pin = self._read_pin("Enter Old PIN: ")
        new_pin = self._read_pin("Enter New PIN: ")
        if self._attempt(self.ledger.change_pin, session["account_id"], old_pin, new_pin,
                         default=False) is None:
            session["pin"] = new_pin
            self._output("PIN changed.")

    # ------------------------------------------------------------------
    # Input and rendering
    # ------------------------------------------------------------------

    def _menu(self, title: str, items: MenuItems, back_label: str = "Back") -> None:
        while True:
            self._output(f"********** {title} **********")
            for number, (label, _) in enumerate(items, start=1):
                self._output(f"{number}. {label}")
            self._output(f"{len(items) + 1}. {back_label}")
            choice = self._read_int("Enter an Option: ")
            if choice == len(items) + 1:
                return
            if 1 <= choice <= len(items):
                items[choice - 1][1]()
            else:
                self._output("Invalid option.")

    def _attempt(self, operation: Callable, *args, default=None):
        """
        Run a ledger operation and render its failure

        Returns the operation's result, or `default` after a failure. Callers
        of operations that return None pass a non-None default.
        """
        try:
            return operation(*args)
        except LedgerError as e:
            self._output(MESSAGES.get(e.code, str(e)))
        except ValueError as e:
            self._output(str(e))
        return default

    def _access_granted(self, prompt: str, code: str, role: str) -> bool:
        if self._input(prompt).strip() == code:
            return True
        self.logger.warning(f"Rejected {role} login")
        self._output("Wrong PIN.")
        return False

    def _read_int(self, prompt: str) -> int:
        while True:
            raw = self._input(prompt).strip()
            if raw.isascii() and raw.isdigit():
                return int(raw)
            self._output("Please enter digits only.")

    def _read_pin(self, prompt: str) -> int:
        while True:
            raw = self._input(prompt).strip()
            if len(raw) == 4 and raw.isascii() and raw.isdigit():
                return int(raw)
            self._output("PIN must be exactly 4 digits.")

    def _read_profile(self) -> Optional[AccountProfile]:
        name = self._input("Enter Customer's Full Name: ")
        identity = self._input("Enter Passport No: ")
        gender = self._input("Enter Gender (M/F): ").strip().upper()
        if gender not in ("M", "F"):
            self._output("Invalid gender.")
            return None
        type_choice = self._input("Enter Account Type (C/S): ").strip().upper()
        if type_choice not in ("C", "S"):
            self._output("Invalid account type.")
            return None
        try:
            return AccountProfile(
                holder_name=name,
                identity_number=identity,
                gender=gender,
                account_type="Current" if type_choice == "C" else "Savings",
            )
        except ValueError as e:
            self._output(str(e))
            return None

    def _print_entries(self, entries: List[LogEntry]) -> None:
        if not entries:
            self._output("[No logs]")
        for entry in entries:
            self._output(entry.text)
