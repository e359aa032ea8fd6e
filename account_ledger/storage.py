"""
Storage Backend Module

Binary persistence for the account store. Two resources are written on every
save, each overwritten in full:

* account resource: one fixed 184-byte record per active account, laid out as
  ``{id:int32, name:char[100], identity:char[50], gender:char, type:char[10],
  pin:int32, balance:int64}`` with C struct padding, little-endian.
* log resource: ``{id:int32, count:int32, [len:int32, bytes]*count}`` for every
  active account in store order, then every archived account.

Text fields longer than their slot are silently truncated (lossy). Reading
fails closed: a malformed or truncated tail is dropped, everything parsed
before it is kept.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple, Union
import os
import shutil
import struct
import tempfile

from .activity_log import ActivityLog, LogEntry
from .errors import StorageFailureError
from .logging_config import get_logger
from .models import Account, AccountProfile
from .store import AccountStore


logger = get_logger("account_ledger.storage")

ACCOUNT_RECORD = struct.Struct("<i100s50sc10s3xi4xq")
INT32 = struct.Struct("<i")

NAME_SIZE = 100
IDENTITY_SIZE = 50
TYPE_SIZE = 10


def encode_fixed(value: str, size: int) -> bytes:
    """
    Encode text into a NUL-terminated slot of `size` bytes

    At most size - 1 bytes are kept; a multi-byte character cut by the limit
    is dropped entirely.
    """
    raw = value.encode("utf-8")[:size - 1]
    raw = raw.decode("utf-8", errors="ignore").encode("utf-8")
    return raw.ljust(size, b"\0")


def decode_fixed(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class AccountRecordCodec:
    """Fixed-width account records"""

    record_size = ACCOUNT_RECORD.size

    def encode(self, accounts: List[Account]) -> bytes:
        return b"".join(self.encode_record(account) for account in accounts)

    def encode_record(self, account: Account) -> bytes:
        return ACCOUNT_RECORD.pack(
            account.account_id,
            encode_fixed(account.holder_name, NAME_SIZE),
            encode_fixed(account.identity_number, IDENTITY_SIZE),
            account.gender.value.encode("ascii"),
            encode_fixed(account.account_type.value, TYPE_SIZE),
            account.pin,
            account.balance,
        )

    def decode(self, data: bytes) -> Tuple[List[Account], bool]:
        """
        Parse records until the data runs out or a record is invalid

        Returns the parsed accounts and whether the whole buffer was consumed.
        """
        accounts = []
        for offset in range(0, len(data), self.record_size):
            chunk = data[offset:offset + self.record_size]
            if len(chunk) < self.record_size:
                return accounts, False
            try:
                accounts.append(self.decode_record(chunk))
            except (ValueError, UnicodeDecodeError) as e:
                logger.warning(f"Invalid account record at byte {offset}: {e}")
                return accounts, False
        return accounts, True

    def decode_record(self, chunk: bytes) -> Account:
        account_id, name, identity, gender, type_cs, pin, balance = ACCOUNT_RECORD.unpack(chunk)
        profile = AccountProfile(
            holder_name=decode_fixed(name),
            identity_number=decode_fixed(identity),
            gender=gender.decode("ascii"),
            account_type=decode_fixed(type_cs),
        )
        return Account(account_id=account_id, profile=profile, pin=pin, balance=balance)


class LogRecordCodec:
    """Length-prefixed log sequences keyed by account id"""

    def encode(self, store: AccountStore) -> bytes:
        parts = []
        for account in store.accounts():
            parts.append(self.encode_sequence(account.account_id, account.activity_log))
        for account_id, entries in store.archive.items():
            parts.append(self.encode_sequence(account_id, entries))
        return b"".join(parts)

    def encode_sequence(self, account_id: int, entries) -> bytes:
        entries = list(entries)
        parts = [INT32.pack(account_id), INT32.pack(len(entries))]
        for entry in entries:
            text = entry.text.encode("utf-8")
            parts.append(INT32.pack(len(text)))
            parts.append(text)
        return b"".join(parts)

    def decode(self, data: bytes) -> Tuple[List[Tuple[int, List[LogEntry]]], bool]:
        """
        Parse complete sequences; an incomplete trailing sequence is dropped

        Returns the parsed (account_id, entries) pairs and whether the whole
        buffer was consumed.
        """
        sequences = []
        offset = 0
        size = len(data)
        while offset < size:
            header = self._read_int(data, offset, 2)
            if header is None:
                return sequences, False
            account_id, count = header
            offset += 2 * INT32.size
            if count < 0:
                return sequences, False

            entries = []
            for _ in range(count):
                length = self._read_int(data, offset, 1)
                if length is None or length[0] < 0:
                    return sequences, False
                offset += INT32.size
                end = offset + length[0]
                if end > size:
                    return sequences, False
                entries.append(LogEntry.parse(data[offset:end].decode("utf-8", errors="replace")))
                offset = end
            sequences.append((account_id, entries))
        return sequences, True

    @staticmethod
    def _read_int(data: bytes, offset: int, count: int) -> Optional[Tuple[int, ...]]:
        end = offset + count * INT32.size
        if end > len(data):
            return None
        return struct.unpack_from(f"<{count}i", data, offset)


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    def __init__(self):
        self.account_codec = AccountRecordCodec()
        self.log_codec = LogRecordCodec()

    @abstractmethod
    def read(self) -> Tuple[bytes, bytes]:
        """Return the raw account and log resources (empty when absent)"""
        pass

    @abstractmethod
    def write(self, accounts_data: bytes, logs_data: bytes) -> None:
        """Replace both resources. Raises OSError on failure."""
        pass

    def save(self, store: AccountStore) -> None:
        """Persist the whole store, overwriting both resources"""
        accounts_data = self.account_codec.encode(store.accounts())
        logs_data = self.log_codec.encode(store)
        try:
            self.write(accounts_data, logs_data)
        except OSError as e:
            logger.error(f"Failed to persist ledger: {e}")
            raise StorageFailureError(f"Failed to persist ledger: {e}") from e

    def load(self, store: AccountStore) -> None:
        """
        Populate an empty store from the persisted resources

        Accounts are restored verbatim; each log sequence is attached to the
        matching active account or, when none exists, archived.
        """
        try:
            accounts_data, logs_data = self.read()
        except OSError as e:
            logger.error(f"Failed to read ledger resources: {e}")
            return

        accounts, complete = self.account_codec.decode(accounts_data)
        if not complete:
            logger.warning(f"Account resource is malformed; kept {len(accounts)} records")
        for account in accounts:
            try:
                store.add(account)
            except ValueError as e:
                logger.warning(f"Skipping account record: {e}")

        sequences, complete = self.log_codec.decode(logs_data)
        if not complete:
            logger.warning(f"Log resource is malformed; kept {len(sequences)} sequences")
        attached = set()
        for account_id, entries in sequences:
            account = store.get(account_id)
            if account is not None:
                if account_id in attached:
                    logger.warning(f"Duplicate logs for account {account_id} ignored")
                    continue
                account.activity_log = ActivityLog(entries)
                attached.add(account_id)
            elif account_id in store.archive:
                logger.warning(f"Duplicate archived logs for account {account_id} ignored")
            else:
                store.archive.add(account_id, entries)


class BinaryFileStorage(StorageInterface):
    """Two binary files, rewritten through a temporary file and an atomic replace"""

    def __init__(self, accounts_path: Union[str, Path], logs_path: Union[str, Path]):
        super().__init__()
        self.accounts_path = Path(accounts_path)
        self.logs_path = Path(logs_path)

    def read(self) -> Tuple[bytes, bytes]:
        return self._read_file(self.accounts_path), self._read_file(self.logs_path)

    @staticmethod
    def _read_file(path: Path) -> bytes:
        if not path.exists():
            return b""
        return path.read_bytes()

    def write(self, accounts_data: bytes, logs_data: bytes) -> None:
        """
        Replace both files, or neither

        The previous contents of each file are copied aside before it is
        replaced. If a later replace fails, the files already replaced are
        put back from their copies before the error propagates.
        """
        staged = []
        backups = []
        replaced = []
        try:
            staged.append((self._stage(self.accounts_path, accounts_data), self.accounts_path))
            staged.append((self._stage(self.logs_path, logs_data), self.logs_path))
            for temp_name, path in staged:
                backup = self._backup(path)
                backups.append(backup)
                os.replace(temp_name, path)
                replaced.append((path, backup))
        except OSError:
            for path, backup in reversed(replaced):
                self._restore(path, backup)
            raise
        finally:
            for temp_name, _ in staged:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
            for backup in backups:
                if backup is not None and os.path.exists(backup):
                    os.unlink(backup)

    @staticmethod
    def _backup(path: Path) -> Optional[str]:
        """Copy the current file aside; None when there is nothing to keep"""
        if not path.exists():
            return None
        backup = str(path.with_name(f".{path.name}.bak"))
        shutil.copyfile(path, backup)
        return backup

    @staticmethod
    def _restore(path: Path, backup: Optional[str]) -> None:
        if backup is None:
            path.unlink()
        else:
            os.replace(backup, path)

    @staticmethod
    def _stage(path: Path, data: bytes) -> str:
        """Write data next to `path` and return the temporary file name"""
        temp_file = tempfile.NamedTemporaryFile(
            mode="wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        )
        try:
            temp_file.write(data)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        except OSError:
            temp_file.close()
            os.unlink(temp_file.name)
            raise
        temp_file.close()
        return temp_file.name


class InMemoryStorage(StorageInterface):
    """
    Keeps the encoded resources in memory (testing)

    Set `fail_saves` to make every save raise, simulating a storage failure.
    """

    def __init__(self, accounts_data: bytes = b"", logs_data: bytes = b""):
        super().__init__()
        self.accounts_data = accounts_data
        self.logs_data = logs_data
        self.fail_saves = False
        self.save_count = 0

    def read(self) -> Tuple[bytes, bytes]:
        return self.accounts_data, self.logs_data

    def write(self, accounts_data: bytes, logs_data: bytes) -> None:
        if self.fail_saves:
            raise OSError("simulated storage failure")
        self.accounts_data = accounts_data
        self.logs_data = logs_data
        self.save_count += 1
