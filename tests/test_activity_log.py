"""
Tests for activity logs and the deleted-account archive
"""

import pytest
from datetime import datetime

from account_ledger.activity_log import ActivityLog, LogArchive, LogEntry


class TestLogEntry:
    """Test entry rendering and parsing"""
    
    def test_text_includes_ctime(self):
        entry = LogEntry("Account created", datetime(2024, 3, 5, 9, 7, 1))
        assert entry.text == "Account created at Tue Mar  5 09:07:01 2024"
        assert str(entry) == entry.text
    
    def test_parse_recovers_message_and_timestamp(self):
        entry = LogEntry("Transfer -RM 5 to account 0002 at noon", datetime(2025, 12, 31, 23, 59, 59))
        parsed = LogEntry.parse(entry.text)
        
        assert parsed == entry
        assert parsed.message == "Transfer -RM 5 to account 0002 at noon"
    
    def test_parse_without_timestamp(self):
        parsed = LogEntry.parse("legacy line without stamp")
        assert parsed.message == "legacy line without stamp"
        assert parsed.timestamp is None
        assert parsed.text == "legacy line without stamp"
    
    def test_parse_with_unparseable_suffix(self):
        parsed = LogEntry.parse("Met at the branch")
        assert parsed.message == "Met at the branch"
        assert parsed.timestamp is None
    
    def test_now_has_no_microseconds(self):
        entry = LogEntry.now("PIN changed")
        assert entry.timestamp.microsecond == 0
        assert LogEntry.parse(entry.text) == entry


class TestActivityLog:
    """Test append-only log behavior"""
    
    def test_append_preserves_order(self):
        log = ActivityLog()
        for i in range(5):
            log.record(f"entry {i}")
        
        assert [e.message for e in log] == [f"entry {i}" for i in range(5)]
        assert len(log) == 5
        assert log
    
    def test_tail_returns_most_recent_oldest_first(self):
        log = ActivityLog(LogEntry(f"entry {i}") for i in range(8))
        
        assert [e.message for e in log.tail(3)] == ["entry 5", "entry 6", "entry 7"]
        assert len(log.tail(20)) == 8
        assert log.tail(0) == []
    
    def test_entries_is_a_snapshot(self):
        log = ActivityLog([LogEntry("a")])
        snapshot = log.entries()
        log.record("b")
        
        assert len(snapshot) == 1
        assert len(log) == 2
    
    def test_pop_last(self):
        log = ActivityLog([LogEntry("a"), LogEntry("b")])
        assert log.pop_last().message == "b"
        assert [e.message for e in log] == ["a"]
    
    def test_empty_log_is_falsy(self):
        assert not ActivityLog()


class TestLogArchive:
    """Test write-once archive"""
    
    def test_add_and_get(self):
        archive = LogArchive()
        archive.add(4, [LogEntry("Account created"), LogEntry("Account deleted")])
        
        assert 4 in archive
        assert len(archive.get(4)) == 2
        assert archive.get(5) is None
        assert archive.ids() == [4]
    
    def test_archive_is_write_once(self):
        archive = LogArchive()
        archive.add(1, [])
        with pytest.raises(ValueError, match="already archived"):
            archive.add(1, [LogEntry("x")])
    
    def test_archived_entries_are_immutable_sequence(self):
        archive = LogArchive()
        source = [LogEntry("a")]
        archive.add(2, source)
        source.append(LogEntry("b"))
        
        assert archive.get(2) == (LogEntry("a"),)
