"""
Tests for configuration loading and structured logging
"""

import json
import logging
import tempfile
from pathlib import Path

from account_ledger.config import LedgerConfig, get_config, reload_config
from account_ledger.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestLedgerConfig:
    """Test environment-based configuration"""
    
    def test_defaults(self):
        config = LedgerConfig()
        assert config.minimum_balance == 0
        assert config.denomination == 1
        assert config.mini_statement_size == 5
        assert config.currency_label == "RM"
    
    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_MINIMUM_BALANCE", "50")
        monkeypatch.setenv("LEDGER_DENOMINATION", "10")
        monkeypatch.setenv("LEDGER_ADMIN_ACCESS_CODE", "9090")
        
        config = LedgerConfig()
        assert config.minimum_balance == 50
        assert config.denomination == 10
        assert config.admin_access_code == "9090"
    
    def test_resource_paths(self):
        config = LedgerConfig(data_dir="/var/lib/ledger", accounts_file="a.dat", logs_file="l.dat")
        assert config.accounts_path == Path("/var/lib/ledger/a.dat")
        assert config.logs_path == Path("/var/lib/ledger/l.dat")
    
    def test_reload_config(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CURRENCY_LABEL", "USD")
        try:
            assert reload_config().currency_label == "USD"
            assert get_config().currency_label == "USD"
        finally:
            monkeypatch.delenv("LEDGER_CURRENCY_LABEL")
            reload_config()


class TestLogging:
    """Test structured logging helpers"""
    
    def test_json_formatter_includes_structured_fields(self):
        logger = get_logger("account_ledger.test")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "deposit completed", (), None)
        record.action = "deposit"
        record.extra = {"amount": 100}
        
        data = json.loads(JSONFormatter().format(record))
        
        assert data["message"] == "deposit completed"
        assert data["action"] == "deposit"
        assert data["extra"] == {"amount": 100}
        assert "resource" not in data
    
    def test_log_action_writes_to_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "ledger.log"
            logger = setup_logging("INFO", logger_name="account_ledger.filetest", log_file=str(log_file))
            
            log_action(logger, "warning", "withdraw refused", action="withdraw",
                       resource="account:1", extra={"code": "bad_pin"})
            log_action(logger, "debug", "not emitted")
            for handler in logger.handlers:
                handler.close()
            
            lines = log_file.read_text(encoding="utf-8").splitlines()
            assert len(lines) == 1
            entry = json.loads(lines[0])
            assert entry["level"] == "WARNING"
            assert entry["resource"] == "account:1"
            assert entry["extra"]["code"] == "bad_pin"
    
    def test_setup_logging_replaces_handlers(self):
        logger = setup_logging("DEBUG", logger_name="account_ledger.handlers", log_format="text")
        logger = setup_logging("DEBUG", logger_name="account_ledger.handlers", log_format="text")
        
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not logger.propagate
