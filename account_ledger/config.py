"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class LedgerConfig(BaseSettings):
    """Account ledger configuration"""
    
    # Storage configuration
    data_dir: str = "."
    accounts_file: str = "accounts.dat"
    logs_file: str = "logs.dat"
    
    # Business rules configuration
    minimum_balance: int = 0           # Floor a withdrawal or transfer may not cross
    minimum_opening_balance: int = 500
    denomination: int = 1              # Amounts must be multiples of this step
    mini_statement_size: int = 5
    currency_label: str = "RM"
    
    # Console access codes
    admin_access_code: str = "1111"
    staff_access_code: str = "2222"
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr
    
    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False
    
    @property
    def accounts_path(self) -> Path:
        """Path of the binary account resource"""
        return Path(self.data_dir) / self.accounts_file
    
    @property
    def logs_path(self) -> Path:
        """Path of the binary log resource"""
        return Path(self.data_dir) / self.logs_file


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
