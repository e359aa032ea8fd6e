"""Entry point: python -m account_ledger"""

from pathlib import Path

from .config import get_config
from .console import Console
from .ledger import Ledger
from .logging_config import setup_logging
from .storage import BinaryFileStorage


def main() -> None:
    """Load the ledger from disk and start the console menus"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    Path(config.data_dir).mkdir(parents=True, exist_ok=True)
    storage = BinaryFileStorage(config.accounts_path, config.logs_path)
    ledger = Ledger(storage, config)
    ledger.load()

    Console(ledger, config).run()


if __name__ == "__main__":
    main()
