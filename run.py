#!/usr/bin/env python3
"""
Account Ledger Entry Point

Starts the console menus over the ledger persisted in LEDGER_DATA_DIR.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from account_ledger.__main__ import main


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nShutting down...")
    except OSError as e:
        print(f"Error starting ledger: {e}")
        sys.exit(1)
