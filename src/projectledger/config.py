"""Ledger configuration: counter accounts, reserved codes and tolerances."""

import os
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Optional

DB_PATH_ENV = "PROJECTLEDGER_DB_PATH"
LOG_LEVEL_ENV = "PROJECTLEDGER_LOG_LEVEL"
CASH_ACCOUNT_ENV = "PROJECTLEDGER_CASH_ACCOUNT"


@dataclass(frozen=True)
class LedgerConfig:
    """Account codes and limits the posting engine and reports rely on."""

    receivable_account: str = "1201"
    payable_account: str = "2102"
    cash_account: str = "1101"
    wip_account: str = "1301"
    fixed_asset_prefix: str = "15"
    balance_tolerance: Decimal = Decimal("0.01")

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Build config, applying overrides from the environment."""
        config = cls()
        cash_account = os.environ.get(CASH_ACCOUNT_ENV)
        if cash_account:
            config = replace(config, cash_account=cash_account.strip())
        return config

    def is_reserved_asset_code(self, code: str) -> bool:
        """True for codes whose balances come from fixed assets or WIP instead."""
        return code.startswith(self.fixed_asset_prefix) or code == self.wip_account


def default_database_path(database_path: Optional[str] = None) -> str:
    """Resolve the SQLite database path.

    Args:
        database_path: Explicit path. If None, checks PROJECTLEDGER_DB_PATH
            environment variable, then defaults to ~/.projectledger/ledger.db

    Returns:
        Database file path
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        db_dir = Path.home() / ".projectledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledger.db")

    return database_path
