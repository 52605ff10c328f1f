"""Import a list of transactions into an Actual budget."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .client import Account, BudgetClient, ImportResult
from .config import AppConfig
from .data_loader import normalize_dates

logger = logging.getLogger(__name__)


def select_account(accounts: Sequence[Account], name: Optional[str] = None) -> Account:
    """Pick the named account, or the first one when no name is given."""
    if not accounts:
        raise ValueError("The budget has no accounts")
    if not name:
        return accounts[0]
    for account in accounts:
        if account.name == name:
            return account
    available = ", ".join(a.name for a in accounts)
    raise ValueError(f"No account named {name!r} (available: {available})")


def run_import(
    cfg: AppConfig,
    transactions: List[Dict[str, Any]],
    client: Optional[BudgetClient] = None,
    account_name: Optional[str] = None,
) -> ImportResult:
    cfg.require("password", "sync_id")
    client = client or BudgetClient()

    client.init(cfg.data_dir, cfg.server_url, cfg.password, cfg.encryption_password)
    try:
        client.download_budget(cfg.sync_id)
        accounts = client.get_accounts()

        normalize_dates(transactions)

        target = select_account(accounts, account_name or cfg.account)
        logger.info("Importing %d transaction(s) into %s", len(transactions), target.name)
        return client.import_transactions(target.id, transactions)
    finally:
        client.shutdown()
