"""Export accounts and transactions from the bank into importable JSON files."""

from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .bank import RaiffeisenClient
from .data_loader import save_transactions
from .models import TurnoverFilter

logger = logging.getLogger(__name__)

BANK_DATE_FORMAT = "%d.%m.%Y"


@dataclass
class ExportResult:
    accounts_file: Path
    transaction_files: List[Path] = field(default_factory=list)
    transaction_count: int = 0


def transactions_filename(currency_code: str, number: str) -> str:
    return f"transactions_{currency_code}_{number}.json"


def export_bank_data(
    client: RaiffeisenClient,
    username: str,
    password: str,
    date_from: str = "",
    date_to: Optional[str] = None,
    out_dir: str | Path = ".",
) -> ExportResult:
    """Log in and dump every account's reserved and booked transactions.

    Dates are passed to the portal as ``dd.mm.yyyy``; ``date_to`` defaults to
    today.
    """
    if date_to is None:
        date_to = dt.date.today().strftime(BANK_DATE_FORMAT)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    client.login()
    client.login_font(username, password)

    balances = client.all_account_balance()
    accounts_file = out / "accounts.json"
    with accounts_file.open("w", encoding="utf-8") as f:
        json.dump([b.to_dict() for b in balances], f, indent=2)
        f.write("\n")
    result = ExportResult(accounts_file=accounts_file)

    for account in balances:
        turnover = client.transactional_account_turnover(
            account.product_core_id,
            account.number,
            TurnoverFilter(
                currency_code_numeric=account.currency_code_numeric,
                from_date=date_from,
                to_date=date_to,
            ),
        )
        reserved = client.transactional_account_reserved_funds(account.number)

        records = [r.to_budget_transaction() for r in reserved]
        records.extend(turnover.to_budget_transactions())

        path = out / transactions_filename(account.currency_code, account.number)
        save_transactions(records, path)
        logger.info("Wrote %d transaction(s) for %s to %s", len(records), account.number, path)
        result.transaction_files.append(path)
        result.transaction_count += len(records)
    return result
