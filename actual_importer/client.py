"""Thin wrapper over the ``actualpy`` client library.

Exposes the handful of calls the importer needs, named after the Actual
node API: init, download_budget, get_accounts, import_transactions and
shutdown. Sync protocol, local cache and storage are left to the library.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from actual import Actual
from actual.queries import get_accounts, reconcile_transaction

from .data_loader import as_calendar_date, parse_date

logger = logging.getLogger(__name__)


class BudgetClientError(RuntimeError):
    """Raised when the client is misused or the budget cannot be found."""


@dataclass
class Account:
    id: str
    name: str


@dataclass
class ImportResult:
    account_id: str
    account_name: Optional[str] = None
    imported_ids: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.imported_ids)


def cents_to_units(amount: Any) -> Decimal:
    """Convert an integer amount in minor units to currency units."""
    if isinstance(amount, bool) or not isinstance(amount, (int, str)):
        raise ValueError(f"Amount must be an integer number of cents: {amount!r}")
    return Decimal(int(amount)) / 100


class BudgetClient:
    def __init__(self) -> None:
        self._actual: Optional[Actual] = None
        self._stack: Optional[ExitStack] = None
        self._data_dir: Optional[Path] = None
        self._encryption_password: Optional[str] = None
        self._downloaded = False

    def __enter__(self) -> "BudgetClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    @property
    def actual(self) -> Actual:
        if self._actual is None:
            raise BudgetClientError("Client is not initialized; call init() first")
        return self._actual

    def init(
        self,
        data_dir: str | Path,
        server_url: str,
        password: str,
        encryption_password: Optional[str] = None,
    ) -> None:
        """Log in to the server; budget data will be cached under ``data_dir``."""
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._encryption_password = encryption_password
        logger.info("Connecting to %s (cache: %s)", server_url, self._data_dir)
        stack = ExitStack()
        # The session only exists while the handle is entered
        self._actual = stack.enter_context(
            Actual(base_url=server_url, password=password, data_dir=str(self._data_dir))
        )
        self._stack = stack

    def download_budget(self, sync_id: str) -> None:
        actual = self.actual
        for remote in actual.list_user_files().data:
            if remote.deleted:
                continue
            if sync_id in (remote.group_id, remote.file_id, remote.name):
                break
        else:
            raise BudgetClientError(f"No budget with sync id {sync_id!r} on the server")
        logger.info("Downloading budget %r", remote.name)
        actual.set_file(remote)
        actual.download_budget(self._encryption_password)
        self._downloaded = True

    def _session(self):
        if not self._downloaded:
            raise BudgetClientError("No budget loaded; call download_budget() first")
        return self.actual.session

    def get_accounts(self) -> List[Account]:
        return [Account(id=str(a.id), name=a.name) for a in get_accounts(self._session(), closed=False)]

    def import_transactions(self, account_id: str, transactions: Iterable[Dict[str, Any]]) -> ImportResult:
        session = self._session()
        account = next((a for a in get_accounts(session, closed=False) if str(a.id) == account_id), None)
        if account is None:
            raise BudgetClientError(f"Unknown account id {account_id!r}")

        result = ImportResult(account_id=account_id, account_name=account.name)
        matched: list = []
        for txn in transactions:
            payee = txn.get("payee_name") or txn.get("payee") or ""
            imported = reconcile_transaction(
                session,
                as_calendar_date(parse_date(txn["date"])),
                account,
                payee=payee,
                notes=txn.get("notes") or "",
                amount=cents_to_units(txn.get("amount", 0)),
                imported_id=txn.get("imported_id") or None,
                cleared=bool(txn.get("cleared", False)),
                imported_payee=txn.get("imported_payee") or payee or None,
                already_matched=matched,
            )
            matched.append(imported)
            result.imported_ids.append(str(imported.id))
        self.actual.commit()
        logger.info("Imported %d transaction(s) into account %s", result.count, account.name)
        return result

    def shutdown(self) -> None:
        if self._actual is None:
            return
        stack, self._stack = self._stack, None
        self._actual = None
        self._downloaded = False
        if stack is not None:
            stack.close()
        logger.debug("Client shut down")
