"""HTTP client for the Raiffeisen Serbia retail e-banking portal.

The portal answers every data request with a JSON array of string rows,
sometimes prefixed with a byte-order mark. Rows are mapped by position into
the records in :mod:`actual_importer.models`; a field that fails to parse is
logged and leaves the rest of its row at default values.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import requests
from argon2.low_level import Type, hash_secret_raw

from .models import (
    AccountBalance,
    AccountTurnover,
    BankTransaction,
    DashboardPreviewAccount,
    ReservedTransaction,
    TransactionType,
    TurnoverFilter,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://rol.raiffeisenbank.rs/Retail"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:132.0) Gecko/20100101 Firefox/132.0"
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"

DATA_SERVICE = "/Protected/Services/DataService.svc"
TURNOVER_GRID = "RetailAccountTurnoverTransactionPreviewMasterDetail-S"
RESERVED_FUNDS_GRID = "RetailAccountReservedFundsPreviewFlat"


class BankAPIError(RuntimeError):
    """Raised when the portal answers with an unexpected status code."""


def hash_password(username: str, password: str) -> str:
    """Argon2i digest the portal expects instead of the clear password."""
    salt = username.encode("utf-8").ljust(8, b"\0")
    digest = hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=3,
        memory_cost=4096,
        parallelism=1,
        hash_len=32,
        type=Type.I,
    )
    return digest.hex()


def parse_amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def parse_timestamp(value: str) -> dt.datetime:
    return dt.datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=dt.timezone.utc)


def _transaction_type(value: str) -> Optional[TransactionType]:
    try:
        return TransactionType(value)
    except ValueError:
        logger.warning("Unknown transaction type %r", value)
        return None


class RaiffeisenClient:
    def __init__(self, session: Optional[requests.Session] = None, base_url: str = BASE_URL) -> None:
        # The session's cookie jar carries the login between requests
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT
        self.base_url = base_url.rstrip("/")

    def _post(self, path: str, payload: Dict[str, Any], what: str) -> Any:
        resp = self.session.post(
            self.base_url + path,
            data=json.dumps(payload),
            headers={"Content-Type": "application/json; charset=utf-8"},
        )
        if resp.status_code != 200:
            raise BankAPIError(f"{what}: unexpected status code: {resp.status_code}")
        try:
            return json.loads(resp.content.decode("utf-8-sig"))
        except ValueError:
            logger.error("Error while trying to decode %s response", what)
            raise

    def login(self) -> None:
        """Open the login page so the session picks up its cookies."""
        resp = self.session.get(self.base_url + "/Home/Login")
        resp.close()

    def login_font(self, username: str, password: str) -> None:
        payload = {
            "username": username,
            "password": hash_password(username, password),
            "sessionID": 1,
        }
        resp = self.session.post(
            self.base_url + "/Protected/Services/RetailLoginService.svc/LoginFont",
            data=json.dumps(payload),
            headers={"Content-Type": "application/json; charset=utf-8"},
        )
        resp.close()
        logger.info("Logged in as %s", username)

    def dashboard_preview(self) -> List[DashboardPreviewAccount]:
        rows = self._post(
            DATA_SERVICE + "/GetDashboardsPreview",
            {"gridName": "RetailUserDashboardPreview"},
            "dashboard preview",
        )
        accounts: List[DashboardPreviewAccount] = []
        for row in rows:
            account = DashboardPreviewAccount(
                number=row[5],
                currency_code=row[11],
                currency_code_numeric=row[10],
            )
            accounts.append(account)
            try:
                account.available_amount = parse_amount(row[6])
                account.reserved_amount = parse_amount(row[4])
                account.total_amount = parse_amount(row[17])
            except ValueError as exc:
                logger.error("Cannot parse dashboard amounts for %s: %s", account.number, exc)
        return accounts

    def all_account_balance(self) -> List[AccountBalance]:
        rows = self._post(
            DATA_SERVICE + "/GetAllAccountBalance",
            {"gridName": "RetailAccountBalancePreviewFlat-L"},
            "all account balance",
        )
        accounts: List[AccountBalance] = []
        for row in rows:
            account = AccountBalance(
                number=row[1],
                description=row[2],
                currency_code=row[3],
                currency_code_numeric=row[14],
                product_core_id=row[13],
            )
            accounts.append(account)
            try:
                account.available_amount = parse_amount(row[5])
                account.total_amount = parse_amount(row[4])
                account.last_transaction_amount = parse_amount(row[6])
                account.last_transaction_date = parse_timestamp(row[7])
            except ValueError as exc:
                logger.error("Cannot parse balance of account %s: %s", account.number, exc)
        return accounts

    def transactional_account_turnover(
        self,
        product_core_id: str,
        account_number: str,
        filter: TurnoverFilter,
    ) -> AccountTurnover:
        request = {
            "accountNumber": account_number,
            "filterParam": filter.to_request(),
            "gridName": TURNOVER_GRID,
            "productCoreID": product_core_id,
        }
        response = self._post(
            DATA_SERVICE + "/GetTransactionalAccountTurnover",
            request,
            "transactional account turnover",
        )
        if not response:
            return AccountTurnover()

        transactions: List[BankTransaction] = []
        for row in response[0][1]:
            txn = BankTransaction(
                id=row[12],
                currency_code_numeric=row[1],
                currency_code=row[2],
                place=row[6],
                reference=row[7],
                description=row[11],
                type=_transaction_type(row[13]),
            )
            transactions.append(txn)
            try:
                credit = parse_amount(row[8])
                debit = parse_amount(row[9])
                if credit:
                    txn.amount = -credit
                if debit:
                    txn.amount = debit
                txn.date = parse_timestamp(row[3])
            except ValueError as exc:
                logger.error("Cannot parse transaction %s: %s", txn.id, exc)
        return AccountTurnover(transactions=transactions)

    def transactional_account_reserved_funds(self, account_number: str) -> List[ReservedTransaction]:
        rows = self._post(
            DATA_SERVICE + "/GetTransactionalAccountReservedFunds",
            {"accountNumber": account_number, "gridName": RESERVED_FUNDS_GRID},
            "transactional account reserved funds",
        )
        reserved: List[ReservedTransaction] = []
        for row in rows:
            txn = ReservedTransaction(
                place=row[2],
                currency_code_numeric=row[5],
                currency_code=row[4],
            )
            reserved.append(txn)
            try:
                txn.amount = -parse_amount(row[3])
                txn.date = parse_timestamp(row[1])
            except ValueError as exc:
                logger.error("Cannot parse reserved funds entry at %s: %s", txn.place, exc)
        return reserved
