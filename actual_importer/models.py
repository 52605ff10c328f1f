"""Records returned by the bank's retail portal.

Amounts are kept as ``Decimal`` in currency units; conversion to budget
transactions scales them to minor units.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .data_loader import BudgetTransaction


_EPOCH = dt.datetime(1, 1, 1, tzinfo=dt.timezone.utc)


class TransactionType(str, Enum):
    POS = "POS"  # point-of-sale, credit or debit
    OTHER = "Other"
    EXCH_BUY = "ExchBuy"
    EXCH_SELL = "ExchSell"
    INCOME = "Income"
    INCOME_CASH = "IncomeCash"


def _to_minor_units(amount: Decimal) -> int:
    # int() truncates toward zero
    return int(amount * 100)


def _jsonable(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, dt.datetime):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        out[key] = value
    return out


@dataclass
class TurnoverFilter:
    currency_code_numeric: str
    from_date: str = ""
    to_date: str = ""
    item_type: str = ""
    item_count: str = ""
    from_amount: str = ""
    to_amount: str = ""
    payment_purpose: str = ""

    def to_request(self) -> Dict[str, str]:
        return {
            "CurrencyCodeNumeric": self.currency_code_numeric,
            "FromDate": self.from_date,
            "ToDate": self.to_date,
            "ItemType": self.item_type,
            "ItemCount": self.item_count,
            "FromAmount": self.from_amount,
            "ToAmount": self.to_amount,
            "PaymentPurpose": self.payment_purpose,
        }


@dataclass
class DashboardPreviewAccount:
    number: str
    currency_code: str
    currency_code_numeric: str
    total_amount: Decimal = Decimal(0)
    available_amount: Decimal = Decimal(0)
    reserved_amount: Decimal = Decimal(0)

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class AccountBalance:
    number: str
    description: str
    currency_code: str
    currency_code_numeric: str
    product_core_id: str
    total_amount: Decimal = Decimal(0)
    available_amount: Decimal = Decimal(0)
    last_transaction_amount: Decimal = Decimal(0)
    last_transaction_date: dt.datetime = _EPOCH

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class BankTransaction:
    id: str
    currency_code_numeric: str
    currency_code: str
    place: str
    reference: str
    description: str
    type: Optional[TransactionType] = None
    amount: Decimal = Decimal(0)
    date: dt.datetime = _EPOCH

    def to_budget_transaction(self) -> BudgetTransaction:
        return BudgetTransaction(
            date=self.date,
            amount=_to_minor_units(self.amount),
            payee_name=self.place,
            imported_payee=self.place,
            notes=self.description,
            imported_id=self.id,
            cleared=True,
        )


@dataclass
class ReservedTransaction:
    place: str
    currency_code_numeric: str
    currency_code: str
    amount: Decimal = Decimal(0)
    date: dt.datetime = _EPOCH

    def to_budget_transaction(self) -> BudgetTransaction:
        # Pending funds: no bank id yet and not cleared
        return BudgetTransaction(
            date=self.date,
            amount=_to_minor_units(self.amount),
            payee_name=self.place,
            imported_payee=self.place,
            cleared=False,
        )


@dataclass
class AccountTurnover:
    transactions: List[BankTransaction] = field(default_factory=list)

    def to_budget_transactions(self) -> List[BudgetTransaction]:
        return [t.to_budget_transaction() for t in self.transactions]
