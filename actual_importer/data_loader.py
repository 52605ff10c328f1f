"""Data loading helpers.

Reads and writes the JSON transaction files exchanged between the bank
exporter and the budget importer. Each record is an object with at least a
``date`` field; the importer also understands:
    amount (int, minor units), payee_name, imported_payee, notes,
    imported_id, cleared
"""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union


DateValue = Union[dt.date, dt.datetime]


@dataclass
class BudgetTransaction:
    date: dt.datetime
    amount: int  # minor units, negative = outflow
    payee_name: str = ""
    imported_payee: str = ""
    notes: str = ""
    imported_id: str = ""
    cleared: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "date": self.date.isoformat(),
            "amount": self.amount,
            "payee_name": self.payee_name,
            "imported_payee": self.imported_payee,
        }
        if self.notes:
            data["notes"] = self.notes
        if self.imported_id:
            data["imported_id"] = self.imported_id
        data["cleared"] = self.cleared
        return data


_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M:%S",
    "%Y/%m/%d",
)


def parse_date(value: Any) -> DateValue:
    if isinstance(value, (dt.date, dt.datetime)):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unrecognized date value: {value!r}")
    text = value.strip()
    # Timestamps first so the time of day is kept
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        if "T" in iso or " " in iso or len(iso) > 10:
            return dt.datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            parsed = dt.datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed if "%H" in fmt else parsed.date()
    raise ValueError(f"Unrecognized date format: {value}")


def as_calendar_date(value: DateValue) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def normalize_dates(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Replace every record's ``date`` string with the parsed value, in place."""
    for i, record in enumerate(records):
        if "date" not in record:
            raise ValueError(f"Transaction #{i} has no date")
        record["date"] = parse_date(record["date"])
    return records


def load_transactions(path: str | Path) -> List[Dict[str, Any]]:
    p = Path(path)
    with p.open("r", encoding="utf-8-sig") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{p.name}: expected a JSON array of transactions")
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"{p.name}: transaction #{i} is not an object")
    return raw


def save_transactions(records: Iterable[BudgetTransaction], path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2)
        f.write("\n")
