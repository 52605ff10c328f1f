"""Reporting utilities.

Formats import and export outcomes into human-readable text and
JSON-serializable dicts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .client import ImportResult
from .exporter import ExportResult


def build_import_summary(result: ImportResult, source: str | Path | None = None) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "account_id": result.account_id,
        "account_name": result.account_name,
        "transaction_count": result.count,
        "transaction_ids": list(result.imported_ids),
    }
    if source is not None:
        summary["source"] = str(source)
    return summary


def format_import_report(summary: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("=== Actual Import ===")
    if summary.get("source"):
        lines.append(f"Source:       {summary['source']}")
    account = summary.get("account_name") or summary["account_id"]
    lines.append(f"Account:      {account}")
    lines.append(f"Transactions: {summary['transaction_count']}")
    return "\n".join(lines)


def format_export_report(result: ExportResult) -> str:
    lines: List[str] = ["=== Bank Export ==="]
    lines.append(f"Accounts:     {result.accounts_file}")
    for path in result.transaction_files:
        lines.append(f"Transactions: {path}")
    lines.append(f"Total:        {result.transaction_count}")
    return "\n".join(lines)


def save_json(summary: Dict, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
