"""Command-line interface for the Actual importer.

Usage:
  python -m actual_importer.cli import --input transactions.json --sync-id SYNC-ID
  python -m actual_importer.cli export --username USER --from 01.01.2024

Connection settings can also come from a JSON config (``--config``) or the
ACTUAL_* / RAIFFEISEN_* environment variables.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .bank import BankAPIError, RaiffeisenClient
from .client import BudgetClient, BudgetClientError
from .config import DEFAULT_DATA_DIR, AppConfig
from .data_loader import load_transactions
from .exporter import export_bank_data
from .importer import run_import
from .reports import build_import_summary, format_export_report, format_import_report, save_json

logger = logging.getLogger("actual_importer")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import bank transactions into Actual")
    p.add_argument("--config", "-c", help="Path to JSON config")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a JSON transaction file into a budget")
    imp.add_argument("--input", "-i", required=True, help="JSON file with transactions")
    imp.add_argument("--data-dir", help=f"Local budget cache (default: {DEFAULT_DATA_DIR})")
    imp.add_argument("--server-url", help="Actual server URL")
    imp.add_argument("--password", help="Actual server password")
    imp.add_argument("--sync-id", help="Budget sync ID (Settings > Advanced)")
    imp.add_argument("--account", help="Target account name (default: first account)")
    imp.add_argument("--json", dest="json_out", help="Write import summary JSON to path")

    exp = sub.add_parser("export", help="Export bank accounts and transactions to JSON")
    exp.add_argument("--username", help="e-banking username")
    exp.add_argument("--password", help="e-banking password")
    exp.add_argument("--from", dest="date_from", default="", help="From date (dd.mm.yyyy)")
    exp.add_argument("--to", dest="date_to", help="To date (dd.mm.yyyy, default: today)")
    exp.add_argument("--out-dir", "-o", default=".", help="Output directory")
    return p.parse_args(argv)


def _cmd_import(args: argparse.Namespace, cfg: AppConfig) -> int:
    cfg.override(
        data_dir=args.data_dir,
        server_url=args.server_url,
        password=args.password,
        sync_id=args.sync_id,
        account=args.account,
    )
    txns = load_transactions(args.input)
    client = BudgetClient()
    result = run_import(cfg, txns, client=client)

    summary = build_import_summary(result, source=args.input)
    print(format_import_report(summary))
    if args.json_out:
        save_json(summary, args.json_out)
        print(f"\nSaved JSON summary to: {args.json_out}")
    return 0


def _cmd_export(args: argparse.Namespace, cfg: AppConfig) -> int:
    cfg.override(bank_username=args.username, bank_password=args.password)
    cfg.require("bank_username", "bank_password")
    result = export_bank_data(
        RaiffeisenClient(),
        cfg.bank_username,
        cfg.bank_password,
        date_from=args.date_from,
        date_to=args.date_to,
        out_dir=args.out_dir,
    )
    print(format_export_report(result))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = AppConfig.load(args.config)
    try:
        if args.command == "import":
            return _cmd_import(args, cfg)
        return _cmd_export(args, cfg)
    except (ValueError, BudgetClientError, BankAPIError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
