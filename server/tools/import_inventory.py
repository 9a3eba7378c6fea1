"""
Import an inventory export from the command line.

Runs the same parse + reconcile pipeline as POST /api/imports against the
configured database (DATABASE_URL, or the default SQLite file).

Usage:
    python tools/import_inventory.py export.csv --datacenter DC1
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from cable_inventory.config import get_settings
from cable_inventory.db.session import get_session_factory, init_db
from cable_inventory.logging_config import setup_logging
from cable_inventory.services.reconciliation_service import import_inventory_file


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import a datacenter inventory export (CSV).")
    parser.add_argument("csv_path", type=Path, help="Path to the CSV export")
    parser.add_argument(
        "--datacenter",
        default="",
        help="Target datacenter scope (default: unscoped)",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_format="text")

    if not args.csv_path.exists():
        print(f"File not found: {args.csv_path}", file=sys.stderr)
        return 2

    init_db()
    db = get_session_factory()()
    try:
        outcome = import_inventory_file(
            db,
            args.csv_path.read_bytes(),
            args.csv_path.name,
            args.datacenter,
            settings,
        )
    finally:
        db.close()

    if not outcome.success:
        print(f"Import failed: {outcome.error}", file=sys.stderr)
        return 1

    print(
        f"Imported {outcome.records_processed} records "
        f"({outcome.new_products} new, {outcome.updated_products} updated)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
