#!/usr/bin/env python3
"""Summarize the viewer's DuckDB cache and emit a JSON report."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable

from swapi_viewer.cache_report import build_report, purge
from swapi_viewer.config import Config
from swapi_viewer.db import DuckDb


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--db-path",
        default=None,
        help="Override DuckDB database path (otherwise uses SWAPI_VIEWER_CACHE_DB)",
    )
    parser.add_argument(
        "--expiry",
        type=float,
        default=None,
        help="Expiry window in seconds (defaults to the configured window)",
    )
    parser.add_argument(
        "--purge",
        action="store_true",
        help="Remove expired and unreadable entries after reporting",
    )
    parser.add_argument(
        "--output",
        default="-",
        help="Where to write the JSON report (use '-' for stdout)",
    )
    parsed = parser.parse_args(list(argv) if argv is not None else None)
    if parsed.expiry is not None and parsed.expiry <= 0:
        parser.error("--expiry must be positive")
    return parsed


def _write_report(data: dict, destination: str) -> None:
    if destination == "-":
        json.dump(data, sys.stdout, indent=2)
        print()
        return
    path = Path(destination).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    print(f"Wrote cache report to {path}")


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    config = Config()
    expiry = args.expiry or config.cache_expiry_seconds
    db = DuckDb(db_path=args.db_path, config=config)
    try:
        report = build_report(db, expiry)
        if args.purge:
            report["purged"] = purge(db, expiry)
    finally:
        db.close()
    _write_report(report, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
