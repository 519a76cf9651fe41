"""
Pricing Table - Loads and checks the static circumference bracket table.

The table is plain data (one CSV row per bracket) so brackets and surcharges
can change without touching the resolver. Columns:

    size,leafy,pokey,houseShed,fence,powerlines,garden,stumpRemoval

``size`` is a ``"min-max"`` inch range; blank surcharge cells mean
"not defined" and contribute nothing.
"""
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Iterable

import pandas as pd

from .models import PricingTableRow, SizeRange, SURCHARGE_COLUMNS


class PricingTableError(ValueError):
    """Raised when the pricing table file cannot be turned into rows."""


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def rows_from_records(records: Iterable[dict]) -> list[PricingTableRow]:
    """
    Build table rows from data-file shaped records.

    Each record needs a ``size`` key; missing, blank or NaN surcharges become None.
    """
    rows = []
    for index, record in enumerate(records, start=1):
        size = record.get('size')
        if size is None or pd.isna(size) or not str(size).strip():
            raise PricingTableError(f"Row {index}: missing size range")
        try:
            size_range = SizeRange.parse(size)
        except ValueError as e:
            raise PricingTableError(f"Row {index}: invalid size range {size!r} ({e})")

        values = {}
        for column, attr in SURCHARGE_COLUMNS.items():
            raw = record.get(column)
            if raw is None or (not isinstance(raw, str) and pd.isna(raw)) or str(raw).strip() == '':
                values[attr] = None
                continue
            try:
                values[attr] = float(raw)
            except (TypeError, ValueError):
                raise PricingTableError(f"Row {index} ({size}): {column} must be a number, got {raw!r}")

        rows.append(PricingTableRow(size_range=size_range, **values))
    return rows


def load_pricing_table(path: Path, verbose: bool = False) -> list[PricingTableRow]:
    """
    Load the pricing table from CSV, keeping file order.

    Raises:
        FileNotFoundError: the file does not exist
        PricingTableError: the file is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Pricing table not found at {path}. "
            "Set CANOPY_PRICING_TABLE or restore the packaged pricing_table.csv."
        )

    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    df.columns = [c.strip() for c in df.columns]
    if 'size' not in df.columns:
        raise PricingTableError(f"{path}: missing required 'size' column")

    unknown = [c for c in df.columns if c != 'size' and c not in SURCHARGE_COLUMNS]
    if unknown and verbose:
        print(f"WARNING: ignoring unknown columns in {path.name}: {', '.join(unknown)}")

    df = df.dropna(how='all')
    rows = rows_from_records(df.to_dict(orient='records'))

    if verbose:
        print(f"Loaded {len(rows)} pricing brackets from {path}")
    return rows


def check_pricing_table(rows: list[PricingTableRow], source: Optional[Path] = None) -> dict:
    """
    Check the data-integrity preconditions the resolver relies on.

    The resolver itself never runs these checks; overlapping brackets simply
    resolve to whichever comes first.

    Returns:
        Report dictionary with status, metrics, warnings and errors
    """
    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    if source is not None:
        report["input_files"]["pricing_table"] = {
            "path": str(source),
            "hash": get_file_hash(Path(source))
        }

    if not rows:
        report["errors"].append("Pricing table has no brackets")

    for row in rows:
        if row.size_range.min > row.size_range.max:
            report["errors"].append(f"Bracket {row.size_range}: min is greater than max")
        if row.size_range.min < 0:
            report["errors"].append(f"Bracket {row.size_range}: negative circumference")
        for column in SURCHARGE_COLUMNS:
            amount = row.surcharge(column)
            if amount is not None and amount < 0:
                report["errors"].append(f"Bracket {row.size_range}: negative {column} surcharge ({amount:g})")
        missing = [c for c in SURCHARGE_COLUMNS if row.surcharge(c) is None]
        if missing:
            report["warnings"].append(f"Bracket {row.size_range}: no value for {', '.join(missing)}")

    for previous, current in zip(rows, rows[1:]):
        if current.size_range.min < previous.size_range.min:
            report["errors"].append(f"Bracket {current.size_range} is out of order (follows {previous.size_range})")
        elif current.size_range.min <= previous.size_range.max:
            report["errors"].append(f"Bracket {current.size_range} overlaps {previous.size_range}")
        elif current.size_range.min - previous.size_range.max > 1:
            report["warnings"].append(
                f"Gap between {previous.size_range} and {current.size_range}: circumferences in between are unpriced"
            )

    report["metrics"] = {
        "bracket_count": len(rows),
        "min_circumference": min((r.size_range.min for r in rows), default=None),
        "max_circumference": max((r.size_range.max for r in rows), default=None),
        "column_coverage": {
            column: sum(1 for r in rows if r.surcharge(column) is not None)
            for column in SURCHARGE_COLUMNS
        },
    }
    report["status"] = "failed" if report["errors"] else "success"
    return report


def write_report(report: dict, report_path: Path):
    """Write a check report as JSON."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2)
