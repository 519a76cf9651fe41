"""
Pricing Table Check - Validates the static bracket table.

Loads pricing_table.csv, checks bracket ordering, overlaps and surcharge
values, and writes a JSON report.
"""
import sys
from pathlib import Path
from typing import Optional

from ..config.settings import get_settings, Settings
from ..engine.pricing_table import (
    load_pricing_table,
    check_pricing_table,
    write_report,
    PricingTableError,
)


def run_table_check(settings: Optional[Settings] = None, verbose: bool = True) -> dict:
    """
    Load and check the configured pricing table.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Check report dictionary
    """
    settings = settings or get_settings()
    table_path = settings.pricing_table

    try:
        rows = load_pricing_table(table_path, verbose=verbose)
    except (FileNotFoundError, PricingTableError) as e:
        msg = f"CRITICAL ERROR: {e}"
        if verbose:
            print(msg)
        return {
            "status": "failed",
            "input_files": {"pricing_table": {"path": str(table_path)}},
            "metrics": {},
            "warnings": [],
            "errors": [msg],
        }

    report = check_pricing_table(rows, source=table_path)

    if verbose:
        for warning in report["warnings"]:
            print(f"  ⚠️ {warning}")
        if report["errors"]:
            print("Validation errors:")
            for err in report["errors"]:
                print(f"  ❌ {err}")
        else:
            metrics = report["metrics"]
            print(
                f"✅ {metrics['bracket_count']} brackets cover "
                f"{metrics['min_circumference']:g}-{metrics['max_circumference']:g} inches"
            )

    write_report(report, settings.check_report)
    if verbose:
        print(f"   Report: {settings.check_report}")

    return report


def main():
    """CLI entry point."""
    print("Checking pricing table...")
    report = run_table_check()

    if report["status"] != "success":
        print(f"\n❌ Check failed with {len(report['errors'])} errors")
        sys.exit(1)


if __name__ == "__main__":
    main()
