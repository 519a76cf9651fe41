#!/usr/bin/env python
"""
Check pipeline - validates the pricing table and runs the golden tests.

Usage:
    python scripts/check_all.py
"""
import sys
import subprocess
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from canopy_calculator.data.check_pricing_table import run_table_check


def main():
    print("=" * 60)
    print("CANOPY CALCULATOR CHECK PIPELINE")
    print("=" * 60)
    print()

    print("[1/2] Checking pricing table...")
    report = run_table_check(verbose=True)

    if report["status"] != "success":
        print("\n❌ CHECK FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running golden tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_golden_cases.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Brackets: {report['metrics']['bracket_count']}")
    print(f"  Range: {report['metrics']['min_circumference']:g}-{report['metrics']['max_circumference']:g} inches")
    print(f"  Warnings: {len(report['warnings'])}")
    print()
    print("Column Coverage:")
    for column, count in report['metrics'].get('column_coverage', {}).items():
        print(f"  {column}: {count}/{report['metrics']['bracket_count']} brackets")


if __name__ == "__main__":
    main()
