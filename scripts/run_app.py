#!/usr/bin/env python
"""
Check the pricing table, then serve the canopy calculator form.

Usage:
    python scripts/run_app.py [--skip-check] [--port 8501]
"""
import argparse
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from canopy_calculator.data.check_pricing_table import run_table_check


def main():
    parser = argparse.ArgumentParser(description="Run the canopy calculator form")
    parser.add_argument('--skip-check', action='store_true', help="start without checking the pricing table")
    parser.add_argument('--port', type=int, default=8501)
    args = parser.parse_args()

    ui_path = project_root / 'src' / 'canopy_calculator' / 'ui' / 'app_streamlit.py'

    if not args.skip_check:
        report = run_table_check(verbose=False)
        if report["status"] != "success":
            print("ERROR: pricing table failed its check, estimates would be wrong:")
            for error in report["errors"]:
                print(f"  ❌ {error}")
            sys.exit(1)
        print(f"Pricing table OK: {report['metrics']['bracket_count']} brackets")

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), '--server.port', str(args.port)]
    print(f"Starting canopy calculator on port {args.port}")

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nCalculator stopped.")


if __name__ == "__main__":
    main()
