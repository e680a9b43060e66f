#!/usr/bin/env python3
"""
Coverage test runner for the minesweeper engine
Runs the suite under pytest-cov for the engine and api packages
"""

import argparse
import subprocess
import sys
from pathlib import Path


PACKAGES = ["engine", "api"]


def run_coverage(fail_under: int = 0, html: bool = False) -> bool:
    """Run tests with coverage, optionally writing an HTML report"""
    print("🧪 Running tests with coverage...")
    print("=" * 50)

    cmd = [sys.executable, "-m", "pytest", "tests/", "-v", "--cov-report=term-missing"]
    cmd += [f"--cov={package}" for package in PACKAGES]
    if fail_under:
        cmd.append(f"--cov-fail-under={fail_under}")
    if html:
        cmd.append("--cov-report=html:htmlcov")

    try:
        result = subprocess.run(cmd, check=False)
    except FileNotFoundError:
        print("❌ Error: Python or pytest not found")
        return False

    if result.returncode == 0:
        print("\n✅ All tests passed!")
    else:
        print(f"\n❌ Some tests failed (exit code: {result.returncode})")

    html_report = Path("htmlcov/index.html")
    if html and html_report.exists():
        print(f"\n📊 Coverage report generated: {html_report.absolute()}")

    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run the test suite with coverage")
    parser.add_argument("--fail-under", type=int, default=0,
                        help="Fail if total coverage is below this percentage")
    parser.add_argument("--html", action="store_true", help="Write an HTML report to htmlcov/")
    args = parser.parse_args()

    success = run_coverage(args.fail_under, args.html)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
