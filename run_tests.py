#!/usr/bin/env python3
"""
Test runner script for PyFastWave.

Shortcuts for the test suites: imports, unit (one file per solver stage),
integration (full simulations) and CLI.
"""
import argparse
import subprocess
import sys

SUITES = {
    "imports": ("tests/test_imports.py", "Import tests"),
    "unit": ("tests/unit/", "Unit tests"),
    "integration": ("tests/integration/", "Integration tests"),
    "cli": ("tests/unit/test_cli.py", "CLI tests"),
}


def run_command(cmd, description=None):
    """Run a command and return True on success."""
    if description:
        print(f"→ {description}")

    result = subprocess.run(cmd, shell=True)
    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(
        description="PyFastWave test runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py --imports          # Run only import tests
  python run_tests.py --unit             # Run only unit tests
  python run_tests.py --integration      # Run only end-to-end simulations
  python run_tests.py --cli              # Run only command line tests
  python run_tests.py --all              # Run everything, suite by suite
  python run_tests.py --fast             # Skip tests marked slow
        """,
    )

    for suite in SUITES:
        parser.add_argument(f"--{suite}", action="store_true", help=f"Run {suite} tests only")
    parser.add_argument("--all", action="store_true", help="Run all suites")
    parser.add_argument("--fast", action="store_true", help="Exclude slow tests")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--coverage", action="store_true", help="Run with coverage report")

    args = parser.parse_args()

    base_cmd = f"PYTHONPATH=. {sys.executable} -m pytest"
    base_cmd += " -v" if args.verbose else " -q"
    if args.coverage:
        base_cmd += " --cov=pyfastwave --cov-report=html --cov-report=term"
    if args.fast:
        base_cmd += " -m 'not slow'"
    base_cmd += " --disable-warnings"

    selected = [suite for suite in SUITES if getattr(args, suite)]
    if args.all:
        selected = ["imports", "unit", "integration"]

    success = True
    if selected:
        for suite in selected:
            path, description = SUITES[suite]
            if not run_command(f"{base_cmd} {path}", description):
                success = False
    else:
        cmd = f"{base_cmd} tests/test_imports.py tests/unit/"
        success = run_command(cmd, "Running basic test suite (imports + unit tests)")

    if success:
        print("\n✅ All tests passed!")
        return 0
    print("\n❌ Some tests failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
