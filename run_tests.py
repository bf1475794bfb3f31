#!/usr/bin/env python3
"""
Test runner script for benchaudit

Wraps pytest with the marker selections used during development.

Usage:
    python run_tests.py                    # Run all tests
    python run_tests.py --unit             # Run only unit tests
    python run_tests.py --integration      # Run only integration tests
    python run_tests.py --fast             # Skip slow tests (shell timeouts)
    python run_tests.py --portable         # Skip tests that need a POSIX system
    python run_tests.py --coverage         # Run with coverage report
    python run_tests.py tests/test_operators.py  # Run specific test file
"""

import sys
import argparse
import subprocess


def build_marker_expression(args):
    """Combine the selection flags into one pytest -m expression"""
    selected = []
    if args.unit:
        selected.append('unit')
    if args.integration:
        selected.append('integration')

    clauses = []
    if selected:
        clauses.append('(' + ' or '.join(selected) + ')')
    if args.fast:
        clauses.append('not slow')
    if args.portable:
        clauses.append('not requires_unix')

    return ' and '.join(clauses)


def main():
    parser = argparse.ArgumentParser(
        description='Run benchaudit test suite',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Test selection options
    parser.add_argument('--unit', '-u', action='store_true', help='Run only unit tests')
    parser.add_argument('--integration', '-i', action='store_true', help='Run only integration tests')
    parser.add_argument('--fast', '-f', action='store_true', help='Skip slow tests')
    parser.add_argument('--portable', '-p', action='store_true',
                        help='Skip tests that need a POSIX shell and file system')

    # Output options
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Quiet output (only show summary)')
    parser.add_argument('--coverage', action='store_true', help='Generate coverage report')

    # Test execution options
    parser.add_argument('--failfast', '-x', action='store_true', help='Stop on first failure')
    parser.add_argument('--last-failed', '--lf', action='store_true',
                        help='Run only tests that failed last time')

    parser.add_argument('tests', nargs='*', help='Specific test files or directories to run')

    args = parser.parse_args()

    cmd = [sys.executable, '-m', 'pytest']

    expression = build_marker_expression(args)
    if expression:
        cmd.extend(['-m', expression])

    if args.verbose:
        cmd.append('-vv')
    elif args.quiet:
        cmd.append('-q')
    else:
        cmd.append('-v')

    if args.coverage:
        cmd.extend(['--cov=benchaudit', '--cov-report=term-missing'])

    if args.failfast:
        cmd.append('-x')
    if args.last_failed:
        cmd.append('--lf')

    cmd.extend(args.tests or ['tests'])

    print(f"Running: {' '.join(cmd)}")
    print("-" * 70)

    try:
        result = subprocess.run(cmd)
        return result.returncode
    except KeyboardInterrupt:
        print("\n\nTest run interrupted by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
