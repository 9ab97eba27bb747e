#!/usr/bin/env python3
"""
STDF Parametric Report

Turns one or more STDF files into CSV reports with one row per tested part
and one column per test, so results line up across parts even when a test
did not run on every part.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_SEPARATOR, ReportOptions
from .diagnostics import Severity
from .pipeline import run


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Build parametric CSV reports from STDF files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stdf-para lot1.stdf lot2.stdf -o reports
  stdf-para *.stdf -p -f -m
        """,
    )
    parser.add_argument("files", nargs="+",
                        help="Input STDF files")
    parser.add_argument("-p", "--pass-fail", action="store_true",
                        help="Include a pass/fail column for each test")
    parser.add_argument("-f", "--functional", action="store_true",
                        help="Include functional tests in the report")
    parser.add_argument("-m", "--multiple-output-files", action="store_true",
                        help="Write one report per input file")
    parser.add_argument("-s", "--separator", default=DEFAULT_SEPARATOR,
                        help="Separator between test number and test name (default: %(default)s)")
    parser.add_argument("-o", "--output-dir",
                        help="Output directory")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output")
    return parser.parse_args(argv)


def options_from_args(args) -> ReportOptions:
    return ReportOptions(
        files=tuple(args.files),
        include_pass_fail=args.pass_fail,
        include_functional=args.functional,
        split_output=args.multiple_output_files,
        separator=args.separator,
        output_dir=Path(args.output_dir) if args.output_dir else None,
        verbose=args.verbose,
    )


def main(argv=None):
    """Main entry point of the script"""
    args = parse_arguments(argv)
    options = options_from_args(args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        summary = run(options)
    except OSError as e:
        print(f"Error writing report: {e}", file=sys.stderr)
        return 1

    if options.verbose:
        for result in summary.results:
            print(f"  {result.file_name}: {result.devices} parts, {len(result.diagnostics)} diagnostics")

    for name in summary.skipped:
        print(f"Skipped {name}: no complete header", file=sys.stderr)

    if not summary.written:
        print("No report written!", file=sys.stderr)
        return 1

    errors = [d for d in summary.diagnostics if d.severity is Severity.ERROR]
    for path in summary.written:
        print(f"Report written: {path}")
    if errors:
        print(f"Completed with {len(errors)} errors, see log above")
    return 0


if __name__ == "__main__":
    sys.exit(main())
