#!/usr/bin/env python3
"""
Main CLI for portfolio risk reports and exports.
Usage: python cli.py COMMAND SNAPSHOT [options]
"""

import argparse
import sys
from pathlib import Path

from portfolio.loaders import load_portfolio_snapshot, SnapshotLoadError
from portfolio.validators import ValidationError
from reports.export_driver import export_tabular, export_markdown, export_narrative
from reports.path_policy import ExportKind
from reports.print_surface import BrowserPrintSurface
from utils.logging_setup import configure_logging
from utils.settings import load_settings, SettingsError


TABULAR_COMMANDS = {
    'csv': ExportKind.PORTFOLIO,
    'transactions': ExportKind.TRANSACTIONS,
    'holdings': ExportKind.HOLDINGS,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Export portfolio snapshots as CSV, Markdown or a printable report',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py csv ./snapshots/portfolio.json
  python cli.py transactions ./snapshots/portfolio.json --output-dir ./out/
  python cli.py markdown ./snapshots/portfolio.json
  python cli.py print ./snapshots/portfolio.json
        """
    )

    parser.add_argument('command',
                        choices=sorted(list(TABULAR_COMMANDS) + ['markdown', 'print']),
                        help='Export to produce')
    parser.add_argument('snapshot', type=Path, help='Portfolio snapshot JSON file')
    parser.add_argument('--output-dir',
                        type=Path,
                        help='Directory for exported files (default: settings output_dir)')
    parser.add_argument('--config',
                        type=Path,
                        help='YAML settings file (default: ./config/export_settings.yml)')
    parser.add_argument('--quiet', '-q',
                        action='store_true',
                        help='Minimal output')
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    try:
        portfolio = load_portfolio_snapshot(args.snapshot)
    except (SnapshotLoadError, ValidationError) as e:
        print(f"ERROR: Cannot load snapshot: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Loaded portfolio {portfolio.address}")
        print(f"  {len(portfolio.holdings)} holdings, {len(portfolio.transactions)} transactions, "
              f"{len(portfolio.performance_history)} history points")

    if args.command in TABULAR_COMMANDS:
        result = export_tabular(portfolio, TABULAR_COMMANDS[args.command], args.output_dir, settings)
    elif args.command == 'markdown':
        result = export_markdown(portfolio, args.output_dir, settings)
    else:
        result = export_narrative(portfolio, BrowserPrintSurface(), settings)

    if not result.succeeded:
        print(f"ERROR ({result.failure_kind}): {result.error_message}", file=sys.stderr)
        return 1

    if args.quiet:
        print(result.artifact_path or result.final_state)
    else:
        print("Export complete!")
        if result.artifact_path:
            print(f"File: {result.artifact_path} ({result.content_type}, {result.bytes_written:,} bytes)")
        else:
            print("Report sent to the browser print dialog")
        print(f"Duration: {result.duration_seconds:.2f}s")

    return 0


if __name__ == '__main__':
    sys.exit(main())
