"""Main CLI entry point for the Step Function invoker."""

import argparse
import sys
from typing import Optional

from .commands import run_step


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the invoker CLI."""
    parser = argparse.ArgumentParser(
        prog='sfn-invoke',
        description='Invoke an AWS Step Function and wait for it to finish'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    run_parser = subparsers.add_parser('run', help='Run a Step Function invocation step')
    run_parser.add_argument(
        'step',
        type=str,
        help='Path to step definition YAML file'
    )
    run_parser.add_argument(
        '--var',
        action='append',
        metavar='KEY=VALUE',
        help='Build variables (can be specified multiple times)'
    )
    run_parser.add_argument(
        '--var-file',
        type=str,
        help='Path to JSON file containing build variables'
    )
    run_parser.add_argument(
        '--env-vars',
        action='store_true',
        help='Expose the process environment as build variables'
    )
    run_parser.add_argument(
        '--poll-interval',
        type=str,
        metavar='SECONDS',
        help='Override the poll interval of the step'
    )
    run_parser.add_argument(
        '--result-file',
        type=str,
        metavar='PATH',
        help='Write the execution result as JSON to PATH'
    )
    run_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Resolve the configuration without starting an execution'
    )
    run_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    run_parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    run_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    run_parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command == 'run':
        return run_step(parsed_args)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
