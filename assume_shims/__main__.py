#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
assume_shims/__main__.py
========================

Command line front end for the assumption engine.

Usage
-----
    python -m assume_shims <command> [options]

Commands
--------
    check       Apply a named assumption to a value literal
    functions   List the registered assumption functions

Values and parameters are written in the literal syntax documented in
``assume_shims.literal``, e.g.::

    assume check stringprefix '(unknown string)' '"foo-"'
    assume check listlength '(list string "a")' 1 2
    assume check equal '(unknown string (prefix "arn:"))' '"arn:aws"'

Exit codes: 0 success, 1 assumption error, 2 usage or literal error.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from typing import Optional, Sequence

from assume_shims import __version__
from assume_shims.errors import AssumptionError, UnknownFunctionError
from assume_shims.literal import LiteralError, parse_value
from assume_shims.provider import new_provider
from assume_shims.reporter import Reporter

EXIT_OK = 0
EXIT_ASSUMPTION = 1
EXIT_USAGE = 2

_log = logging.getLogger("assume_shims")


def _use_color(choice: str, stream) -> bool:
    if choice == "always":
        return True
    if choice == "never":
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def cmd_check(args: argparse.Namespace, reporter: Reporter) -> int:
    provider = new_provider()
    try:
        fn = provider.function(args.function)
    except UnknownFunctionError as exc:
        reporter.error(exc)
        return EXIT_USAGE

    try:
        values = [parse_value(text) for text in [args.value, *args.params]]
    except LiteralError as exc:
        reporter.problem(str(exc))
        return EXIT_USAGE

    try:
        result = fn.call(*values)
    except AssumptionError as exc:
        reporter.error(exc, fn)
        return EXIT_ASSUMPTION
    reporter.result(result)
    return EXIT_OK


def cmd_functions(args: argparse.Namespace, reporter: Reporter) -> int:
    reporter.functions(new_provider())
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the assume CLI."""
    parser = argparse.ArgumentParser(
        prog="assume",
        description="Attach assumptions to known, unknown or null values.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              %(prog)s check notnull '(unknown string)'
              %(prog)s check stringprefix '(unknown string)' '"foo-"'
              %(prog)s check listlengthmin '(unknown (list string))' 1
              %(prog)s functions
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log engine decisions to stderr",
    )
    parser.add_argument(
        "--color",
        choices=("auto", "always", "never"),
        default="auto",
        help="Colour terminal output (default: auto)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # ── check ────────────────────────────────────────────────────────────

    p_check = subparsers.add_parser(
        "check",
        help="Apply an assumption to a value",
        description=(
            "Apply the named assumption function to VALUE with the given "
            "assumption parameters and print the resulting value."
        ),
    )
    p_check.add_argument("function", help="Assumption function name, e.g. notnull")
    p_check.add_argument("value", help="Value literal the assumption is about")
    p_check.add_argument("params", nargs="*", help="Assumption parameter literals")
    p_check.set_defaults(func=cmd_check)

    # ── functions ────────────────────────────────────────────────────────

    p_functions = subparsers.add_parser(
        "functions",
        help="List available assumption functions",
    )
    p_functions.set_defaults(func=cmd_functions)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Returns
    -------
    int
        Exit code (0 = success, 1 = assumption error, 2 = usage error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    reporter = Reporter(color=_use_color(args.color, sys.stdout))
    _log.debug("running %s", args.command)
    try:
        return args.func(args, reporter)
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        return 130


if __name__ == "__main__":
    sys.exit(main())
