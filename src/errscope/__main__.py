"""Command-line driver for the bundled examples.

Examples:
- python -m errscope                 # run every example
- python -m errscope nested return   # run a subset
- python -m errscope --list
- python -m errscope --json
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from errscope.demo import EXAMPLES, run_example

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="errscope",
        description="Replay the error-propagation examples: handlers, remapping, cleanup.",
    )
    parser.add_argument(
        "examples",
        nargs="*",
        metavar="EXAMPLE",
        help="Example names to run (default: all). See --list.",
    )
    parser.add_argument("--list", action="store_true", help="List examples and exit.")
    parser.add_argument(
        "--json", action="store_true", help="Print one JSON report per example."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.list:
        for example in EXAMPLES.values():
            print(f"{example.name:<12} {example.title}")  # noqa: T201
        return 0

    unknown = [name for name in args.examples if name not in EXAMPLES]
    if unknown:
        parser.error(
            f"unknown example(s): {', '.join(unknown)}. Use --list to see choices."
        )

    selected = [EXAMPLES[name] for name in args.examples] or list(EXAMPLES.values())
    exit_code = 0
    for example in selected:
        report = run_example(example)
        if report.status == "propagated":
            exit_code = 1
        if args.json:
            print(report.model_dump_json())  # noqa: T201
            continue
        print(f"--- {example.title} ---")  # noqa: T201
        for line in report.events:
            print(line)  # noqa: T201
        print(f"=> {report.summary()}\n")  # noqa: T201
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
