# src/effectscope/__main__.py
"""CLI for decoding kind words and probing the host floating-point environment.

Usage:
    python -m effectscope describe <word>... [--json]
    python -m effectscope check <word> --permitted <mask> [--json]
    python -m effectscope probe [--json]

Words and masks are decimal, 0x-hex, or kind names joined with '|'.

Examples:
    # Decode a word from a log line
    python -m effectscope describe 0x2814

    # Would this word pass a context permitting reference and fpe?
    python -m effectscope check 0x201c --permitted "reference|fpe"

    # Which floating-point exceptions does this machine report?
    python -m effectscope probe --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import NoReturn

from effectscope.fenv.environment import current_environment
from effectscope.fenv.hardware import get_fenv_runtime
from effectscope.kinds import format_kind, kind_names, parse_kind
from effectscope.probes import run_probes
from effectscope.report import build_report
from effectscope.result import Failure, Success


def cmd_describe(words: list[str], as_json: bool = False) -> int:
    """
    Print the flag names of each kind word.

    Returns:
        Exit code (0 = all words parsed, 2 = a word could not be parsed)
    """
    described: list[dict[str, object]] = []
    for text in words:
        match parse_kind(text):
            case Success(word):
                described.append({"input": text, "kind": word, "names": kind_names(word)})
            case Failure(error):
                print(f"✗ Error: {error.message}", file=sys.stderr)
                return 2

    if as_json:
        print(json.dumps(described, indent=2))
    else:
        for entry in described:
            word = entry["kind"]
            assert isinstance(word, int)
            print(f"{word:#06x}  {format_kind(word)}")
    return 0


def cmd_check(word_text: str, permitted_text: str, as_json: bool = False) -> int:
    """
    Judge a kind word against a permitted mask.

    Returns:
        Exit code (0 = valid, 1 = disallowed effects present, 2 = parse error)
    """
    match (parse_kind(word_text), parse_kind(permitted_text)):
        case (Success(word), Success(permitted)):
            report = build_report(word, permitted)
        case (Failure(error), _) | (_, Failure(error)):
            print(f"✗ Error: {error.message}", file=sys.stderr)
            return 2
        case _:
            raise AssertionError("Unreachable: Result match exhaustive")

    if as_json:
        print(report.model_dump_json(indent=2))
    elif report.valid:
        print(f"✓ {report.label} is within {format_kind(permitted)}")
    else:
        print(f"✗ disallowed effects: {'|'.join(report.disallowed)}")
    return 0 if report.valid else 1


def cmd_probe(as_json: bool = False) -> int:
    """
    Report which floating-point exceptions this host exposes.

    Returns:
        Exit code (always 0; missing categories are not an error)
    """
    runtime = get_fenv_runtime()
    environment = current_environment()
    results = run_probes()

    if as_json:
        print(
            json.dumps(
                {
                    "hardware": {
                        "status": runtime.kind,
                        "machine": runtime.machine,
                        "library": runtime.library,
                        "reason": runtime.reason,
                    },
                    "supported": kind_names(int(environment.supported)),
                    "probes": [
                        {
                            "name": result.name,
                            "expression": result.expression,
                            "kind": result.kind,
                            "names": kind_names(result.kind),
                            "detected": result.detected,
                        }
                        for result in results
                    ],
                },
                indent=2,
            )
        )
        return 0

    match runtime.kind:
        case "ready":
            print(f"hardware flags: {runtime.machine} via {runtime.library}")
        case _:
            print(f"hardware flags: unavailable ({runtime.reason})")
    print(f"supported: {format_kind(int(environment.supported))}")
    for result in results:
        mark = "✓" if result.detected else "·"
        print(f"{mark} {result.name:<22} {result.kind:#06x}  {format_kind(result.kind)}")
    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="effectscope diagnostics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # describe command
    describe_parser = subparsers.add_parser("describe", help="Decode kind words")
    describe_parser.add_argument("words", nargs="+", help="Kind words or names")
    describe_parser.add_argument("--json", action="store_true", help="Emit JSON")

    # check command
    check_parser = subparsers.add_parser(
        "check", help="Check a kind word against a permitted mask"
    )
    check_parser.add_argument("word", help="Kind word or names")
    check_parser.add_argument("--permitted", required=True, help="Permitted EffectKind flags")
    check_parser.add_argument("--json", action="store_true", help="Emit the full report as JSON")

    # probe command
    probe_parser = subparsers.add_parser(
        "probe", help="Report floating-point exception support on this host"
    )
    probe_parser.add_argument("--json", action="store_true", help="Emit JSON")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    match args.command:
        case "describe":
            exit_code = cmd_describe(args.words, args.json)
        case "check":
            exit_code = cmd_check(args.word, args.permitted, args.json)
        case "probe":
            exit_code = cmd_probe(args.json)
        case _:
            parser.print_help()
            sys.exit(2)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
