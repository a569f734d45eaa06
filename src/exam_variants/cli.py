"""
Command line front end.

    exam-variants generate EXAM.json -n 10 --seed 42 -o generation.json
    exam-variants analyze generation.json -o report.json --fail-on-error

Exit codes:
    0  success
    1  invalid input (ValidationError, InvalidConfiguration, MalformedVariant,
       missing file)
    2  --fail-on-error and the report holds an ERROR flag
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from exam_variants import __version__
from exam_variants.analysis import MalformedVariant, analyze
from exam_variants.core.models import Severity
from exam_variants.core.schemas import ValidationError
from exam_variants.core.utils import (
    load_exam_json,
    load_generation_json,
    save_generation_json,
    save_report_json,
    serialize_generation,
    serialize_report,
)
from exam_variants.generator import GenerationConfig, InvalidConfiguration, generate

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_REPORT_ERRORS = 2


def parse_seed(value: str):
    """Integer seeds stay integers; anything else is used as a string seed."""
    try:
        return int(value)
    except ValueError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-variants",
        description="Generate randomized exam variants and audit how similar they are",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate exam.json -n 10 --seed 42 -o generation.json
  %(prog)s generate exam.json -n 5 --no-shuffle-answers
  %(prog)s analyze generation.json -o report.json --fail-on-error
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate variants for an exam document")
    gen.add_argument("exam", type=Path, help="Exam JSON document")
    gen.add_argument(
        "-n", "--variants",
        dest="variant_count",
        type=int,
        required=True,
        help="Number of variants to generate",
    )
    gen.add_argument(
        "--shuffle-questions",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomize question order (default: on)",
    )
    gen.add_argument(
        "--shuffle-answers",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomize multiple choice option order (default: on)",
    )
    gen.add_argument("--seed", type=parse_seed, help="Seed for a reproducible batch")
    gen.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used to build variants (default: 1)",
    )
    gen.add_argument("-o", "--output", type=Path, help="Write the generation here (default: stdout)")
    gen.add_argument("--strict", action="store_true", help="Validate the exam against its JSON Schema")

    ana = subparsers.add_parser("analyze", help="Analyze a generation document")
    ana.add_argument("generation", type=Path, help="Generation JSON document")
    ana.add_argument("-o", "--output", type=Path, help="Write the report here (default: stdout)")
    ana.add_argument(
        "--fail-on-error",
        action="store_true",
        help=f"Exit with {EXIT_REPORT_ERRORS} when the report holds an ERROR flag",
    )
    ana.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for per-question statistics (default: 1)",
    )
    ana.add_argument("--strict", action="store_true", help="Validate the generation against its JSON Schema")

    return parser


def _emit(data: dict) -> None:
    sys.stdout.write(json.dumps(data, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")


def run_generate(args: argparse.Namespace) -> int:
    exam = load_exam_json(args.exam, strict=args.strict)
    config = GenerationConfig(
        variant_count=args.variant_count,
        shuffle_questions=args.shuffle_questions,
        shuffle_answers=args.shuffle_answers,
        seed=args.seed,
        max_workers=args.workers,
    )
    generation = generate(exam, config)

    if args.output:
        save_generation_json(generation, args.output)
        logger.info(f"Wrote {generation.variant_count} variants to {args.output}")
    else:
        _emit(serialize_generation(generation))
    return EXIT_OK


def run_analyze(args: argparse.Namespace) -> int:
    generation = load_generation_json(args.generation, strict=args.strict)
    report = analyze(generation, max_workers=args.workers)

    if args.output:
        save_report_json(report, args.output)
        logger.info(f"Wrote similarity report to {args.output}")
    else:
        _emit(serialize_report(report))

    for flag in report.flags:
        level = logging.ERROR if flag.severity is Severity.ERROR else logging.WARNING
        logger.log(level, f"{flag.type.value}: {flag.message}")

    if args.fail_on_error and report.has_errors:
        return EXIT_REPORT_ERRORS
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    commands = {"generate": run_generate, "analyze": run_analyze}
    try:
        return commands[args.command](args)
    except ValidationError as e:
        location = f" at {e.path}" if e.path else ""
        logger.error(f"Invalid document{location}: {e}")
        return EXIT_INVALID_INPUT
    except (InvalidConfiguration, MalformedVariant, FileNotFoundError) as e:
        logger.error(str(e))
        return EXIT_INVALID_INPUT


if __name__ == "__main__":
    sys.exit(main())
