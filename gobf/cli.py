from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .compiler import CompileError, GoCompiler
from .template import DEFAULT_MEMORY_SIZE, TemplateError, load_template

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    # Invalid UTF-8 decodes to U+FFFD and is compiled as commentary.
    return source_path.read_bytes().decode("utf-8", errors="replace")


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gobf", description="Compile Brainfuck into a Go program")
    parser.add_argument(
        "-i",
        "--in",
        dest="source",
        required=True,
        help="Path to the Brainfuck source file",
    )
    parser.add_argument(
        "-m",
        "--mem",
        type=_positive_int,
        default=DEFAULT_MEMORY_SIZE,
        help=f"Number of memory locations to allocate (default: {DEFAULT_MEMORY_SIZE})",
    )
    parser.add_argument(
        "-o",
        "--out",
        default=str(Path.cwd() / "out.go"),
        help="Destination of the compiled program, '-' for stdout (default: out.go in the current directory)",
    )
    parser.add_argument(
        "-t",
        "--template",
        help="Go template file with ${mem} and ${body} placeholders (default: bundled template)",
    )
    parser.add_argument(
        "--body-only",
        action="store_true",
        help="Emit only the generated statements without the surrounding program",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        source_text = _read_source(args.source)
    except OSError as exc:
        logger.debug("Cannot read %s: %s", args.source, exc)
        print(str(exc), file=sys.stderr)
        return 1

    try:
        if args.body_only:
            output = GoCompiler().compile(source_text)
        else:
            compiler = GoCompiler(load_template(args.template) if args.template else None)
            output = compiler.build(source_text, mem=args.mem)
    except CompileError as exc:
        logger.debug("Compilation of %s failed: %s", args.source, exc)
        print(f"Compilation error: {exc}", file=sys.stderr)
        return 1
    except TemplateError as exc:
        logger.debug("%s", exc)
        print(str(exc), file=sys.stderr)
        return 1

    if args.out == "-":
        sys.stdout.write(output)
        return 0

    try:
        _write_output(args.out, output)
    except OSError as exc:
        logger.debug("Cannot write %s: %s", args.out, exc)
        print(f"Cannot write output: {exc}", file=sys.stderr)
        return 1
    logger.info("Wrote %s", args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
