"""Command-line entry point: run a script, dump its tokens or AST, or open a prompt."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from . import constants
from .api import dump_ast, dump_rpn, dump_tokens
from .errors import ParseError
from .run import Session, run
from .run_types import RunConfig

logger = logging.getLogger(__name__)


class _UsageArgumentParser(argparse.ArgumentParser):
    """argparse exits with status 2 on bad usage; scripts expect 64."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(constants.EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = _UsageArgumentParser(prog="fail", description="Fail interpreter")
    parser.add_argument("script", nargs="?", help="Script file to run")
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream and exit"
    )
    parser.add_argument(
        "--ast", action="store_true", help="Print the parsed AST and exit"
    )
    parser.add_argument(
        "--rpn",
        action="store_true",
        help="Print the script, parsed as one expression, in reverse Polish notation",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Debug logging and run statistics"
    )
    return parser


def _read_script(path: str) -> str | None:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as error:
        logger.debug("Cannot read %s: %s", path, error)
        print(f"Could not read file '{path}': {error.strerror}", file=sys.stderr)
        return None


def _dump(args: argparse.Namespace, source: str) -> int:
    try:
        if args.tokens:
            print(dump_tokens(source))
        elif args.ast:
            print(dump_ast(source))
        else:
            print(dump_rpn(source))
    except ParseError:
        return constants.EXIT_STATIC_ERROR
    return constants.EXIT_OK


def run_prompt(config: RunConfig, stdin: TextIO | None = None) -> int:
    """Read lines until end of input, running each in one Session."""
    stdin = stdin or sys.stdin
    session = Session(config=config)
    while True:
        print(constants.PROMPT, end="", flush=True)
        line = stdin.readline()
        if not line:
            print()
            return constants.EXIT_OK
        session.run_line(line)


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = RunConfig(verbose=args.verbose)

    if args.script is None:
        if args.tokens or args.ast or args.rpn:
            print("--tokens, --ast and --rpn need a script", file=sys.stderr)
            return constants.EXIT_USAGE
        return run_prompt(config)

    source = _read_script(args.script)
    if source is None:
        return constants.EXIT_NO_INPUT

    if args.tokens or args.ast or args.rpn:
        return _dump(args, source)

    return run(source, config=config).exit_code


if __name__ == "__main__":
    sys.exit(main())
