from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .api import CompileOptions, RunOptions, compile_file, compile_string, run_program
from .errors import BFVMCompileError, BFVMRuntimeError, make_bounds_error
from .interpreter import RunStatus
from .ops import PROGRAM_CAPACITY, TAPE_CAPACITY

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_STEP_LIMIT = 3


def init_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose, WARNING otherwise."""
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    lvl = logging.DEBUG if verbose else logging.WARNING
    root.setLevel(lvl)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(lvl)
    if verbose:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s:%(lineno)d %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    root.addHandler(handler)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="Compile and run a tape program with numeric I/O ('.' prints integers, ',' reads a line).",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("file", nargs="?", help="Source file")
    source.add_argument("-e", "--eval", metavar="CODE", help="Inline source instead of a file")
    parser.add_argument("--capacity", type=_positive_int, default=PROGRAM_CAPACITY,
                        help=f"Program slots (default {PROGRAM_CAPACITY})")
    parser.add_argument("--tape-size", type=_positive_int, default=TAPE_CAPACITY,
                        help=f"Tape cells (default {TAPE_CAPACITY})")
    parser.add_argument("--max-steps", type=_positive_int, default=None,
                        help="Stop after this many instructions (default unlimited)")
    parser.add_argument("--dump-ir", action="store_true", help="Print the compiled program after running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(args.verbose)

    compile_options = CompileOptions(capacity=args.capacity)
    run_options = RunOptions(tape_capacity=args.tape_size, max_steps=args.max_steps)

    try:
        if args.eval is not None:
            program = compile_string(args.eval, options=compile_options)
        else:
            program = compile_file(args.file, options=compile_options)
    except OSError as e:
        print(f"Couldn't read {args.file}: {e.strerror}", file=sys.stderr)
        return EXIT_ERROR
    except UnicodeDecodeError as e:
        print(f"Couldn't read {args.file}: {e.reason}", file=sys.stderr)
        return EXIT_ERROR
    except BFVMCompileError as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR

    try:
        result = run_program(program, options=run_options)
    except BFVMRuntimeError as e:
        sys.stdout.flush()
        print(f"\n{e}", file=sys.stderr)
        return EXIT_ERROR

    if args.dump_ir:
        sys.stdout.write("\n" + program.dump() + "\n")
        sys.stdout.flush()

    if result.status is RunStatus.FAULTED:
        err = make_bounds_error(message="data pointer moved below cell 0", pc=result.pc, ptr=result.ptr)
        print(f"\n{err}", file=sys.stderr)
        return EXIT_ERROR
    if result.status is RunStatus.RUNNING:
        print(f"\nStopped after {result.steps} steps (--max-steps)", file=sys.stderr)
        return EXIT_STEP_LIMIT
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
