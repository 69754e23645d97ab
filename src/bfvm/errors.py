from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Type


def _build_context(lines: List[str], line_no_1: int, column_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"  {'':4s} | {' ' * (column_1 - 1)}^")
    return "\n".join(out)


def _hint_for(message: str, *, kind: str) -> Optional[str]:
    msg = message.lower()
    if kind == 'compile':
        if "unmatched ']'" in msg:
            return "Every ']' needs an earlier '[' that is still open."
        if "unmatched '['" in msg:
            return ("Close every '[' before the end of the code. Note that the first "
                    "character outside '><+-.,[]' ends compilation, including newlines.")
        if 'program capacity' in msg:
            return 'Shorten the program or compile with a larger capacity (--capacity).'
        return None
    if kind == 'runtime':
        if 'expected an integer' in msg:
            return 'Input is read one line at a time; each line must be a single base-10 integer.'
        if 'end of input' in msg:
            return 'The program asked for more input lines than were provided.'
        if 'below cell 0' in msg:
            return "Check for a '<' that runs before any '>' moved the pointer."
        return None
    return None


def locate(source: str, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of character ``offset`` in ``source``."""
    before = source[:offset]
    line = before.count('\n') + 1
    column = offset - (before.rfind('\n') + 1) + 1
    return line, column


@dataclass
class BFVMError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BFVMCompileError(BFVMError):
    offset: int
    line: int
    column: int
    context: str


class UnmatchedCloseBracket(BFVMCompileError):
    pass


class UnmatchedOpenBracket(BFVMCompileError):
    pass


class ProgramOverflow(BFVMCompileError):
    pass


@dataclass
class BFVMRuntimeError(BFVMError):
    pc: int
    ptr: int


@dataclass
class InputParseFailure(BFVMRuntimeError):
    # None when the input stream was exhausted
    line: Optional[str] = None


class TapeBoundsExceeded(BFVMRuntimeError):
    pass


def make_compile_error(
    cls: Type[BFVMCompileError], *, message: str, source: str, offset: int
) -> BFVMCompileError:
    line, column = locate(source, offset)
    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(message, kind='compile')
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"CompileError: {message} (line {line}, column {column})\n{ctx}{hint_block}",
        offset=offset,
        line=line,
        column=column,
        context=ctx,
    )


def make_input_error(*, message: str, pc: int, ptr: int, line: Optional[str]) -> InputParseFailure:
    hint = _hint_for(message, kind='runtime')
    hint_block = f"\nHint: {hint}" if hint else ""
    return InputParseFailure(
        message=f"RuntimeError: {message} (pc {pc}, cell {ptr}){hint_block}",
        pc=pc,
        ptr=ptr,
        line=line,
    )


def make_bounds_error(*, message: str, pc: int, ptr: int) -> TapeBoundsExceeded:
    hint = _hint_for(message, kind='runtime')
    hint_block = f"\nHint: {hint}" if hint else ""
    return TapeBoundsExceeded(
        message=f"RuntimeError: {message} (pc {pc}){hint_block}",
        pc=pc,
        ptr=ptr,
    )
