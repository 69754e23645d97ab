from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from .compiler import Compiler
from .interpreter import Interpreter, RunStatus
from .ops import PROGRAM_CAPACITY, TAPE_CAPACITY, Program


@dataclass(frozen=True)
class CompileOptions:
    capacity: int = PROGRAM_CAPACITY


@dataclass(frozen=True)
class RunOptions:
    tape_capacity: int = TAPE_CAPACITY
    max_steps: Optional[int] = None


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    steps: int
    pc: int
    ptr: int


def compile_string(source: str, *, options: Optional[CompileOptions] = None) -> Program:
    capacity = PROGRAM_CAPACITY if options is None else options.capacity
    return Compiler(capacity=capacity).compile(source)


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None, encoding: str = "utf-8") -> Program:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding), options=options)


def run_program(
    program: Program,
    *,
    options: Optional[RunOptions] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> RunResult:
    opts = RunOptions() if options is None else options
    interp = Interpreter(program, tape_capacity=opts.tape_capacity, stdin=stdin, stdout=stdout)
    status = interp.run(max_steps=opts.max_steps)
    return RunResult(status=status, steps=interp.steps, pc=interp.pc, ptr=interp.ptr)


def run_string(
    source: str,
    *,
    compile_options: Optional[CompileOptions] = None,
    run_options: Optional[RunOptions] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> RunResult:
    program = compile_string(source, options=compile_options)
    return run_program(program, options=run_options, stdin=stdin, stdout=stdout)
