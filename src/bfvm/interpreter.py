from __future__ import annotations

import logging
import re
import sys
from enum import Enum
from typing import Optional, TextIO

import numpy as np

from bfvm import kernel
from bfvm.errors import make_bounds_error, make_input_error
from bfvm.ops import CELL_DTYPE, CELL_MAX, CELL_MIN, TAPE_CAPACITY, Program

logger = logging.getLogger(__name__)

_INT_LINE = re.compile(r'[+-]?[0-9]+', re.ASCII)


class RunStatus(Enum):
    RUNNING = 'running'
    HALTED = 'halted'
    FAULTED = 'faulted'


class Interpreter:
    """
    Executes one compiled Program against its own tape.

    The tape is a numpy int32 array, so cell arithmetic wraps at the 32-bit
    signed boundary. Moving the pointer to ``tape_capacity`` halts the run
    quietly; moving it below cell 0 faults it.

    ``run`` may be called repeatedly with a step budget; each call resumes
    where the previous one stopped.
    """

    def __init__(
        self,
        program: Program,
        *,
        tape_capacity: int = TAPE_CAPACITY,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        if tape_capacity < 1:
            raise ValueError(f"Tape capacity must be >= 1, got {tape_capacity}")
        self.program = program
        self.tape = np.zeros(tape_capacity, dtype=CELL_DTYPE)
        self.pc = 0
        self.ptr = 0
        self.steps = 0
        self.status = RunStatus.RUNNING
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout

    @property
    def cell(self) -> int:
        return int(self.tape[self.ptr])

    def run(self, max_steps: Optional[int] = None) -> RunStatus:
        """
        Execute until the program halts, faults, or ``max_steps`` instructions
        have run in this call.

        Raises:
            InputParseFailure: ',' hit end of input or a non-integer line
            ValueError: negative ``max_steps``
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {max_steps}")
        if self.status is not RunStatus.RUNNING:
            return self.status

        logger.debug("Run from pc=%d ptr=%d (budget %s)", self.pc, self.ptr, max_steps)
        budget = -1 if max_steps is None else max_steps
        while True:
            reason, pc, ptr, steps = kernel.run_until_io(
                self.program.ops, self.program.operands, self.tape,
                self.pc, self.ptr, budget,
            )
            self.pc, self.ptr = int(pc), int(ptr)
            self.steps += steps
            if budget >= 0:
                budget -= steps

            if reason == kernel.OUTPUT or reason == kernel.INPUT:
                # the kernel checks the budget first, so one step is always left here
                if reason == kernel.OUTPUT:
                    self.stdout.write(str(self.cell))
                else:
                    self.tape[self.ptr] = self._read_int()
                self.pc += 1
                self.steps += 1
                if budget > 0:
                    budget -= 1
                continue

            if reason == kernel.STEP_LIMIT:
                logger.debug("Step budget exhausted at pc=%d after %d steps", self.pc, self.steps)
                return self.status

            if reason == kernel.LOWER_BOUND:
                self.status = RunStatus.FAULTED
                logger.warning("Data pointer moved below cell 0 at pc=%d", self.pc)
            else:
                self.status = RunStatus.HALTED
            self.stdout.flush()
            logger.debug(
                "Stopped (%s) at pc=%d ptr=%d after %d steps",
                kernel.STOP_NAMES[reason], self.pc, self.ptr, self.steps,
            )
            return self.status

    def _read_int(self) -> int:
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise make_input_error(
                message="end of input while reading a line", pc=self.pc, ptr=self.ptr, line=None
            )
        text = line.strip()
        if not _INT_LINE.fullmatch(text):
            raise make_input_error(
                message=f"expected an integer, got {text!r}", pc=self.pc, ptr=self.ptr, line=line
            )
        value = int(text)
        if not CELL_MIN <= value <= CELL_MAX:
            raise make_input_error(
                message=f"expected an integer, {value} does not fit a 32-bit cell",
                pc=self.pc, ptr=self.ptr, line=line,
            )
        return value


def execute(
    program: Program,
    *,
    tape_capacity: int = TAPE_CAPACITY,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> RunStatus:
    """Run ``program`` to completion; a pointer below cell 0 raises TapeBoundsExceeded."""
    interp = Interpreter(program, tape_capacity=tape_capacity, stdin=stdin, stdout=stdout)
    status = interp.run()
    if status is RunStatus.FAULTED:
        raise make_bounds_error(
            message="data pointer moved below cell 0", pc=interp.pc, ptr=interp.ptr
        )
    return status
