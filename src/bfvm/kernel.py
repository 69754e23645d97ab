"""
Compiled inner loop of the interpreter.

``run_until_io`` executes bytecode until something the Python side has to
handle: an I/O instruction, the terminator, a tape bound or the step
budget. The caller performs the I/O, moves ``pc`` past the I/O
instruction and calls back in.
"""
import numpy as np
from numba import njit

from bfvm.ops import Op

# Stop reasons
TERMINATED = 0
OUTPUT = 1
INPUT = 2
UPPER_BOUND = 3
LOWER_BOUND = 4
STEP_LIMIT = 5

STOP_NAMES = ('TERMINATED', 'OUTPUT', 'INPUT', 'UPPER_BOUND', 'LOWER_BOUND', 'STEP_LIMIT')

# Plain ints so numba folds them as constants.
_END = int(Op.END)
_INC_DP = int(Op.INC_DP)
_DEC_DP = int(Op.DEC_DP)
_INC_VAL = int(Op.INC_VAL)
_DEC_VAL = int(Op.DEC_VAL)
_OUT = int(Op.OUT)
_IN = int(Op.IN)
_JMP_FWD = int(Op.JMP_FWD)
_JMP_BCK = int(Op.JMP_BCK)


@njit(cache=True)
def run_until_io(ops, operands, tape, pc, ptr, max_steps):
    """
    Returns ``(stop_reason, pc, ptr, steps)``.

    On OUTPUT/INPUT the returned ``pc`` is the I/O instruction itself and
    ``ptr`` is the cell it addresses. ``max_steps < 0`` means no budget.
    Cell arithmetic wraps in the tape's int32 dtype.
    """
    prog_len = ops.shape[0]
    tape_len = tape.shape[0]
    steps = 0

    while True:
        # Bounds before the terminator: a pointer that left the tape
        # decides the stop reason even on the last instruction.
        if ptr < 0:
            return LOWER_BOUND, pc, ptr, steps
        if ptr >= tape_len:
            return UPPER_BOUND, pc, ptr, steps
        if pc >= prog_len:
            return TERMINATED, pc, ptr, steps
        command = ops[pc]
        if command == _END:
            return TERMINATED, pc, ptr, steps
        if max_steps >= 0 and steps >= max_steps:
            return STEP_LIMIT, pc, ptr, steps

        if command == _INC_DP:
            ptr += 1
        elif command == _DEC_DP:
            ptr -= 1
        elif command == _INC_VAL:
            tape[ptr] += np.int32(1)
        elif command == _DEC_VAL:
            tape[ptr] -= np.int32(1)
        elif command == _OUT:
            return OUTPUT, pc, ptr, steps
        elif command == _IN:
            return INPUT, pc, ptr, steps
        elif command == _JMP_FWD:
            if tape[ptr] == 0:
                pc = operands[pc]
        elif command == _JMP_BCK:
            if tape[ptr] != 0:
                pc = operands[pc]

        pc += 1
        steps += 1
