from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List

import numpy as np


PROGRAM_CAPACITY = 4096
TAPE_CAPACITY = 65535

CELL_DTYPE = np.int32
CELL_MIN = int(np.iinfo(CELL_DTYPE).min)
CELL_MAX = int(np.iinfo(CELL_DTYPE).max)


class Op(IntEnum):
    END = 0
    INC_DP = 1
    DEC_DP = 2
    INC_VAL = 3
    DEC_VAL = 4
    OUT = 5
    IN = 6
    JMP_FWD = 7
    JMP_BCK = 8


# Source character -> operator for everything except the brackets,
# which need the matching stack.
SIMPLE_OPS = {
    '>': Op.INC_DP,
    '<': Op.DEC_DP,
    '+': Op.INC_VAL,
    '-': Op.DEC_VAL,
    '.': Op.OUT,
    ',': Op.IN,
}


@dataclass(frozen=True)
class Instruction:
    operator: Op = Op.END
    operand: int = 0

    def __str__(self) -> str:
        return f"{self.operator.name}, {self.operand}"


class Program:
    """
    Fixed-capacity bytecode program.

    Storage is two parallel numpy arrays so the execution kernel can read
    them directly:
    - ops: uint8 operator codes, END everywhere nothing was compiled
    - operands: uint32 jump targets, 0 for non-jump slots

    The compiled instructions always form a contiguous prefix of length
    ``len(program)``; the END that follows it is the execution sentinel.
    """

    def __init__(self, capacity: int = PROGRAM_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Program capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.ops = np.full(capacity, int(Op.END), dtype=np.uint8)
        self.operands = np.zeros(capacity, dtype=np.uint32)
        self.length = 0
        self.frozen = False

    # ===== Building (compiler side) =====

    def set(self, index: int, operator: Op, operand: int = 0) -> None:
        self._check_writable(index)
        self.ops[index] = int(operator)
        self.operands[index] = operand
        if index >= self.length:
            self.length = index + 1

    def patch_operand(self, index: int, operand: int) -> None:
        self._check_writable(index)
        self.operands[index] = operand

    def freeze(self) -> 'Program':
        self.ops.flags.writeable = False
        self.operands.flags.writeable = False
        self.frozen = True
        return self

    def _check_writable(self, index: int) -> None:
        if self.frozen:
            raise RuntimeError("Program is frozen after compilation")
        if not 0 <= index < self.capacity:
            raise IndexError(f"Program slot {index} outside [0, {self.capacity})")

    # ===== Reading =====

    def __len__(self) -> int:
        return self.length

    def __getitem__(self, index: int) -> Instruction:
        if not 0 <= index < self.capacity:
            raise IndexError(f"Program slot {index} outside [0, {self.capacity})")
        return Instruction(Op(int(self.ops[index])), int(self.operands[index]))

    def __iter__(self) -> Iterator[Instruction]:
        for idx in range(self.length):
            yield self[idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        n = self.length
        return (
            n == other.length
            and np.array_equal(self.ops[:n], other.ops[:n])
            and np.array_equal(self.operands[:n], other.operands[:n])
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Program(length={self.length}, capacity={self.capacity})"

    def dump(self) -> str:
        """One ``index: OPNAME, operand`` line per instruction, ending with the terminator."""
        lines: List[str] = [f"{idx}: {ins}" for idx, ins in enumerate(self)]
        lines.append(f"{self.length}: {Op.END.name}, 0")
        return "\n".join(lines)
