import logging

from bfvm.errors import ProgramOverflow, UnmatchedCloseBracket, UnmatchedOpenBracket, make_compile_error
from bfvm.ops import PROGRAM_CAPACITY, SIMPLE_OPS, Op, Program

logger = logging.getLogger(__name__)


class Compiler:
    """
    Single-pass compiler from source text to a fixed-capacity Program.

    Translation:
    - '>' '<' '+' '-' '.' ',' map one-to-one onto operators
    - '[' emits JMP_FWD and remembers its slot on the bracket stack
    - ']' pops the matching slot, emits JMP_BCK pointing at it and patches
      the JMP_FWD to point back here
    - the first character outside those eight ends the whole pass

    The compiler holds no state between calls, so one instance can compile
    any number of sources.
    """

    def __init__(self, capacity=PROGRAM_CAPACITY):
        self.capacity = capacity

    def compile(self, source):
        """
        Compile ``source`` and return a frozen Program.

        Raises:
            UnmatchedCloseBracket: ']' with no open '['
            UnmatchedOpenBracket: '[' still open when the pass ends
            ProgramOverflow: more instructions than ``capacity``
        """
        program = Program(self.capacity)
        stack = []  # slots of open JMP_FWD instructions
        offsets = []  # source offset of each open '[' for error reporting
        pc = 0

        for offset, ch in enumerate(source):
            if ch in SIMPLE_OPS:
                op = SIMPLE_OPS[ch]
            elif ch == '[' or ch == ']':
                op = Op.JMP_FWD if ch == '[' else Op.JMP_BCK
            else:
                logger.debug("Compilation stopped at offset %d on %r", offset, ch)
                break

            if pc >= self.capacity:
                raise make_compile_error(
                    ProgramOverflow,
                    message=f"program capacity of {self.capacity} instructions exceeded",
                    source=source,
                    offset=offset,
                )

            if op is Op.JMP_FWD:
                program.set(pc, Op.JMP_FWD)
                stack.append(pc)
                offsets.append(offset)
            elif op is Op.JMP_BCK:
                if not stack:
                    raise make_compile_error(
                        UnmatchedCloseBracket,
                        message="unmatched ']'",
                        source=source,
                        offset=offset,
                    )
                jmp_pc = stack.pop()
                offsets.pop()
                program.set(pc, Op.JMP_BCK, jmp_pc)
                program.patch_operand(jmp_pc, pc)
            else:
                program.set(pc, op)
            pc += 1

        if stack:
            raise make_compile_error(
                UnmatchedOpenBracket,
                message="unmatched '['",
                source=source,
                offset=offsets[-1],
            )

        logger.debug("Compiled %d instructions (capacity %d)", pc, self.capacity)
        return program.freeze()
