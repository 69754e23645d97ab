"""
Compilation: translation, bracket matching, truncation and compile errors.
"""

import random

import pytest

from bfvm import Compiler, Instruction, Op
from bfvm.errors import ProgramOverflow, UnmatchedCloseBracket, UnmatchedOpenBracket


def ops_of(program):
    return [ins.operator for ins in program]


def random_balanced(rng, length):
    """Random source of ``length`` characters with balanced brackets."""
    out = []
    depth = 0
    while len(out) < length:
        remaining = length - len(out)
        if depth and remaining <= depth:
            out.append(']')
            depth -= 1
            continue
        ch = rng.choice('><+-.,[]')
        if ch == ']' and depth == 0:
            continue
        if ch == '[' and remaining - 1 <= depth:
            continue
        depth += {'[': 1, ']': -1}.get(ch, 0)
        out.append(ch)
    return ''.join(out)


def test_simple_instructions():
    program = Compiler().compile("><+-.,")
    assert ops_of(program) == [Op.INC_DP, Op.DEC_DP, Op.INC_VAL, Op.DEC_VAL, Op.OUT, Op.IN]
    assert all(ins.operand == 0 for ins in program)
    assert len(program) == 6


def test_unwritten_slots_are_terminators():
    program = Compiler().compile("++.")
    assert len(program) == 3
    assert program[3] == Instruction(Op.END, 0)
    assert program[program.capacity - 1] == Instruction(Op.END, 0)


def test_loop_operands():
    program = Compiler().compile("+[-]")
    assert list(program) == [
        Instruction(Op.INC_VAL),
        Instruction(Op.JMP_FWD, 3),
        Instruction(Op.DEC_VAL),
        Instruction(Op.JMP_BCK, 1),
    ]


def test_nested_loops_match_innermost_first():
    program = Compiler().compile("[[]]")
    assert [(ins.operator, ins.operand) for ins in program] == [
        (Op.JMP_FWD, 3),
        (Op.JMP_FWD, 2),
        (Op.JMP_BCK, 1),
        (Op.JMP_BCK, 0),
    ]


@pytest.mark.parametrize("seed", range(20))
def test_jump_operands_point_at_each_other(seed):
    rng = random.Random(seed)
    source = random_balanced(rng, rng.randint(2, 200))
    program = Compiler().compile(source)

    stack = []
    for idx, ins in enumerate(program):
        if ins.operator is Op.JMP_FWD:
            stack.append(idx)
        elif ins.operator is Op.JMP_BCK:
            open_idx = stack.pop()
            assert ins.operand == open_idx
            assert program[open_idx].operand == idx
    assert not stack


def test_compilation_is_idempotent():
    source = ",>,<[->[->+>+<<]>>[-<<+>>]<<<]>>."
    compiler = Compiler()
    assert compiler.compile(source) == compiler.compile(source)
    assert Compiler().compile(source) == Compiler(capacity=64).compile(source)
    assert Compiler().compile("++") != Compiler().compile("+-")


def test_stray_character_stops_compilation():
    program = Compiler().compile("+x+.")
    assert ops_of(program) == [Op.INC_VAL]


def test_newline_stops_compilation():
    program = Compiler().compile("++\n+++")
    assert len(program) == 2


def test_empty_source():
    program = Compiler().compile("")
    assert len(program) == 0
    assert program[0].operator is Op.END


def test_unmatched_close_bracket():
    with pytest.raises(UnmatchedCloseBracket) as excinfo:
        Compiler().compile("]")
    err = excinfo.value
    assert (err.offset, err.line, err.column) == (0, 1, 1)
    assert "unmatched ']'" in str(err)


def test_unmatched_close_bracket_position():
    with pytest.raises(UnmatchedCloseBracket) as excinfo:
        Compiler().compile("+[-]]")
    assert excinfo.value.offset == 4
    assert excinfo.value.column == 5
    assert "Hint:" in str(excinfo.value)


def test_unmatched_open_bracket_reports_innermost():
    with pytest.raises(UnmatchedOpenBracket) as excinfo:
        Compiler().compile("[+[")
    assert excinfo.value.offset == 2


def test_truncation_can_leave_bracket_open():
    with pytest.raises(UnmatchedOpenBracket):
        Compiler().compile("+[- loop body ]")


def test_program_overflow():
    with pytest.raises(ProgramOverflow) as excinfo:
        Compiler(capacity=3).compile("++++")
    assert excinfo.value.offset == 3
    assert "capacity of 3" in str(excinfo.value)


def test_program_fills_capacity_exactly():
    program = Compiler(capacity=3).compile("+++")
    assert len(program) == 3
    assert ops_of(program) == [Op.INC_VAL] * 3


def test_program_is_frozen():
    program = Compiler().compile("+")
    assert not program.ops.flags.writeable
    with pytest.raises(RuntimeError):
        program.set(1, Op.OUT)


def test_index_outside_capacity():
    program = Compiler(capacity=8).compile("+")
    with pytest.raises(IndexError):
        program[8]
    with pytest.raises(IndexError):
        program[-1]


def test_dump():
    program = Compiler().compile("++.")
    assert program.dump() == "0: INC_VAL, 0\n1: INC_VAL, 0\n2: OUT, 0\n3: END, 0"


def test_dump_shows_jump_targets():
    lines = Compiler().compile("+[-]").dump().split("\n")
    assert lines[1] == "1: JMP_FWD, 3"
    assert lines[3] == "3: JMP_BCK, 1"
    assert lines[-1] == "4: END, 0"


def test_dump_empty_program():
    assert Compiler().compile("").dump() == "0: END, 0"
