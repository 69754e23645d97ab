from .compiler import Compiler
from .interpreter import Interpreter, RunStatus, execute
from .ops import Instruction, Op, Program
from .api import CompileOptions, RunOptions, RunResult, compile_file, compile_string, run_program, run_string

__all__ = [
    'Compiler',
    'Interpreter',
    'RunStatus',
    'execute',
    'Instruction',
    'Op',
    'Program',
    'CompileOptions',
    'RunOptions',
    'RunResult',
    'compile_string',
    'compile_file',
    'run_program',
    'run_string',
]
