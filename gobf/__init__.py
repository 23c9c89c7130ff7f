from .compiler import (
    CompileError,
    CompilerState,
    GoCompiler,
    Operator,
    UnclosedLoop,
    UnmatchedLoopClose,
    compile_body,
    step,
)
from .template import ProgramTemplate, TemplateError, load_template

__all__ = [
    "CompileError",
    "CompilerState",
    "GoCompiler",
    "Operator",
    "ProgramTemplate",
    "TemplateError",
    "UnclosedLoop",
    "UnmatchedLoopClose",
    "compile_body",
    "load_template",
    "step",
]
