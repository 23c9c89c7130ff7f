from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

from .template import DEFAULT_MEMORY_SIZE, ProgramTemplate, load_template

logger = logging.getLogger(__name__)

INDENT_UNIT = "\t"
COMMENT_MARKER = "// "

# Go's unicode.IsSpace: Latin-1 spaces plus the White_Space property.
_LATIN1_SPACES = frozenset("\t\n\v\f\r \x85\xa0")
_LINE_SEPARATORS = frozenset("\u2028\u2029")


class Position(NamedTuple):
    line: int
    column: int


class CompileError(Exception):
    """Structural error that aborts a compilation."""

    kind = "compile_error"

    def __init__(self, message: str, position: Optional[Position] = None) -> None:
        if position is not None:
            message = f"{message} (line {position.line}, column {position.column})"
        super().__init__(message)
        self.position = position


class UnmatchedLoopClose(CompileError):
    kind = "unmatched_loop_close"

    def __init__(self, position: Optional[Position] = None) -> None:
        super().__init__("invalid syntax, loop close detected with no associated open loop", position)


class UnclosedLoop(CompileError):
    kind = "unclosed_loop"

    def __init__(self, depth: int) -> None:
        super().__init__("invalid syntax, open loop detected at end of program parsing")
        self.depth = depth


# === Classification ===


class Operator(str, Enum):
    RIGHT = ">"
    LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"
    INPUT = ","
    OUTPUT = "."

    @property
    def statement(self) -> str:
        return GO_STATEMENTS[self]


GO_STATEMENTS: Dict[Operator, str] = {
    Operator.RIGHT: "index++",
    Operator.LEFT: "index--",
    Operator.INCREMENT: "mem[index]++",
    Operator.DECREMENT: "mem[index]--",
    Operator.LOOP_OPEN: "for mem[index] != 0 {",
    Operator.LOOP_CLOSE: "}",
    Operator.INPUT: "mem[index] = readChar(reader)",
    Operator.OUTPUT: 'fmt.Printf("%c", mem[index])',
}

_OPERATORS: Dict[str, Operator] = {op.value: op for op in Operator}


@dataclass(frozen=True)
class Commentary:
    char: str


Symbol = Union[Operator, Commentary]


def is_space(char: str) -> bool:
    if char in _LATIN1_SPACES or char in _LINE_SEPARATORS:
        return True
    return unicodedata.category(char) == "Zs"


def is_ignored(char: str, in_comment: bool) -> bool:
    """Whitespace is skipped, except plain spaces inside a comment."""
    if not in_comment:
        return is_space(char)
    return is_space(char) and char != " "


def classify(char: str) -> Symbol:
    operator = _OPERATORS.get(char)
    if operator is None:
        return Commentary(char)
    return operator


# === State machine ===


@dataclass(frozen=True)
class CompilerState:
    open_loop_depth: int = 0
    in_comment: bool = False


@dataclass
class GeneratedBody:
    fragments: List[str] = field(default_factory=list)

    def extend(self, fragments: List[str]) -> None:
        self.fragments.extend(fragments)

    def text(self) -> str:
        return "".join(self.fragments)

    def lines(self) -> List[str]:
        return split_lines(self.text())


def split_lines(text: str) -> List[str]:
    # Only "\n" ends a line; str.splitlines() would also break on commentary
    # characters such as "\x1c".
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def indent(depth: int) -> str:
    return INDENT_UNIT * (depth + 1)


def _emit_command(
    operator: Operator,
    state: CompilerState,
    position: Optional[Position],
) -> Tuple[CompilerState, List[str]]:
    emitted: List[str] = []
    # An operator never lands on an open comment line.
    if state.in_comment:
        emitted.append("\n")

    depth = state.open_loop_depth
    if operator is Operator.LOOP_CLOSE:
        depth -= 1
        if depth < 0:
            raise UnmatchedLoopClose(position)

    emitted.append(indent(depth) + operator.statement + "\n")

    if operator is Operator.LOOP_OPEN:
        depth += 1
    return CompilerState(open_loop_depth=depth, in_comment=False), emitted


def _emit_comment(commentary: Commentary, state: CompilerState) -> Tuple[CompilerState, List[str]]:
    emitted: List[str] = []
    if not state.in_comment:
        emitted.append(indent(state.open_loop_depth) + COMMENT_MARKER)
    emitted.append(commentary.char)
    return replace(state, in_comment=True), emitted


def step(
    state: CompilerState,
    char: str,
    position: Optional[Position] = None,
) -> Tuple[CompilerState, List[str]]:
    """Advance the scanner by one character.

    Returns the next state and the text fragments emitted for ``char``.
    Raises :class:`UnmatchedLoopClose` when ``char`` closes a loop that was
    never opened.
    """
    if is_ignored(char, state.in_comment):
        return state, []

    symbol = classify(char)
    if isinstance(symbol, Operator):
        return _emit_command(symbol, state, position)
    return _emit_comment(symbol, state)


def finish(state: CompilerState) -> List[str]:
    """Close a trailing comment line and check that every loop was closed."""
    emitted: List[str] = []
    # Keep a trailing comment from swallowing whatever the template puts next.
    if state.in_comment:
        emitted.append("\n")
    if state.open_loop_depth != 0:
        raise UnclosedLoop(state.open_loop_depth)
    return emitted


def compile_body(source: str) -> str:
    """Translate Brainfuck ``source`` into the body of a Go ``main`` function."""
    logger.debug("Compiling %d characters", len(source))
    state = CompilerState()
    body = GeneratedBody()
    line, column = 1, 0
    for char in source:
        column += 1
        state, emitted = step(state, char, Position(line, column))
        body.extend(emitted)
        if char == "\n":
            line, column = line + 1, 0
    body.extend(finish(state))
    text = body.text()
    logger.debug("Compiled body with %d lines", text.count("\n"))
    return text


def depth_profile(body: str) -> List[int]:
    """Nesting depth of every statement line in a generated body."""
    profile: List[int] = []
    for line in split_lines(body):
        stripped = line.lstrip(INDENT_UNIT)
        if not stripped or stripped.startswith(COMMENT_MARKER.rstrip()):
            continue
        profile.append(len(line) - len(stripped) - 1)
    return profile


# === Compiler facade ===


class GoCompiler:
    def __init__(self, template: Optional[ProgramTemplate] = None) -> None:
        self._template = template

    @property
    def template(self) -> ProgramTemplate:
        if self._template is None:
            self._template = load_template()
        return self._template

    def compile(self, source: str) -> str:
        return compile_body(source)

    def build(self, source: str, mem: int = DEFAULT_MEMORY_SIZE) -> str:
        body = self.compile(source)
        return self.template.render(body, mem)


__all__ = [
    "COMMENT_MARKER",
    "CompileError",
    "Commentary",
    "CompilerState",
    "DEFAULT_MEMORY_SIZE",
    "GO_STATEMENTS",
    "GeneratedBody",
    "GoCompiler",
    "INDENT_UNIT",
    "Operator",
    "Position",
    "UnclosedLoop",
    "UnmatchedLoopClose",
    "classify",
    "compile_body",
    "depth_profile",
    "finish",
    "indent",
    "is_ignored",
    "is_space",
    "split_lines",
    "step",
]
