from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_SIZE = 30000
DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent / "templates" / "program.go.tmpl"
PLACEHOLDERS = frozenset({"mem", "body"})


class TemplateError(Exception):
    pass


@dataclass(frozen=True)
class ProgramTemplate:
    """Go program skeleton with ``${mem}`` and ``${body}`` placeholders.

    A literal ``$`` in the template must be written as ``$$``.
    """

    text: str
    origin: Optional[str] = None

    def __post_init__(self) -> None:
        where = f" in {self.origin}" if self.origin else ""
        placeholders = set()
        for match in Template.pattern.finditer(self.text):
            if match.group("invalid") is not None:
                line = self.text.count("\n", 0, match.start("invalid")) + 1
                raise TemplateError(f"Stray '$' on line {line}{where}, write '$$' for a literal dollar")
            name = match.group("named") or match.group("braced")
            if name is not None:
                placeholders.add(name)
        unknown = placeholders - PLACEHOLDERS
        if unknown:
            names = ", ".join(sorted(unknown))
            raise TemplateError(f"Unknown template placeholder(s) {names}{where}")
        if "body" not in placeholders:
            raise TemplateError(f"Template is missing the ${{body}} placeholder{where}")

    def render(self, body: str, mem: int = DEFAULT_MEMORY_SIZE) -> str:
        if isinstance(mem, bool) or not isinstance(mem, int) or mem < 1:
            raise ValueError(f"Memory size must be a positive integer, got {mem!r}")
        try:
            return Template(self.text).substitute(mem=mem, body=body)
        except (KeyError, ValueError) as exc:
            raise TemplateError(f"Cannot fill template: {exc}") from exc


def load_template(path: Optional[Union[str, Path]] = None) -> ProgramTemplate:
    template_path = Path(path) if path is not None else DEFAULT_TEMPLATE_PATH
    if not template_path.exists():
        raise TemplateError(f"Template file not found: {template_path}")
    logger.info("Loading template %s", template_path)
    return ProgramTemplate(template_path.read_text(encoding="utf-8"), origin=str(template_path))


__all__ = [
    "DEFAULT_MEMORY_SIZE",
    "DEFAULT_TEMPLATE_PATH",
    "ProgramTemplate",
    "TemplateError",
    "load_template",
]
