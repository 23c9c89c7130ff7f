from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from gobf.compiler import CompileError, GoCompiler, Operator, UnclosedLoop, depth_profile
from gobf.template import DEFAULT_MEMORY_SIZE, ProgramTemplate, TemplateError

logger = logging.getLogger(__name__)


def _error_detail(exc: CompileError) -> dict:
    detail = {
        "kind": exc.kind,
        "message": str(exc),
        "line": exc.position.line if exc.position else None,
        "column": exc.position.column if exc.position else None,
    }
    if isinstance(exc, UnclosedLoop):
        detail["depth"] = exc.depth
    return detail


class CompileRequest(BaseModel):
    source: str
    mem: int = Field(default=DEFAULT_MEMORY_SIZE, ge=1)
    body_only: bool = False


class CompileResponse(BaseModel):
    body: str
    program: Optional[str]
    mem: int
    max_depth: int


class OperatorInfo(BaseModel):
    char: str
    name: str
    statement: str


def create_app(template: Optional[ProgramTemplate] = None) -> FastAPI:
    compiler = GoCompiler(template)
    app = FastAPI(title="gobf compile API", version="0.1.0")

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/operators", response_model=List[OperatorInfo])
    def list_operators() -> List[OperatorInfo]:
        return [OperatorInfo(char=op.value, name=op.name, statement=op.statement) for op in Operator]

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_source(payload: CompileRequest) -> CompileResponse:
        try:
            body = compiler.compile(payload.source)
        except CompileError as exc:
            logger.info("Rejected program: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_error_detail(exc),
            ) from exc

        program: Optional[str] = None
        if not payload.body_only:
            try:
                program = compiler.template.render(body, payload.mem)
            except TemplateError as exc:
                logger.error("Cannot assemble program: %s", exc)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail={"kind": "template_error", "message": str(exc)},
                ) from exc
        return CompileResponse(
            body=body,
            program=program,
            mem=payload.mem,
            max_depth=max(depth_profile(body), default=0),
        )

    return app


__all__ = ["CompileRequest", "CompileResponse", "create_app"]
