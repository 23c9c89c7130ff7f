from .app import CompileRequest, CompileResponse, create_app

__all__ = [
    "create_app",
    "CompileRequest",
    "CompileResponse",
]
