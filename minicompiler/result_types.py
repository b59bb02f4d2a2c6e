"""Request / result data types for one analysis request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .ast_types import Node, SyntaxNode
from .symbol_types import SymbolEntry
from . import constants

Tree = Union[Node, SyntaxNode]


class Diagnostic(BaseModel):
    """A compiler / runtime / parse message; ``line`` is 0 when unknown."""

    model_config = ConfigDict(frozen=True)

    line: int = 0
    message: str

    def to_dict(self) -> dict:
        return {"line": self.line, "message": self.message}


class CompileRequest(BaseModel):
    """A submitted program.  Empty code is rejected before any analysis."""

    code: str
    language: Literal["c", "javascript"] = constants.LANGUAGE_C

    @field_validator("code")
    @classmethod
    def _code_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("No code provided")
        return value


@dataclass(frozen=True)
class AnalysisResult:
    """Everything recovered for one submitted source text."""

    tree: Tree | None = None
    symbols: dict[str, SymbolEntry] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    execution_output: str | None = None


@dataclass(frozen=True)
class CompileResponse:
    """Wire-level response: ``{output, errors, ast, symbolTable}``."""

    output: str = ""
    errors: list[Diagnostic] = field(default_factory=list)
    ast: Tree | None = None
    symbol_table: dict[str, SymbolEntry] = field(default_factory=dict)

    @classmethod
    def from_result(cls, result: AnalysisResult) -> CompileResponse:
        return cls(
            output=result.execution_output or "",
            errors=list(result.diagnostics),
            ast=result.tree,
            symbol_table=dict(result.symbols),
        )

    def to_dict(self) -> dict:
        return {
            "output": self.output,
            "errors": [d.to_dict() for d in self.errors],
            "ast": self.ast.to_dict() if self.ast is not None else None,
            "symbolTable": {
                name: entry.to_dict() for name, entry in self.symbol_table.items()
            },
        }
