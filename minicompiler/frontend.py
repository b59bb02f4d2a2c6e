"""Frontend: the per-language structural analysis contract."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .result_types import Diagnostic, Tree
from .symbol_types import SymbolEntry


class Frontend(ABC):
    """Recovers a node tree and a symbol table from one source text.

    The two passes are independent of each other; neither may keep state
    between calls.
    """

    @abstractmethod
    def build_tree(self, source: str) -> Tree: ...

    @abstractmethod
    def build_symbol_table(self, source: str) -> dict[str, SymbolEntry]: ...

    def syntax_errors(self, source: str) -> list[Diagnostic]:
        """Parse errors detected without running the toolchain (default: none)."""
        return []
