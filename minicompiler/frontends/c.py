"""CFrontend: pattern-driven structural scanner for C source text."""

from __future__ import annotations

import logging

from ..ast_types import Node, NodeKind
from ..blocks import contains, mask_source, top_level_blocks
from ..frontend import Frontend
from ..locator import locate
from ..symbol_types import SymbolEntry
from .c_shapes import FunctionShape, find_declarations, find_function_shapes
from .c_statements import StatementRecognizer, declaration_nodes
from .c_symbols import CSymbolTableBuilder
from .. import constants

logger = logging.getLogger(__name__)


class CFrontend(Frontend):
    """Recovers a Program tree from raw C text without a grammar.

    Functions are found by their definition shape and their bodies carved out
    by brace matching; global declarations are those lying outside every
    function range and every other top-level brace block.
    """

    def build_tree(self, source: str) -> Node:
        masked = mask_source(source)
        recognizer = StatementRecognizer(source, masked)
        functions = find_function_shapes(source, masked)
        logger.debug("Found %d function definitions", len(functions))

        items: list[Node] = [
            self._function_node(source, recognizer, fn) for fn in functions
        ]

        excluded = [(fn.open_brace, fn.end) for fn in functions]
        excluded += top_level_blocks(masked)
        for decl in find_declarations(source, masked):
            if contains(excluded, decl.offset):
                continue
            items.extend(
                declaration_nodes(source, decl, constants.REL_DECLARATION)
            )

        items.sort(key=lambda node: node.offset)
        return Node(
            kind=NodeKind.PROGRAM,
            location=locate(source, 0),
            offset=0,
            children=items,
        )

    def build_symbol_table(self, source: str) -> dict[str, SymbolEntry]:
        return CSymbolTableBuilder().build(source)

    def _function_node(
        self, source: str, recognizer: StatementRecognizer, fn: FunctionShape
    ) -> Node:
        params = [
            Node(
                kind=NodeKind.PARAMETER,
                name=param.name,
                raw_text=param.declared_type,
                location=locate(source, param.offset),
                offset=param.offset,
                relationship=constants.REL_PARAMETER,
            )
            for param in fn.params
        ]
        # An unterminated body runs to EOF (fn.end); whatever is there is kept
        body = Node(
            kind=NodeKind.BLOCK_STATEMENT,
            location=locate(source, fn.open_brace),
            offset=fn.open_brace,
            relationship=constants.REL_BODY,
            children=recognizer.parse_statements(fn.open_brace + 1, fn.end),
        )
        return Node(
            kind=NodeKind.FUNCTION_DECLARATION,
            name=fn.name,
            raw_text=fn.return_type,
            location=locate(source, fn.start),
            offset=fn.start,
            relationship=constants.REL_DECLARATION,
            children=params + [body],
        )
