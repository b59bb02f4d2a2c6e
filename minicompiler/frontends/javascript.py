"""JavaScriptFrontend: native tree-sitter JavaScript tree and top-level symbols."""

from __future__ import annotations

import logging

from ..ast_types import SourcePoint, SyntaxNode
from ..frontend import Frontend
from ..parser import Parser, ParserFactory, TreeSitterParserFactory, syntax_errors
from ..result_types import Diagnostic
from ..symbol_types import SymbolEntry, SymbolKind, pseudo_address
from .. import constants

logger = logging.getLogger(__name__)

_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
_FUNCTION_TYPES = frozenset(
    {"function_declaration", "generator_function_declaration"}
)


class JavaScriptFrontend(Frontend):
    """Delegates JavaScript structure entirely to the tree-sitter grammar.

    The symbol table is restricted to top-level variable and function
    declarations, all scoped ``"global"``.
    """

    LANGUAGE = constants.LANGUAGE_JAVASCRIPT

    def __init__(self, parser_factory: ParserFactory | None = None):
        self._parser = Parser(parser_factory or TreeSitterParserFactory())

    def _parse(self, source: str):
        return self._parser.parse(source, self.LANGUAGE)

    # ── tree ─────────────────────────────────────────────────────

    def build_tree(self, source: str) -> SyntaxNode:
        tree = self._parse(source)
        return self._convert(tree.root_node, source.encode("utf-8"), "")

    def _convert(self, node, source: bytes, relationship: str) -> SyntaxNode:
        children = [
            self._convert(
                child,
                source,
                node.field_name_for_child(index) or constants.REL_CHILD,
            )
            for index, child in enumerate(node.children)
            if child.is_named
        ]
        text = None
        if not children:
            text = source[node.start_byte : node.end_byte].decode("utf-8")
        return SyntaxNode(
            type=node.type,
            location=SourcePoint(
                line=node.start_point[0] + 1, column=node.start_point[1]
            ),
            text=text,
            relationship=relationship,
            children=children,
        )

    # ── symbols ──────────────────────────────────────────────────

    def build_symbol_table(self, source: str) -> dict[str, SymbolEntry]:
        tree = self._parse(source)
        source_bytes = source.encode("utf-8")
        table: dict[str, SymbolEntry] = {}
        for node in tree.root_node.named_children:
            if node.type in _FUNCTION_TYPES:
                entry = self._function_entry(node, source_bytes)
                if entry is not None:
                    table[entry.name] = entry
            elif node.type in _DECLARATION_TYPES:
                for entry in self._declarator_entries(node, source_bytes):
                    table[entry.name] = entry
        logger.debug("JavaScript symbol table has %d entries", len(table))
        return table

    def _entry(
        self,
        node,
        name: str,
        kind: SymbolKind,
        declared_type: str,
        params: list[str] | None = None,
    ) -> SymbolEntry:
        return SymbolEntry(
            name=name,
            kind=kind,
            declared_type=declared_type,
            scope=constants.GLOBAL_SCOPE,
            line=node.start_point[0] + 1,
            column=node.start_point[1],
            params=params,
            pseudo_address=pseudo_address(name, constants.GLOBAL_SCOPE),
            offset=node.start_byte,
        )

    def _function_entry(self, node, source: bytes) -> SymbolEntry | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        params_node = node.child_by_field_name("parameters")
        params = (
            [
                self._param_name(child, source)
                for child in params_node.named_children
                if child.type != "comment"
            ]
            if params_node is not None
            else []
        )
        return self._entry(
            node,
            _text(name_node, source),
            SymbolKind.FUNCTION,
            "function",
            params=params,
        )

    def _param_name(self, node, source: bytes) -> str:
        if node.type == "assignment_pattern":
            left = node.child_by_field_name("left")
            return _text(left, source) if left is not None else _text(node, source)
        if node.type == "rest_pattern":
            inner = node.named_children[0] if node.named_children else node
            return _text(inner, source)
        return _text(node, source)

    def _declarator_entries(self, node, source: bytes) -> list[SymbolEntry]:
        keyword = _text(node.children[0], source) if node.children else "var"
        entries: list[SymbolEntry] = []
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            entries.append(
                self._entry(
                    name_node, _text(name_node, source), SymbolKind.VARIABLE, keyword
                )
            )
        return entries

    # ── diagnostics ──────────────────────────────────────────────

    def syntax_errors(self, source: str) -> list[Diagnostic]:
        return syntax_errors(self._parse(source), source)


def _text(node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")
