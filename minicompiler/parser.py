"""Tree-Sitter Parsing Layer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .result_types import Diagnostic


class ParserFactory(ABC):
    """Abstract factory for obtaining a language parser."""

    @abstractmethod
    def get_parser(self, language: str): ...


class TreeSitterParserFactory(ParserFactory):
    """Concrete factory that delegates to tree-sitter-language-pack.

    A new parser is returned on every call; parsers are not shared between
    requests.
    """

    def get_parser(self, language: str):
        import tree_sitter_language_pack as tslp

        return tslp.get_parser(language)


class Parser:
    """Thin wrapper around a parser factory."""

    def __init__(self, parser_factory: ParserFactory):
        self._factory = parser_factory

    def parse(self, source: str, language: str):
        parser = self._factory.get_parser(language)
        return parser.parse(source.encode("utf-8"))


def syntax_errors(tree, source: str) -> list[Diagnostic]:
    """Collect ``ERROR`` and missing nodes of a tree-sitter tree as diagnostics.

    Nested error nodes inside a reported ``ERROR`` node are not reported
    again.
    """
    source_bytes = source.encode("utf-8")
    errors: list[Diagnostic] = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.is_missing:
            errors.append(
                Diagnostic(
                    line=node.start_point[0] + 1,
                    message=f"SyntaxError: missing '{node.type}'",
                )
            )
            continue
        if node.type == "ERROR":
            snippet = source_bytes[node.start_byte : node.end_byte].decode(
                "utf-8", errors="replace"
            )
            snippet = snippet.strip().splitlines()[0] if snippet.strip() else ""
            errors.append(
                Diagnostic(
                    line=node.start_point[0] + 1,
                    message=f"SyntaxError: unexpected '{snippet}'",
                )
            )
            continue
        if node.has_error:
            stack.extend(reversed(node.children))
    errors.sort(key=lambda d: d.line)
    return errors
