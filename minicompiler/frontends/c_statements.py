"""Statement Recognizer: independent shape matchers over a C block.

Each matcher scans the whole block for all of its occurrences; there is no
tokenizer.  Control statements (``if``/``for``/``while``) are resolved first:
only the outermost ones are kept at a given level, and their extents shadow
the other matchers, which leaves nested statements to the recursive call for
the nested block.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from ..ast_types import Node, NodeKind
from ..blocks import contains, extract_block, fragment, mask_source, split_top_level
from ..locator import locate
from .c_shapes import (
    CShapes,
    DeclarationShape,
    find_declarations,
    header_semicolons,
    is_keyword,
)
from .. import constants

logger = logging.getLogger(__name__)


@dataclass
class _ControlShape:
    """Offsets of one recognised ``if``/``for``/``while`` statement."""

    kind: NodeKind
    start: int
    end: int
    header: tuple[int, int]
    body: tuple[int, int]
    else_body: tuple[int, int] | None = None
    else_if: _ControlShape | None = None


def declaration_nodes(
    source: str, decl: DeclarationShape, relationship: str
) -> list[Node]:
    """One VariableDeclaration per declarator, with an Initializer child."""
    nodes: list[Node] = []
    for index, declarator in enumerate(decl.declarators):
        offset = decl.offset if index == 0 else declarator.name_offset
        children: list[Node] = []
        if declarator.init_text is not None:
            children.append(
                Node(
                    kind=NodeKind.INITIALIZER,
                    raw_text=declarator.init_text,
                    location=locate(source, declarator.init_offset),
                    offset=declarator.init_offset,
                    relationship=constants.REL_INITIALIZER,
                )
            )
        nodes.append(
            Node(
                kind=NodeKind.VARIABLE_DECLARATION,
                name=declarator.name,
                raw_text=declarator.declared_type,
                location=locate(source, offset),
                offset=offset,
                relationship=relationship,
                children=children,
            )
        )
    return nodes


class StatementRecognizer:
    """Recovers statement nodes from ``source[start:end]`` blocks.

    *masked* must be ``mask_source(source)``; it is accepted as an argument so
    one masking pass serves every block of a scan.
    """

    def __init__(self, source: str, masked: str):
        self._source = source
        self._masked = masked
        self._control_matchers: list[tuple[re.Pattern, Callable]] = [
            (CShapes.IF_RE, self._if_at),
            (CShapes.FOR_RE, self._for_at),
            (CShapes.WHILE_RE, self._while_at),
        ]

    # ── entry point ──────────────────────────────────────────────

    def parse_statements(self, start: int, end: int) -> list[Node]:
        controls = self._outermost_controls(start, end)
        shadow = [(c.start, c.end) for c in controls]

        statements: list[Node] = [
            self._control_node(c, constants.REL_STATEMENT) for c in controls
        ]
        for decl in find_declarations(self._source, self._masked, start, end):
            if contains(shadow, decl.offset):
                continue
            statements.extend(
                declaration_nodes(self._source, decl, constants.REL_STATEMENT)
            )

        returns = self._returns(start, end, shadow)
        return_spans = [span for span, _ in returns]
        statements.extend(node for _, node in returns)
        statements.extend(self._call_statements(start, end, shadow + return_spans))

        statements.sort(key=lambda node: node.offset)
        logger.debug(
            "Recognized %d statements in block [%d, %d)", len(statements), start, end
        )
        return statements

    # ── control statements ───────────────────────────────────────

    def _outermost_controls(self, start: int, end: int) -> list[_ControlShape]:
        candidates: list[_ControlShape] = []
        for pattern, matcher in self._control_matchers:
            for m in pattern.finditer(self._masked, start, end):
                shape = matcher(m.start(), end)
                if shape is not None:
                    candidates.append(shape)
        candidates.sort(key=lambda c: c.start)

        kept: list[_ControlShape] = []
        for candidate in candidates:
            if kept and candidate.start <= kept[-1].end:
                continue
            kept.append(candidate)
        return kept

    def _parenthesized(self, open_offset: int, limit: int) -> tuple[int, int] | None:
        close = extract_block(self._masked, open_offset, "(", ")")
        if close is None or close >= limit:
            return None
        return open_offset, close

    def _braced(self, pos: int, limit: int) -> tuple[int, int] | None:
        m = CShapes.BODY_OPEN_RE.match(self._masked, pos, limit)
        if m is None:
            return None
        open_brace = m.end() - 1
        close = extract_block(self._masked, open_brace)
        if close is None or close >= limit:
            logger.debug("Unterminated nested block at offset %d", open_brace)
            return None
        return open_brace, close

    def _if_at(self, pos: int, limit: int) -> _ControlShape | None:
        m = CShapes.IF_RE.match(self._masked, pos, limit)
        if m is None:
            return None
        header = self._parenthesized(m.end() - 1, limit)
        if header is None:
            return None
        body = self._braced(header[1] + 1, limit)
        if body is None:
            return None
        shape = _ControlShape(
            kind=NodeKind.IF_STATEMENT,
            start=m.start(),
            end=body[1],
            header=header,
            body=body,
        )
        after = body[1] + 1
        else_if = CShapes.ELSE_IF_RE.match(self._masked, after, limit)
        if else_if is not None:
            inner = self._if_at(else_if.end(), limit)
            if inner is not None:
                shape.else_if = inner
                shape.end = inner.end
            return shape
        else_block = CShapes.ELSE_BLOCK_RE.match(self._masked, after, limit)
        if else_block is not None:
            else_body = self._braced(else_block.end() - 1, limit)
            if else_body is not None:
                shape.else_body = else_body
                shape.end = else_body[1]
        return shape

    def _for_at(self, pos: int, limit: int) -> _ControlShape | None:
        m = CShapes.FOR_RE.match(self._masked, pos, limit)
        if m is None:
            return None
        header = self._parenthesized(m.end() - 1, limit)
        if header is None:
            return None
        if len(header_semicolons(self._masked, header[0] + 1, header[1])) != 2:
            return None
        body = self._braced(header[1] + 1, limit)
        if body is None:
            return None
        return _ControlShape(
            kind=NodeKind.FOR_STATEMENT,
            start=m.start(),
            end=body[1],
            header=header,
            body=body,
        )

    def _while_at(self, pos: int, limit: int) -> _ControlShape | None:
        m = CShapes.WHILE_RE.match(self._masked, pos, limit)
        if m is None:
            return None
        header = self._parenthesized(m.end() - 1, limit)
        if header is None:
            return None
        # ``} while (x);`` closing a do-loop has no body and does not match
        body = self._braced(header[1] + 1, limit)
        if body is None:
            return None
        return _ControlShape(
            kind=NodeKind.WHILE_STATEMENT,
            start=m.start(),
            end=body[1],
            header=header,
            body=body,
        )

    def _block_node(self, braces: tuple[int, int], relationship: str) -> Node:
        open_brace, close_brace = braces
        return Node(
            kind=NodeKind.BLOCK_STATEMENT,
            location=locate(self._source, open_brace),
            offset=open_brace,
            relationship=relationship,
            children=self.parse_statements(open_brace + 1, close_brace),
        )

    def _fragment_node(
        self, kind: NodeKind, start: int, end: int, relationship: str
    ) -> Node | None:
        offset, text = fragment(self._source, start, end)
        if not text:
            return None
        return Node(
            kind=kind,
            raw_text=text,
            location=locate(self._source, offset),
            offset=offset,
            relationship=relationship,
        )

    def _control_node(self, shape: _ControlShape, relationship: str) -> Node:
        header_start, header_end = shape.header[0] + 1, shape.header[1]
        children: list[Node | None] = []
        if shape.kind == NodeKind.IF_STATEMENT:
            children.append(
                self._fragment_node(
                    NodeKind.BINARY_EXPRESSION,
                    header_start,
                    header_end,
                    constants.REL_CONDITION,
                )
            )
            children.append(self._block_node(shape.body, constants.REL_THEN))
            if shape.else_if is not None:
                children.append(
                    Node(
                        kind=NodeKind.BLOCK_STATEMENT,
                        location=locate(self._source, shape.else_if.start),
                        offset=shape.else_if.start,
                        relationship=constants.REL_ELSE,
                        children=[
                            self._control_node(shape.else_if, constants.REL_STATEMENT)
                        ],
                    )
                )
            elif shape.else_body is not None:
                children.append(self._block_node(shape.else_body, constants.REL_ELSE))
        elif shape.kind == NodeKind.FOR_STATEMENT:
            first, second = header_semicolons(self._masked, header_start, header_end)
            children.extend(
                [
                    self._fragment_node(
                        NodeKind.INITIALIZATION,
                        header_start,
                        first,
                        constants.REL_INITIALIZATION,
                    ),
                    self._fragment_node(
                        NodeKind.TEST, first + 1, second, constants.REL_TEST
                    ),
                    self._fragment_node(
                        NodeKind.UPDATE, second + 1, header_end, constants.REL_UPDATE
                    ),
                    self._block_node(shape.body, constants.REL_BODY),
                ]
            )
        else:
            children.append(
                self._fragment_node(
                    NodeKind.TEST, header_start, header_end, constants.REL_TEST
                )
            )
            children.append(self._block_node(shape.body, constants.REL_BODY))

        return Node(
            kind=shape.kind,
            location=locate(self._source, shape.start),
            offset=shape.start,
            relationship=relationship,
            children=[child for child in children if child is not None],
        )

    # ── returns and calls ────────────────────────────────────────

    def _returns(
        self, start: int, end: int, shadow: list[tuple[int, int]]
    ) -> list[tuple[tuple[int, int], Node]]:
        found: list[tuple[tuple[int, int], Node]] = []
        for m in CShapes.RETURN_RE.finditer(self._masked, start, end):
            if contains(shadow, m.start()):
                continue
            expr_start, expr_end = m.span("expr")
            _, expr = fragment(self._source, expr_start, expr_end)
            children: list[Node] = []
            call = self._first_call(expr_start, expr_end)
            if call is not None:
                children.append(call)
            node = Node(
                kind=NodeKind.RETURN_STATEMENT,
                raw_text=expr or None,
                location=locate(self._source, m.start()),
                offset=m.start(),
                relationship=constants.REL_STATEMENT,
                children=children,
            )
            found.append(((m.start(), m.end() - 1), node))
        return found

    def _first_call(self, start: int, end: int) -> Node | None:
        """Decompose the first call shape inside a return expression."""
        for m in CShapes.CALL_RE.finditer(self._masked, start, end):
            callee = "".join(m.group("callee").split())
            if is_keyword(callee):
                continue
            paren_open = m.end() - 1
            paren_close = extract_block(self._masked, paren_open, "(", ")")
            if paren_close is None or paren_close >= end:
                return None
            return self._call_node(
                callee, m.start("callee"), paren_open, paren_close, constants.REL_VALUE
            )
        return None

    def _call_statements(
        self, start: int, end: int, shadow: list[tuple[int, int]]
    ) -> list[Node]:
        calls: list[Node] = []
        for m in CShapes.CALL_STATEMENT_RE.finditer(self._masked, start, end):
            callee = m.group("callee")
            offset = m.start("callee")
            if is_keyword(callee) or contains(shadow, offset):
                continue
            paren_open = m.end() - 1
            paren_close = extract_block(self._masked, paren_open, "(", ")")
            if paren_close is None or paren_close >= end:
                continue
            if CShapes.STATEMENT_END_RE.match(self._masked, paren_close + 1, end) is None:
                continue
            calls.append(
                self._call_node(
                    callee, offset, paren_open, paren_close, constants.REL_STATEMENT
                )
            )
        return calls

    def _call_node(
        self,
        callee: str,
        offset: int,
        paren_open: int,
        paren_close: int,
        relationship: str,
    ) -> Node:
        arguments = [
            Node(
                kind=NodeKind.ARGUMENT,
                raw_text=text,
                location=locate(self._source, arg_offset),
                offset=arg_offset,
                relationship=constants.REL_ARGUMENT,
            )
            for arg_offset, text in split_top_level(
                self._masked, self._source, paren_open + 1, paren_close
            )
        ]
        return Node(
            kind=NodeKind.CALL_EXPRESSION,
            name=callee,
            location=locate(self._source, offset),
            offset=offset,
            relationship=relationship,
            children=arguments,
        )


def parse_statements(source: str, start: int = 0, end: int | None = None) -> list[Node]:
    """Recognize the statements of ``source[start:end]`` with absolute locations."""
    end = len(source) if end is None else end
    return StatementRecognizer(source, mask_source(source)).parse_statements(start, end)
