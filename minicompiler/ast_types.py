"""Structural tree types: the simplified node tree handed to the visualizer."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict


class NodeKind(str, Enum):
    # Declarations
    PROGRAM = "Program"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    PARAMETER = "Parameter"
    VARIABLE_DECLARATION = "VariableDeclaration"
    INITIALIZER = "Initializer"
    # Statements
    BLOCK_STATEMENT = "BlockStatement"
    IF_STATEMENT = "IfStatement"
    FOR_STATEMENT = "ForStatement"
    WHILE_STATEMENT = "WhileStatement"
    RETURN_STATEMENT = "ReturnStatement"
    # Expression fragments
    CALL_EXPRESSION = "CallExpression"
    ARGUMENT = "Argument"
    INITIALIZATION = "Initialization"
    TEST = "Test"
    UPDATE = "Update"
    BINARY_EXPRESSION = "BinaryExpression"


class SourcePoint(BaseModel):
    """A position in source text: 1-based line, 0-based column."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int

    def to_dict(self) -> dict:
        return {"line": self.line, "column": self.column}


class Node(BaseModel):
    """One element of the recovered C structure.

    ``raw_text`` holds an opaque source fragment (declared type, condition,
    argument) since no expression grammar is parsed.  ``relationship`` is the
    label of the edge from the parent node.
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    name: str | None = None
    raw_text: str | None = None
    location: SourcePoint
    offset: int = 0
    relationship: str = ""
    children: list[Node] = []

    def labelled_children(self) -> Iterator[tuple[str, Node]]:
        return ((child.relationship, child) for child in self.children)

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "location": self.location.to_dict(),
        }
        if self.name is not None:
            d["name"] = self.name
        if self.raw_text is not None:
            d["rawText"] = self.raw_text
        if self.relationship:
            d["relationship"] = self.relationship
        d["children"] = [child.to_dict() for child in self.children]
        return d


class SyntaxNode(BaseModel):
    """A node of a language-native syntax tree (tree-sitter node types)."""

    model_config = ConfigDict(frozen=True)

    type: str
    location: SourcePoint
    text: str | None = None
    relationship: str = ""
    children: list[SyntaxNode] = []

    def labelled_children(self) -> Iterator[tuple[str, SyntaxNode]]:
        return ((child.relationship, child) for child in self.children)

    def walk(self) -> Iterator[SyntaxNode]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.type,
            "location": self.location.to_dict(),
        }
        if self.text is not None:
            d["text"] = self.text
        if self.relationship:
            d["relationship"] = self.relationship
        d["children"] = [child.to_dict() for child in self.children]
        return d


Node.model_rebuild()
SyntaxNode.model_rebuild()
