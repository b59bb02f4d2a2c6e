"""Tests for CFrontend: raw C text -> structural Program tree."""

from __future__ import annotations

import time

import pytest

from minicompiler.ast_types import Node, NodeKind
from minicompiler.frontends.c import CFrontend
from minicompiler.locator import locate

SAMPLE = """\
#include <stdio.h>

int counter = 0;

struct point { int x; int y; };

int add(int a, int b) {
    return a + b;
}

int main(void) {
    int total = add(2, 3);
    for (int i = 0; i < 3; i++) {
        counter = counter + i;
    }
    if (total > 4) {
        printf("big\\n");
    } else {
        printf("small\\n");
    }
    return 0;
}
"""


def _build(source: str) -> Node:
    return CFrontend().build_tree(source)


def _functions(root: Node) -> list[Node]:
    return [c for c in root.children if c.kind == NodeKind.FUNCTION_DECLARATION]


class TestCFrontendProgram:
    def test_empty_source_gives_empty_program(self):
        root = _build("")
        assert root.kind == NodeKind.PROGRAM
        assert root.children == []

    def test_degenerate_input_does_not_raise(self):
        for source in ["}}}{", "(((", "int", ";;;", "/* unterminated", '"open']:
            assert _build(source).kind == NodeKind.PROGRAM

    def test_root_children_in_source_order(self):
        root = _build("int x = 5; int main() { int y = x + 1; return y; }")
        assert [(c.kind, c.name) for c in root.children] == [
            (NodeKind.VARIABLE_DECLARATION, "x"),
            (NodeKind.FUNCTION_DECLARATION, "main"),
        ]

    def test_struct_members_are_not_globals(self):
        root = _build(SAMPLE)
        globals_ = [
            c.name for c in root.children if c.kind == NodeKind.VARIABLE_DECLARATION
        ]
        assert globals_ == ["counter"]

    def test_prototype_is_not_a_function(self):
        root = _build("int add(int a, int b);\nint main() { return 0; }")
        assert [f.name for f in _functions(root)] == ["main"]

    def test_to_dict_shape(self):
        d = _build("int add(int a, int b) { return a + b; }").to_dict()
        assert d["kind"] == "Program"
        fn = d["children"][0]
        assert fn["name"] == "add"
        assert fn["rawText"] == "int"
        assert fn["relationship"] == "declaration"
        assert fn["location"] == {"line": 1, "column": 0}


class TestCFrontendFunctions:
    def test_add_function_shape(self):
        root = _build("int add(int a, int b) { return a + b; }")
        (fn,) = _functions(root)
        assert fn.name == "add"
        params = [c for c in fn.children if c.kind == NodeKind.PARAMETER]
        assert [(p.name, p.raw_text) for p in params] == [("a", "int"), ("b", "int")]
        body = fn.children[-1]
        assert body.kind == NodeKind.BLOCK_STATEMENT
        assert body.relationship == "body"
        assert [c.kind for c in body.children] == [NodeKind.RETURN_STATEMENT]
        assert body.children[0].raw_text == "a + b"

    def test_void_parameter_list_is_empty(self):
        (main,) = [f for f in _functions(_build(SAMPLE)) if f.name == "main"]
        assert [c.kind for c in main.children] == [NodeKind.BLOCK_STATEMENT]

    def test_sample_main_body(self):
        (main,) = [f for f in _functions(_build(SAMPLE)) if f.name == "main"]
        body = main.children[-1]
        assert [c.kind for c in body.children] == [
            NodeKind.VARIABLE_DECLARATION,
            NodeKind.FOR_STATEMENT,
            NodeKind.IF_STATEMENT,
            NodeKind.RETURN_STATEMENT,
        ]

    def test_pointer_return_type(self):
        (fn,) = _functions(_build("char *name(void) { return 0; }"))
        assert fn.name == "name"
        assert fn.raw_text == "char *"

    def test_function_locations(self):
        root = _build(SAMPLE)
        lines = {f.name: f.location.line for f in _functions(root)}
        assert lines == {"add": 7, "main": 11}

    def test_unterminated_body_keeps_function(self):
        root = _build("int f() {")
        (fn,) = _functions(root)
        assert fn.name == "f"
        body = fn.children[-1]
        assert body.kind == NodeKind.BLOCK_STATEMENT
        assert body.children == []

    def test_unterminated_body_keeps_partial_statements(self):
        (fn,) = _functions(_build("int f() {\n  int x = 1;\n  g(x);"))
        body = fn.children[-1]
        assert [c.kind for c in body.children] == [
            NodeKind.VARIABLE_DECLARATION,
            NodeKind.CALL_EXPRESSION,
        ]

    def test_single_line_sources_find_every_function(self):
        root = _build("int one() { return 1; } int two() { return 2; }")
        assert [f.name for f in _functions(root)] == ["one", "two"]


class TestCFrontendNodeOffsets:
    @pytest.mark.parametrize(
        "source",
        [
            SAMPLE,
            "int f() {",
            "int f() {\n  if (a) {\n    g(1);",
            "}}}{",
            "(((",
            ";;;",
            '"open',
            "int x = 5; int main() { int y = x + 1; return y; }",
        ],
    )
    def test_offsets_in_range_and_locations_derived(self, source):
        root = _build(source)
        assert root.offset == 0
        for node in root.walk():
            if node is not root:
                assert 0 <= node.offset < len(source)
            assert node.location == locate(source, node.offset)


class TestCFrontendLongBlankRuns:
    def test_blank_lines_scan_in_linear_time(self):
        source = "int main() {\n" + "\n" * 20000 + "return 0; }"
        started = time.perf_counter()
        root = _build(source)
        elapsed = time.perf_counter() - started
        (main,) = _functions(root)
        assert [c.kind for c in main.children[-1].children] == [
            NodeKind.RETURN_STATEMENT
        ]
        assert elapsed < 5.0


class TestCFrontendIdempotence:
    def test_two_builds_are_identical(self):
        frontend = CFrontend()
        assert frontend.build_tree(SAMPLE) == frontend.build_tree(SAMPLE)
        assert frontend.build_tree(SAMPLE).to_dict() == CFrontend().build_tree(
            SAMPLE
        ).to_dict()
