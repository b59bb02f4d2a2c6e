"""Compiled C shapes and the matchers shared by the structural passes.

A *shape* is a pattern for one fixed syntactic form.  All matchers run on the
masked source (see ``blocks.mask_source``) and read fragments back from the
original source at the same offsets.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..blocks import extract_block, split_top_level
from .. import constants

logger = logging.getLogger(__name__)

# Statement start: beginning of a line or right after ``;``, ``{`` or ``}``.
# Only horizontal blanks follow the anchor; ``^`` picks up each later line.
_STATEMENT_START = r"(?:^|(?<=[;{}]))[ \t]*"
_TYPE_WORDS = r"(?P<type>[A-Za-z_]\w*(?:[ \t]+[A-Za-z_]\w*)*?)"
_DECLARATORS = (
    r"(?P<declarators>[ \t]*\**[ \t]*(?<=[\s*])[A-Za-z_]\w*"
    r"\s*(?:\[[^\]\n]*\]\s*)*(?:[=,][^;]*)?)"
)


class CShapes:
    """Compiled regex patterns for the recognised C statement shapes."""

    FUNCTION_RE = re.compile(
        _STATEMENT_START
        + r"(?P<type>[A-Za-z_]\w*(?:[ \t]+[A-Za-z_]\w*)*?(?:[ \t]*\*+)?)"
        + r"\s*(?<=[\s*])(?P<name>[A-Za-z_]\w*)\s*\(",
        re.MULTILINE,
    )
    DECLARATION_RE = re.compile(
        _STATEMENT_START + _TYPE_WORDS + _DECLARATORS + ";", re.MULTILINE
    )
    DECLARATION_FRAGMENT_RE = re.compile(r"\s*" + _TYPE_WORDS + _DECLARATORS + r"\s*")
    DECLARATOR_RE = re.compile(
        r"(?P<stars>[\s*]*)(?P<name>[A-Za-z_]\w*)\s*"
        r"(?P<array>(?:\[[^\]]*\]\s*)*)(?:=\s*(?P<init>.*))?",
        re.DOTALL,
    )
    PARAM_NAME_RE = re.compile(r"([A-Za-z_]\w*)\s*((?:\[[^\]]*\]\s*)*)$")

    IF_RE = re.compile(r"\bif\s*\(")
    FOR_RE = re.compile(r"\bfor\s*\(")
    WHILE_RE = re.compile(r"\bwhile\s*\(")
    ELSE_BLOCK_RE = re.compile(r"\s*else\s*\{")
    ELSE_IF_RE = re.compile(r"\s*else\s+(?=if\s*\()")
    BODY_OPEN_RE = re.compile(r"\s*\{")
    STATEMENT_END_RE = re.compile(r"\s*;")

    RETURN_RE = re.compile(r"\breturn\b(?P<expr>[^;]*);")
    CALL_STATEMENT_RE = re.compile(
        _STATEMENT_START + r"(?P<callee>[A-Za-z_]\w*)\s*\(", re.MULTILINE
    )
    CALL_RE = re.compile(
        r"(?P<callee>[A-Za-z_]\w*(?:\s*(?:\.|->)\s*[A-Za-z_]\w*)*)\s*\("
    )


def is_keyword(word: str) -> bool:
    return word in constants.C_KEYWORDS


def _words(text: str) -> list[str]:
    return text.replace("*", " ").split()


def normalize_type(text: str) -> str:
    return " ".join(text.split())


# ── Parameters ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ParamShape:
    name: str
    declared_type: str
    offset: int


def parse_parameters(
    source: str, masked: str, start: int, end: int
) -> list[ParamShape]:
    """Split a parameter list on top-level commas.

    The last identifier of each piece is the name (pointer stars and array
    brackets move to the type); ``void`` and ``...`` yield no parameter.
    """
    params: list[ParamShape] = []
    for index, (offset, text) in enumerate(split_top_level(masked, source, start, end)):
        if text in ("void", "..."):
            continue
        m = CShapes.PARAM_NAME_RE.search(masked[offset : offset + len(text)])
        if m is None:
            params.append(
                ParamShape(
                    name=constants.PARAM_FALLBACK_TEMPLATE.format(index=index),
                    declared_type=normalize_type(text),
                    offset=offset,
                )
            )
            continue
        declared_type = normalize_type(text[: m.start()])
        suffix = "".join(m.group(2).split())
        params.append(
            ParamShape(
                name=m.group(1),
                declared_type=declared_type + suffix,
                offset=offset + m.start(1),
            )
        )
    return params


# ── Functions ────────────────────────────────────────────────────


@dataclass
class FunctionShape:
    """A function definition: signature plus brace-matched body."""

    name: str
    return_type: str
    start: int
    name_offset: int
    params: list[ParamShape] = field(default_factory=list)
    open_brace: int = -1
    close_brace: int | None = None
    end: int = -1

    @property
    def terminated(self) -> bool:
        return self.close_brace is not None

    def contains(self, offset: int) -> bool:
        return self.open_brace <= offset <= self.end


def find_function_shapes(source: str, masked: str) -> list[FunctionShape]:
    """Return every top-level function definition in source order.

    Shapes that begin inside an earlier function's range are skipped, as are
    keyword-led lines (``else if (…) {``) and prototypes without a body.
    """
    functions: list[FunctionShape] = []
    last_end = -1
    for m in CShapes.FUNCTION_RE.finditer(masked):
        start = m.start("type")
        if start <= last_end:
            continue
        name = m.group("name")
        if is_keyword(name) or any(is_keyword(w) for w in _words(m.group("type"))):
            continue
        paren_open = m.end() - 1
        paren_close = extract_block(masked, paren_open, "(", ")")
        if paren_close is None:
            continue
        body = CShapes.BODY_OPEN_RE.match(masked, paren_close + 1)
        if body is None:
            continue
        open_brace = body.end() - 1
        close_brace = extract_block(masked, open_brace)
        end = len(source) if close_brace is None else close_brace
        if close_brace is None:
            logger.debug("Function %s: body unterminated, scanning to EOF", name)
        functions.append(
            FunctionShape(
                name=name,
                return_type=normalize_type(m.group("type")),
                start=start,
                name_offset=m.start("name"),
                params=parse_parameters(source, masked, paren_open + 1, paren_close),
                open_brace=open_brace,
                close_brace=close_brace,
                end=end,
            )
        )
        last_end = end
    return functions


# ── Declarations ─────────────────────────────────────────────────


@dataclass(frozen=True)
class DeclaratorShape:
    name: str
    declared_type: str
    name_offset: int
    init_text: str | None = None
    init_offset: int = -1


@dataclass(frozen=True)
class DeclarationShape:
    """``<type-words> <declarator> [, <declarator>]* ;``"""

    base_type: str
    offset: int
    declarators: list[DeclaratorShape]


def _declaration_from_match(
    source: str, masked: str, m: re.Match
) -> DeclarationShape | None:
    base_type = normalize_type(m.group("type"))
    if any(is_keyword(w) for w in base_type.split()):
        return None
    declarators: list[DeclaratorShape] = []
    start, end = m.span("declarators")
    for offset, text in split_top_level(masked, source, start, end):
        dm = CShapes.DECLARATOR_RE.fullmatch(masked, offset, offset + len(text))
        if dm is None or is_keyword(dm.group("name")):
            continue
        stars = dm.group("stars").count("*")
        declared_type = base_type + (" " + "*" * stars if stars else "")
        declared_type += "".join(dm.group("array").split())
        init_text = None
        init_offset = -1
        if dm.group("init") is not None:
            init_start, init_end = dm.span("init")
            init_offset = init_start
            init_text = source[init_start:init_end].strip() or None
        declarators.append(
            DeclaratorShape(
                name=dm.group("name"),
                declared_type=declared_type,
                name_offset=dm.start("name"),
                init_text=init_text,
                init_offset=init_offset,
            )
        )
    if not declarators:
        return None
    return DeclarationShape(
        base_type=base_type, offset=m.start("type"), declarators=declarators
    )


def find_declarations(
    source: str, masked: str, start: int = 0, end: int | None = None
) -> list[DeclarationShape]:
    """Return every declaration statement between *start* and *end*."""
    end = len(masked) if end is None else end
    found: list[DeclarationShape] = []
    for m in CShapes.DECLARATION_RE.finditer(masked, start, end):
        decl = _declaration_from_match(source, masked, m)
        if decl is not None:
            found.append(decl)
    return found


def parse_declaration_fragment(
    source: str, masked: str, start: int, end: int
) -> DeclarationShape | None:
    """Match a declaration without its ``;`` (e.g. a ``for`` initializer)."""
    m = CShapes.DECLARATION_FRAGMENT_RE.fullmatch(masked, start, end)
    if m is None:
        return None
    return _declaration_from_match(source, masked, m)


# ── Loop headers ─────────────────────────────────────────────────


def header_semicolons(masked: str, start: int, end: int) -> list[int]:
    """Offsets of depth-zero ``;`` between *start* and *end*."""
    found: list[int] = []
    depth = 0
    for pos in range(start, end):
        ch = masked[pos]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        elif ch == ";" and depth == 0:
            found.append(pos)
    return found
