"""Delimiter matching and offset-preserving text helpers.

Every structural pass works on two strings of identical length: the original
source and a *masked* copy in which comments, the contents of string / char
literals and preprocessor directive lines are blanked out.  Shapes are matched
and delimiters counted on the masked copy; fragments are sliced from the
original at the same offsets.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_OPENERS = "([{"
_CLOSERS = ")]}"


def extract_block(
    text: str, open_offset: int, opener: str = "{", closer: str = "}"
) -> int | None:
    """Return the offset of the delimiter closing the one at *open_offset*.

    Nested *opener*/*closer* pairs are tracked with a depth counter.  Returns
    ``None`` when the end of *text* is reached with the block still open.
    """
    depth = 1
    for pos in range(open_offset + 1, len(text)):
        ch = text[pos]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return pos
    logger.debug("Unterminated %r block opened at offset %d", opener, open_offset)
    return None


def block_end(text: str, open_offset: int) -> int:
    """Like ``extract_block`` for braces, but an unterminated block runs to EOF."""
    close = extract_block(text, open_offset)
    return len(text) if close is None else close


def mask_source(source: str) -> str:
    """Blank comments, literal contents and directive lines, keeping offsets.

    Newlines are always preserved so line numbers stay valid; quote characters
    are kept so literals still read as expressions.
    """
    out = list(source)
    n = len(source)
    i = 0
    line_start = True
    while i < n:
        ch = source[i]
        if ch == "\n":
            line_start = True
            i += 1
            continue
        if line_start and ch == "#":
            i = _blank_directive(source, out, i)
            continue
        if not ch.isspace():
            line_start = False
        nxt = source[i + 1] if i + 1 < n else ""
        if ch == "/" and nxt == "/":
            end = source.find("\n", i)
            end = n if end == -1 else end
            _blank(out, i, end)
            i = end
        elif ch == "/" and nxt == "*":
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            _blank(out, i, end)
            i = end
        elif ch in "\"'":
            i = _blank_literal(source, out, i)
        else:
            i += 1
    return "".join(out)


def _blank(out: list[str], start: int, end: int) -> None:
    for pos in range(start, end):
        if out[pos] != "\n":
            out[pos] = " "


def _blank_directive(source: str, out: list[str], start: int) -> int:
    """Blank a preprocessor line, following backslash continuations."""
    pos = start
    n = len(source)
    while pos < n:
        end = source.find("\n", pos)
        if end == -1:
            _blank(out, pos, n)
            return n
        _blank(out, pos, end)
        if source[end - 1] != "\\":
            return end
        pos = end + 1
    return n


def _blank_literal(source: str, out: list[str], start: int) -> int:
    quote = source[start]
    pos = start + 1
    n = len(source)
    while pos < n:
        ch = source[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == quote:
            _blank(out, start + 1, pos)
            return pos + 1
        if ch == "\n":
            # Unterminated literal: stop at end of line
            break
        pos += 1
    _blank(out, start + 1, min(pos, n))
    return min(pos, n)


def split_top_level(
    masked: str, source: str, start: int, end: int, separator: str = ","
) -> list[tuple[int, str]]:
    """Split ``source[start:end]`` at depth-zero *separator* characters.

    Returns ``(offset, text)`` pairs with surrounding whitespace stripped and
    offsets pointing at the first non-blank character; empty pieces are
    dropped.
    """
    pieces: list[tuple[int, str]] = []
    depth = 0
    piece_start = start
    for pos in range(start, end):
        ch = masked[pos]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch == separator and depth == 0:
            pieces.append(_stripped(source, piece_start, pos))
            piece_start = pos + 1
    pieces.append(_stripped(source, piece_start, end))
    return [(offset, text) for offset, text in pieces if text]


def _stripped(source: str, start: int, end: int) -> tuple[int, str]:
    raw = source[start:end]
    lead = len(raw) - len(raw.lstrip())
    return start + lead, raw.strip()


def fragment(source: str, start: int, end: int) -> tuple[int, str]:
    """Return ``source[start:end]`` stripped, with the offset of its first character."""
    return _stripped(source, start, end)


def top_level_blocks(masked: str) -> list[tuple[int, int]]:
    """Return ``[open, close]`` ranges of every depth-zero brace block."""
    ranges: list[tuple[int, int]] = []
    pos = masked.find("{")
    while pos != -1:
        close = block_end(masked, pos)
        ranges.append((pos, close))
        pos = masked.find("{", close + 1)
    return ranges


def contains(ranges: list[tuple[int, int]], offset: int) -> bool:
    """Containment test: is *offset* inside any inclusive ``(start, end)`` range?"""
    return any(start <= offset <= end for start, end in ranges)
