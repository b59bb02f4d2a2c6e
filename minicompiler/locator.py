"""Offset → line/column conversion."""

from __future__ import annotations

from .ast_types import SourcePoint


def locate(source: str, offset: int) -> SourcePoint:
    """Return the 1-based line and 0-based column of *offset* in *source*."""
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    return SourcePoint(
        line=source.count("\n", 0, offset) + 1,
        column=offset - line_start,
    )
