"""Symbol Table Builder: an independent declaration pass over C text.

Scope is decided by containment: a declaration belongs to the function whose
``[opening brace, closing brace]`` range contains its offset, otherwise it
is global.  The pass does not look at the structural tree.
"""

from __future__ import annotations

import logging

from ..blocks import contains, extract_block, mask_source, top_level_blocks
from ..locator import locate
from ..symbol_types import SymbolEntry, SymbolKind, pseudo_address
from .c_shapes import (
    CShapes,
    DeclarationShape,
    FunctionShape,
    find_declarations,
    find_function_shapes,
    header_semicolons,
    parse_declaration_fragment,
)
from .. import constants

logger = logging.getLogger(__name__)


class CSymbolTableBuilder:
    """Builds ``name -> SymbolEntry`` for functions, parameters and variables.

    Entries are applied in source order of their declaration sites, so a name
    declared twice keeps its textually last declaration.  A function entry is
    never replaced by a variable or parameter of the same name, so every
    ``scope`` names a function entry of the table or is ``"global"``.
    """

    def build(self, source: str) -> dict[str, SymbolEntry]:
        masked = mask_source(source)
        functions = find_function_shapes(source, masked)
        bodies = {fn.open_brace for fn in functions}
        aggregates = [
            block for block in top_level_blocks(masked) if block[0] not in bodies
        ]

        entries: list[SymbolEntry] = []
        for fn in functions:
            entries.extend(self._function_entries(source, fn))
        for decl in find_declarations(source, masked):
            if contains(aggregates, decl.offset):
                continue
            entries.extend(
                self._variable_entries(source, decl, _scope_of(functions, decl.offset))
            )
        entries.extend(self._loop_variable_entries(source, masked, functions))

        table: dict[str, SymbolEntry] = {}
        for entry in sorted(entries, key=lambda e: e.offset):
            current = table.get(entry.name)
            if (
                current is not None
                and current.kind == SymbolKind.FUNCTION
                and entry.kind != SymbolKind.FUNCTION
            ):
                logger.debug(
                    "Keeping function %s over a later %s", entry.name, entry.kind.value
                )
                continue
            table[entry.name] = entry
        logger.debug("Symbol table has %d entries", len(table))
        return table

    def _entry(
        self,
        source: str,
        name: str,
        kind: SymbolKind,
        declared_type: str,
        scope: str,
        offset: int,
        params: list[str] | None = None,
    ) -> SymbolEntry:
        loc = locate(source, offset)
        return SymbolEntry(
            name=name,
            kind=kind,
            declared_type=declared_type,
            scope=scope,
            line=loc.line,
            column=loc.column,
            params=params,
            pseudo_address=pseudo_address(name, scope),
            offset=offset,
        )

    def _function_entries(self, source: str, fn: FunctionShape) -> list[SymbolEntry]:
        entries = [
            self._entry(
                source,
                fn.name,
                SymbolKind.FUNCTION,
                fn.return_type,
                constants.GLOBAL_SCOPE,
                fn.name_offset,
                params=[param.name for param in fn.params],
            )
        ]
        entries.extend(
            self._entry(
                source,
                param.name,
                SymbolKind.PARAMETER,
                param.declared_type,
                fn.name,
                param.offset,
            )
            for param in fn.params
        )
        return entries

    def _variable_entries(
        self, source: str, decl: DeclarationShape, scope: str
    ) -> list[SymbolEntry]:
        return [
            self._entry(
                source,
                declarator.name,
                SymbolKind.VARIABLE,
                declarator.declared_type,
                scope,
                declarator.name_offset,
            )
            for declarator in decl.declarators
        ]

    def _loop_variable_entries(
        self, source: str, masked: str, functions: list[FunctionShape]
    ) -> list[SymbolEntry]:
        """Variables declared in a ``for`` initializer: ``for (int i = 0; …)``."""
        entries: list[SymbolEntry] = []
        for m in CShapes.FOR_RE.finditer(masked):
            scope = _scope_of(functions, m.start())
            if scope == constants.GLOBAL_SCOPE:
                continue
            paren_open = m.end() - 1
            paren_close = extract_block(masked, paren_open, "(", ")")
            if paren_close is None:
                continue
            semicolons = header_semicolons(masked, paren_open + 1, paren_close)
            if not semicolons:
                continue
            decl = parse_declaration_fragment(
                source, masked, paren_open + 1, semicolons[0]
            )
            if decl is not None:
                entries.extend(self._variable_entries(source, decl, scope))
        return entries


def _scope_of(functions: list[FunctionShape], offset: int) -> str:
    """Name of the function whose range contains *offset*, else ``"global"``."""
    return next(
        (fn.name for fn in functions if fn.contains(offset)),
        constants.GLOBAL_SCOPE,
    )


def build_symbol_table(source: str) -> dict[str, SymbolEntry]:
    """Module-level convenience for ``CSymbolTableBuilder().build``."""
    return CSymbolTableBuilder().build(source)
