"""Symbol table types (pure data, no business logic)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from . import constants


class SymbolKind(str, Enum):
    FUNCTION = "function"
    PARAMETER = "parameter"
    VARIABLE = "variable"


def pseudo_address(name: str, scope: str) -> str:
    """Return a synthetic, display-only memory location for *name*.

    The value is derived from the character codes of the name alone and does
    not correspond to any real allocation: globals get a hexadecimal address,
    everything else a stack-pointer-relative offset.
    """
    total = sum(ord(ch) for ch in name)
    if scope == constants.GLOBAL_SCOPE:
        return constants.PSEUDO_GLOBAL_TEMPLATE.format(
            value=total % constants.PSEUDO_GLOBAL_MODULUS + constants.PSEUDO_GLOBAL_BASE
        )
    return constants.PSEUDO_STACK_TEMPLATE.format(
        value=total % constants.PSEUDO_STACK_MODULUS
    )


class SymbolEntry(BaseModel):
    """One row of the symbol table.

    ``pseudo_address`` is illustrative only (see ``pseudo_address``); it is
    not the result of any code generation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: SymbolKind
    declared_type: str = ""
    scope: str = constants.GLOBAL_SCOPE
    line: int
    column: int
    params: list[str] | None = None
    pseudo_address: str = ""
    offset: int = 0

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "declaredType": self.declared_type,
            "scope": self.scope,
            "line": self.line,
            "column": self.column,
        }
        if self.params is not None:
            d["params"] = list(self.params)
        d["pseudoAddress"] = self.pseudo_address
        return d
