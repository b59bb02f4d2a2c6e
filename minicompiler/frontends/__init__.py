"""Structural-analysis frontends for the supported languages."""

from __future__ import annotations

import importlib

from ..frontend import Frontend
from .c import CFrontend

# Lazy imports so the tree-sitter stack loads only when JavaScript is requested
_FRONTEND_CLASSES: dict[str, str] = {
    "c": "c.CFrontend",
    "javascript": "javascript.JavaScriptFrontend",
}


def get_frontend(language: str) -> Frontend:
    """Instantiate the frontend for *language*.

    Raises ``ValueError`` if *language* has no registered frontend.
    """
    target = _FRONTEND_CLASSES.get(language)
    if target is None:
        raise ValueError(f"Unsupported language: {language}")
    module_name, class_name = target.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    cls = getattr(mod, class_name)
    return cls()


__all__ = [
    "CFrontend",
    "Frontend",
    "get_frontend",
]
