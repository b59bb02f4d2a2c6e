"""Structural analysis of small C and JavaScript programs."""

from .api import (  # noqa: F401
    analyze_source,
    build_symbol_table,
    build_tree,
    compile_request,
    compile_source,
)
from .config import ToolchainConfig  # noqa: F401
