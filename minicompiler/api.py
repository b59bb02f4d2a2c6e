"""Composable API functions for the structural-analysis pipeline.

Each function corresponds to a CLI workflow (--tree-only, --symbols-only, full
analysis) but is callable programmatically without argparse.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ToolchainConfig
from .frontends import get_frontend
from .result_types import AnalysisResult, CompileRequest, CompileResponse, Tree
from .symbol_types import SymbolEntry
from .toolchain import Toolchain, get_toolchain
from . import constants

logger = logging.getLogger(__name__)


def build_tree(source: str, language: str = constants.LANGUAGE_C) -> Tree:
    """Recover the node tree of *source*.

    Args:
        source: The program text.
        language: ``"c"`` or ``"javascript"``.

    Returns:
        A ``Node`` Program root for C, a ``SyntaxNode`` root for JavaScript.
    """
    logger.info("Building tree (%s, %d chars)", language, len(source))
    return get_frontend(language).build_tree(source)


def build_symbol_table(
    source: str, language: str = constants.LANGUAGE_C
) -> dict[str, SymbolEntry]:
    """Recover the name → SymbolEntry table of *source*."""
    logger.info("Building symbol table (%s, %d chars)", language, len(source))
    return get_frontend(language).build_symbol_table(source)


def analyze_source(
    source: str,
    language: str = constants.LANGUAGE_C,
    config: Optional[ToolchainConfig] = None,
    toolchain: Optional[Toolchain] = None,
) -> AnalysisResult:
    """Run both structural passes, the syntax check and the toolchain.

    Args:
        source: The program text.
        language: ``"c"`` or ``"javascript"``.
        config: Toolchain settings; defaults to ``ToolchainConfig()``.
        toolchain: Explicit toolchain, overriding the one selected by
            *language* and *config*.

    Returns:
        An AnalysisResult.  Toolchain problems appear as diagnostics; the
        tree and symbol table are always present.
    """
    config = config or ToolchainConfig()
    logger.info("Analyzing source (%s, %d chars)", language, len(source))
    frontend = get_frontend(language)
    tree = frontend.build_tree(source)
    symbols = frontend.build_symbol_table(source)

    diagnostics = frontend.syntax_errors(source)
    if diagnostics:
        logger.info("Skipping execution: %d syntax errors", len(diagnostics))
        return AnalysisResult(tree=tree, symbols=symbols, diagnostics=diagnostics)

    if toolchain is None:
        toolchain = get_toolchain(language, config)
    result = toolchain.run(source)
    return AnalysisResult(
        tree=tree,
        symbols=symbols,
        diagnostics=list(result.diagnostics),
        execution_output=result.output,
    )


def compile_source(
    code: str,
    language: str = constants.LANGUAGE_C,
    config: Optional[ToolchainConfig] = None,
    toolchain: Optional[Toolchain] = None,
) -> CompileResponse:
    """Validate a submission and return its wire-level response.

    Raises ``pydantic.ValidationError`` for empty code or an unknown
    language before any analysis runs.
    """
    request = CompileRequest(code=code, language=language)
    result = analyze_source(request.code, request.language, config, toolchain)
    return CompileResponse.from_result(result)


def compile_request(
    payload: dict,
    config: Optional[ToolchainConfig] = None,
    toolchain: Optional[Toolchain] = None,
) -> CompileResponse:
    """Dict-payload variant of :func:`compile_source` (``{code, language}``)."""
    request = CompileRequest.model_validate(payload)
    result = analyze_source(request.code, request.language, config, toolchain)
    return CompileResponse.from_result(result)


__all__ = [
    "analyze_source",
    "build_symbol_table",
    "build_tree",
    "compile_request",
    "compile_source",
]
