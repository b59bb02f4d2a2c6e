"""Toolchain configuration (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class ToolchainConfig:
    """Groups the native toolchain settings for one analysis."""

    c_compiler: str = constants.DEFAULT_C_COMPILER
    c_flags: tuple[str, ...] = ()
    js_runtime: str = constants.DEFAULT_JS_RUNTIME
    compile_timeout: float = constants.DEFAULT_COMPILE_TIMEOUT
    run_timeout: float = constants.DEFAULT_RUN_TIMEOUT
    execute: bool = True
