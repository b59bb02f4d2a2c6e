"""Native toolchain invocation: gcc for C, node for JavaScript.

Every invocation works inside its own temporary directory, which is removed
on every exit path.  Failures of the tools themselves become diagnostics;
nothing here raises for a bad program.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import ToolchainConfig
from .result_types import Diagnostic
from . import constants

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

_COMPILER_DIAGNOSTIC_RE = re.compile(
    constants.COMPILER_DIAGNOSTIC_PATTERN, re.MULTILINE
)
_NODE_LOCATION_RE = re.compile(constants.NODE_LOCATION_PATTERN)
_NODE_ERROR_RE = re.compile(constants.NODE_ERROR_PATTERN)


@dataclass
class ToolchainResult:
    """Diagnostics and captured output of one toolchain run."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    output: Optional[str] = None


# ── diagnostic translation ───────────────────────────────────────


def parse_compiler_diagnostics(stderr: str) -> list[Diagnostic]:
    """Translate ``file:line:col: severity: message`` lines into diagnostics.

    Lines that do not follow the format (notes, source excerpts, carets) are
    ignored.
    """
    return [
        Diagnostic(line=int(m.group(2)), message=f"{m.group(4)}: {m.group(5).strip()}")
        for m in _COMPILER_DIAGNOSTIC_RE.finditer(stderr)
    ]


def parse_node_error(stderr: str) -> list[Diagnostic]:
    """Translate a node uncaught-exception report into one diagnostic.

    node prints ``<file>:<line>`` first and ``<Name>Error: <message>`` a few
    lines further down; either may be absent.
    """
    text = stderr.strip()
    if not text:
        return []
    line = 0
    message = None
    for raw in text.splitlines():
        raw = raw.strip()
        if not line:
            loc = _NODE_LOCATION_RE.match(raw)
            if loc:
                line = int(loc.group(1))
                continue
        if message is None and _NODE_ERROR_RE.match(raw):
            message = raw
    return [Diagnostic(line=line, message=message or text)]


def _failure(message: str) -> Diagnostic:
    logger.warning("Toolchain failure: %s", message)
    return Diagnostic(line=0, message=message)


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


# ── toolchains ───────────────────────────────────────────────────


class Toolchain(ABC):
    """Builds and/or runs one program and reports what happened."""

    def __init__(self, config: ToolchainConfig, runner: Runner | None = None):
        self._config = config
        self._runner = runner or subprocess.run

    @abstractmethod
    def run(self, source: str) -> ToolchainResult: ...

    def _execute(self, command: list[str], cwd: str) -> ToolchainResult:
        """Run the built program with stdin closed, bounded by ``run_timeout``."""
        try:
            proc = self._runner(
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self._config.run_timeout,
            )
        except subprocess.TimeoutExpired as exc:
            return ToolchainResult(
                diagnostics=[_failure(constants.EXECUTION_TIMED_OUT)],
                output=_decode(exc.stdout),
            )
        except OSError as exc:
            return ToolchainResult(
                diagnostics=[_failure(f"failed to execute {command[0]}: {exc}")]
            )
        return self._completed(proc)

    def _completed(self, proc: subprocess.CompletedProcess) -> ToolchainResult:
        diagnostics: list[Diagnostic] = []
        stderr = proc.stderr.strip()
        if proc.returncode != 0:
            message = stderr or f"program exited with status {proc.returncode}"
            diagnostics.append(_failure(message))
        elif stderr:
            # A clean exit may still have written to stderr
            diagnostics.append(Diagnostic(line=0, message=stderr))
        return ToolchainResult(diagnostics=diagnostics, output=proc.stdout)


class GccToolchain(Toolchain):
    """Compiles with the configured C compiler, then runs the executable."""

    def run(self, source: str) -> ToolchainResult:
        with tempfile.TemporaryDirectory(
            prefix=constants.TEMP_DIR_PREFIX, ignore_cleanup_errors=True
        ) as workdir:
            source_path = os.path.join(workdir, constants.C_SOURCE_FILENAME)
            exe_path = os.path.join(workdir, constants.C_EXECUTABLE_FILENAME)
            with open(source_path, "w", encoding="utf-8") as fh:
                fh.write(source)

            command = [
                self._config.c_compiler,
                *self._config.c_flags,
                source_path,
                "-o",
                exe_path,
            ]
            logger.debug("Compiling: %s", " ".join(command))
            try:
                proc = self._runner(
                    command,
                    cwd=workdir,
                    capture_output=True,
                    text=True,
                    timeout=self._config.compile_timeout,
                )
            except subprocess.TimeoutExpired:
                return ToolchainResult(
                    diagnostics=[_failure(constants.COMPILATION_TIMED_OUT)]
                )
            except OSError as exc:
                return ToolchainResult(
                    diagnostics=[
                        _failure(
                            f"C compiler '{self._config.c_compiler}' "
                            f"could not be run: {exc}"
                        )
                    ]
                )

            diagnostics = parse_compiler_diagnostics(proc.stderr)
            if proc.returncode != 0:
                if not diagnostics:
                    diagnostics = [_failure(proc.stderr.strip() or "compilation failed")]
                else:
                    logger.info("Compilation failed with %d diagnostics", len(diagnostics))
                return ToolchainResult(diagnostics=diagnostics)

            if not self._config.execute:
                return ToolchainResult(diagnostics=diagnostics)

            executed = self._execute([exe_path], workdir)
            return ToolchainResult(
                diagnostics=diagnostics + executed.diagnostics,
                output=executed.output,
            )


class NodeToolchain(Toolchain):
    """Runs the script with the configured JavaScript runtime."""

    def run(self, source: str) -> ToolchainResult:
        if not self._config.execute:
            return ToolchainResult()
        with tempfile.TemporaryDirectory(
            prefix=constants.TEMP_DIR_PREFIX, ignore_cleanup_errors=True
        ) as workdir:
            script_path = os.path.join(workdir, constants.JS_SOURCE_FILENAME)
            with open(script_path, "w", encoding="utf-8") as fh:
                fh.write(source)
            return self._execute([self._config.js_runtime, script_path], workdir)

    def _completed(self, proc: subprocess.CompletedProcess) -> ToolchainResult:
        if proc.returncode == 0:
            # console.error / console.warn text is part of the script's output
            return ToolchainResult(output=proc.stdout + proc.stderr)
        diagnostics = parse_node_error(proc.stderr)
        if not diagnostics:
            diagnostics = [
                _failure(f"program exited with status {proc.returncode}")
            ]
        else:
            logger.warning("Script raised: %s", diagnostics[0].message)
        return ToolchainResult(diagnostics=diagnostics, output=proc.stdout)


class NullToolchain(Toolchain):
    """Performs no compilation or execution."""

    def __init__(self, config: ToolchainConfig | None = None, runner: Runner | None = None):
        super().__init__(config or ToolchainConfig(), runner)

    def run(self, source: str) -> ToolchainResult:
        return ToolchainResult()


_TOOLCHAIN_CLASSES: dict[str, type[Toolchain]] = {
    constants.LANGUAGE_C: GccToolchain,
    constants.LANGUAGE_JAVASCRIPT: NodeToolchain,
}


def get_toolchain(
    language: str,
    config: ToolchainConfig | None = None,
    runner: Runner | None = None,
) -> Toolchain:
    """Factory: return the toolchain for *language*.

    Raises ``ValueError`` if *language* has no toolchain.
    """
    cls = _TOOLCHAIN_CLASSES.get(language)
    if cls is None:
        raise ValueError(f"Unsupported language: {language}")
    return cls(config or ToolchainConfig(), runner)
