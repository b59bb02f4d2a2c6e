"""Tests for minicompiler.toolchain."""

from __future__ import annotations

import os
import shutil
import subprocess

import pytest

from minicompiler.config import ToolchainConfig
from minicompiler.result_types import Diagnostic
from minicompiler.toolchain import (
    GccToolchain,
    NodeToolchain,
    NullToolchain,
    get_toolchain,
    parse_compiler_diagnostics,
    parse_node_error,
)


class FakeRunner:
    """Stands in for ``subprocess.run``; replays scripted outcomes in order."""

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls: list[dict] = []

    def __call__(self, command, **kwargs):
        self.calls.append({"command": list(command), **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        returncode, stdout, stderr = outcome
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)


class TestParseCompilerDiagnostics:
    def test_error_line(self):
        stderr = "/tmp/x/program.c:3:5: error: expected ';' before '}' token\n"
        assert parse_compiler_diagnostics(stderr) == [
            Diagnostic(line=3, message="error: expected ';' before '}' token")
        ]

    def test_warning_and_fatal_error(self):
        stderr = (
            "program.c:1:10: fatal error: foo.h: No such file or directory\n"
            "program.c:4:3: warning: unused variable 'x'\n"
        )
        diags = parse_compiler_diagnostics(stderr)
        assert [d.line for d in diags] == [1, 4]
        assert diags[0].message == "fatal error: foo.h: No such file or directory"
        assert diags[1].message.startswith("warning:")

    def test_notes_and_excerpts_ignored(self):
        stderr = (
            "program.c: In function 'main':\n"
            "program.c:2:1: note: declared here\n"
            "    2 | int x\n"
            "      |     ^\n"
        )
        assert parse_compiler_diagnostics(stderr) == []


class TestParseNodeError:
    def test_uncaught_error_with_location(self):
        stderr = (
            "/tmp/minicompiler-abc/program.js:2\n"
            "    throw new Error('boom');\n"
            "    ^\n"
            "\n"
            "Error: boom\n"
            "    at Object.<anonymous> (/tmp/minicompiler-abc/program.js:2:11)\n"
        )
        assert parse_node_error(stderr) == [Diagnostic(line=2, message="Error: boom")]

    def test_unrecognised_text_kept_raw(self):
        assert parse_node_error("something odd\n") == [
            Diagnostic(line=0, message="something odd")
        ]

    def test_empty_stderr(self):
        assert parse_node_error("") == []


class TestGccToolchain:
    def test_compile_then_run(self):
        runner = FakeRunner((0, "", ""), (0, "hello\n", ""))
        config = ToolchainConfig(c_flags=("-Wall",), run_timeout=2.0)
        result = GccToolchain(config, runner=runner).run("int main() { return 0; }")
        assert result.output == "hello\n"
        assert result.diagnostics == []
        compile_call, run_call = runner.calls
        assert compile_call["command"][:2] == ["gcc", "-Wall"]
        assert compile_call["timeout"] == config.compile_timeout
        assert run_call["stdin"] == subprocess.DEVNULL
        assert run_call["timeout"] == 2.0

    def test_source_written_to_temp_dir_which_is_removed(self):
        seen = {}

        def runner(command, **kwargs):
            source_path = command[-3]
            with open(source_path, encoding="utf-8") as fh:
                seen["source"] = fh.read()
            seen["cwd"] = kwargs["cwd"]
            return subprocess.CompletedProcess(command, 1, "", "")

        GccToolchain(ToolchainConfig(), runner=runner).run("int x;")
        assert seen["source"] == "int x;"
        assert not os.path.exists(seen["cwd"])

    def test_compile_errors_stop_before_run(self):
        stderr = "/tmp/x/program.c:1:22: error: expected ';' before '}' token\n"
        runner = FakeRunner((1, "", stderr))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() { return 0 }")
        assert len(runner.calls) == 1
        assert result.output is None
        assert result.diagnostics == [
            Diagnostic(line=1, message="error: expected ';' before '}' token")
        ]

    def test_unparsed_compile_failure_becomes_raw_diagnostic(self):
        runner = FakeRunner((1, "", "collect2: error: ld returned 1 exit status\n"))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int f();")
        assert result.diagnostics == [
            Diagnostic(line=0, message="collect2: error: ld returned 1 exit status")
        ]

    def test_warnings_kept_alongside_output(self):
        warning = "program.c:2:7: warning: unused variable 'y'\n"
        runner = FakeRunner((0, "", warning), (0, "ok\n", ""))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() {}")
        assert result.output == "ok\n"
        assert [d.line for d in result.diagnostics] == [2]

    def test_missing_compiler(self):
        runner = FakeRunner(FileNotFoundError(2, "No such file or directory"))
        config = ToolchainConfig(c_compiler="no-such-cc")
        result = GccToolchain(config, runner=runner).run("int main() {}")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].line == 0
        assert "no-such-cc" in result.diagnostics[0].message

    def test_compile_timeout(self):
        runner = FakeRunner(subprocess.TimeoutExpired(["gcc"], 10.0))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() {}")
        assert [d.message for d in result.diagnostics] == ["compilation timed out"]

    def test_run_timeout_keeps_partial_output(self):
        runner = FakeRunner(
            (0, "", ""),
            subprocess.TimeoutExpired(["program"], 5.0, output="partial"),
        )
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() { for(;;); }")
        assert [d.message for d in result.diagnostics] == ["execution timed out"]
        assert result.output == "partial"

    def test_non_zero_exit_reported(self):
        runner = FakeRunner((0, "", ""), (3, "before\n", ""))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() { return 3; }")
        assert result.output == "before\n"
        assert result.diagnostics == [
            Diagnostic(line=0, message="program exited with status 3")
        ]

    def test_stderr_of_clean_exit_reported(self):
        runner = FakeRunner((0, "", ""), (0, "hi\n", "oops\n"))
        result = GccToolchain(ToolchainConfig(), runner=runner).run("int main() {}")
        assert result.output == "hi\n"
        assert result.diagnostics == [Diagnostic(line=0, message="oops")]

    def test_execute_disabled(self):
        runner = FakeRunner((0, "", ""))
        config = ToolchainConfig(execute=False)
        result = GccToolchain(config, runner=runner).run("int main() {}")
        assert len(runner.calls) == 1
        assert result.output is None

    @pytest.mark.skipif(shutil.which("gcc") is None, reason="gcc not installed")
    def test_real_gcc(self):
        source = '#include <stdio.h>\nint main() { printf("hi\\n"); return 0; }\n'
        result = GccToolchain(ToolchainConfig()).run(source)
        assert result.diagnostics == []
        assert result.output == "hi\n"

    @pytest.mark.skipif(shutil.which("gcc") is None, reason="gcc not installed")
    def test_real_gcc_stderr_kept(self):
        source = (
            "#include <stdio.h>\n"
            'int main() { fprintf(stderr, "oops\\n"); printf("hi\\n"); return 0; }\n'
        )
        result = GccToolchain(ToolchainConfig()).run(source)
        assert result.output == "hi\n"
        assert result.diagnostics == [Diagnostic(line=0, message="oops")]

    @pytest.mark.skipif(shutil.which("gcc") is None, reason="gcc not installed")
    def test_real_gcc_error_line(self):
        result = GccToolchain(ToolchainConfig()).run("int main() {\n  return 0\n}\n")
        assert result.diagnostics
        assert result.diagnostics[0].message.startswith("error")
        assert result.output is None


class TestNodeToolchain:
    def test_runs_script(self):
        runner = FakeRunner((0, "3\n", ""))
        result = NodeToolchain(ToolchainConfig(), runner=runner).run("console.log(3);")
        assert result.output == "3\n"
        assert result.diagnostics == []
        (call,) = runner.calls
        assert call["command"][0] == "node"
        assert call["command"][1].endswith("program.js")

    def test_console_error_joins_output(self):
        runner = FakeRunner((0, "out\n", "warned\n"))
        result = NodeToolchain(ToolchainConfig(), runner=runner).run("console.error('warned');")
        assert result.output == "out\nwarned\n"
        assert result.diagnostics == []

    def test_uncaught_error(self):
        stderr = "/tmp/t/program.js:1\nthrow new TypeError('bad');\n^\n\nTypeError: bad\n"
        runner = FakeRunner((1, "", stderr))
        result = NodeToolchain(ToolchainConfig(), runner=runner).run("throw new TypeError('bad');")
        assert result.diagnostics == [Diagnostic(line=1, message="TypeError: bad")]

    def test_missing_runtime(self):
        runner = FakeRunner(FileNotFoundError(2, "No such file or directory"))
        result = NodeToolchain(ToolchainConfig(js_runtime="nodejs-x"), runner=runner).run("1;")
        assert len(result.diagnostics) == 1
        assert "nodejs-x" in result.diagnostics[0].message

    def test_execute_disabled(self):
        runner = FakeRunner()
        result = NodeToolchain(ToolchainConfig(execute=False), runner=runner).run("1;")
        assert runner.calls == []
        assert result.output is None

    @pytest.mark.skipif(shutil.which("node") is None, reason="node not installed")
    def test_real_node(self):
        result = NodeToolchain(ToolchainConfig()).run("console.log(1 + 2);")
        assert result.diagnostics == []
        assert result.output == "3\n"


class TestGetToolchain:
    def test_known_languages(self):
        assert isinstance(get_toolchain("c"), GccToolchain)
        assert isinstance(get_toolchain("javascript"), NodeToolchain)

    def test_unknown_language_raises(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            get_toolchain("cobol")

    def test_null_toolchain(self):
        result = NullToolchain().run("anything")
        assert result.diagnostics == []
        assert result.output is None
